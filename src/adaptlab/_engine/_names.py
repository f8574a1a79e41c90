"""Names and locations identifying allocations in the dependency graph."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

_MAX_LEVEL = 30


@dataclass(frozen=True, slots=True)
class Name:
    """A stable identifier for a cell or thunk.

    Two allocations with equal names (in the same namespace path) denote the
    same location across runs; this is what lets the incremental engine
    recognize reuse after an edit.
    """

    text: str

    def __str__(self) -> str:
        return self.text


def name_of_usize(i: int) -> Name:
    return Name(str(i))


def name_of_str(s: str) -> Name:
    return Name(s)


def name_pair(a: Name, b: Name) -> Name:
    return Name(f"({a.text},{b.text})")


def name_fork(n: Name) -> tuple[Name, Name]:
    """Split a name into two distinct names derived from it."""
    return Name(f"{n.text}.L"), Name(f"{n.text}.R")


def name_of_hash(obj: object) -> Name:
    """Derive a name from content.

    The digest is computed over ``repr(obj)`` so it is stable across processes,
    unlike the builtin ``hash``.
    """
    digest = hashlib.blake2b(repr(obj).encode(), digest_size=8).hexdigest()
    return Name(f"#{digest}")


def name_level(name: Name) -> int:
    """Return a deterministic pseudo-random level for a name.

    The level is the number of trailing zero bits of the name's digest, so
    roughly half of all names have level 0, a quarter level 1, and so on.
    """
    digest = hashlib.blake2b(name.text.encode(), digest_size=8).digest()
    value = int.from_bytes(digest, "little")
    if value == 0:
        return _MAX_LEVEL
    level = (value & -value).bit_length() - 1
    return min(level, _MAX_LEVEL)


@dataclass(frozen=True, slots=True)
class Loc:
    """A location in the dependency graph: namespace path plus name."""

    path: tuple[Name, ...]
    name: Name

    def __str__(self) -> str:
        return f"{string_of_path(self.path)}/{self.name}"


def string_of_path(path: tuple[Name, ...]) -> str:
    return ".".join(n.text for n in path)
