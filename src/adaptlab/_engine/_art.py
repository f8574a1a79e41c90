"""Handles to cells and thunks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._names import Loc

_UNSET: Any = object()


class Art:
    """A handle to a cell or a thunk.

    Under the incremental engine an art is just a location; equality is by
    location, which is what makes memo-table argument comparison cheap. Under
    the naive engine an art carries its value (a cell) or its suspended body
    (a thunk) directly, and compares by identity.
    """

    __slots__ = ("args", "fn", "loc", "value")

    def __init__(
        self,
        *,
        loc: Loc | None = None,
        value: Any = _UNSET,
        fn: Callable[..., Any] | None = None,
        args: tuple[Any, ...] = (),
    ) -> None:
        self.loc = loc
        self.value = value
        self.fn = fn
        self.args = args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Art):
            return NotImplemented
        if self.loc is not None and other.loc is not None:
            return self.loc == other.loc
        return self is other

    def __hash__(self) -> int:
        if self.loc is not None:
            return hash(self.loc)
        return id(self)

    def __repr__(self) -> str:
        if self.loc is not None:
            return f"Art({self.loc})"
        if self.fn is not None:
            return f"Art(<thunk {getattr(self.fn, '__name__', self.fn)}>)"
        return f"Art({self.value!r})"
