"""Persistent lists with named, cacheable boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from adaptlab._compute import PENDING, Forced, Pending
from adaptlab._engine import Art, Name, name_fork

if TYPE_CHECKING:
    from collections.abc import Callable

    from adaptlab._compute import Demand
    from adaptlab._engine import ExecutionContext


@dataclass(frozen=True, slots=True)
class Nil:
    pass


@dataclass(frozen=True, slots=True)
class Cons:
    head: Any
    tail: List


@dataclass(frozen=True, slots=True)
class Named:
    """A named boundary: allocations below it are keyed by `name`."""

    name: Name
    tail: List


@dataclass(frozen=True, slots=True)
class ArtList:
    """The rest of the list, behind a cell or thunk."""

    art: Art


type List = Nil | Cons | Named | ArtList

NIL = Nil()


def list_nil() -> List:
    return NIL


def list_cons(head: Any, tail: List) -> List:
    return Cons(head, tail)


def list_name(name: Name, tail: List) -> List:
    return Named(name, tail)


def list_art(art: Art) -> List:
    return ArtList(art)


# ---------------------------------------------------------------------------
# Observation
# ---------------------------------------------------------------------------


def list_to_tuple(ctx: ExecutionContext, lst: List) -> tuple[Any, ...]:
    """Force the whole list and return its elements."""
    out: list[Any] = []
    while True:
        match lst:
            case Nil():
                return tuple(out)
            case Cons(head, tail):
                out.append(head)
                lst = tail
            case Named(_, tail):
                lst = tail
            case ArtList(art):
                lst = ctx.force(art)


def list_names(ctx: ExecutionContext, lst: List) -> tuple[Name, ...]:
    """Force the whole list and return the names of its boundaries, outermost first."""
    out: list[Name] = []
    while True:
        match lst:
            case Nil():
                return tuple(out)
            case Cons(_, tail):
                lst = tail
            case Named(name, tail):
                out.append(name)
                lst = tail
            case ArtList(art):
                lst = ctx.force(art)


def list_demand(ctx: ExecutionContext, lst: List, demand: Demand) -> tuple[Forced | Pending, ...]:
    """Force at most `demand` elements of a list.

    Returns `Forced` items for the elements that were forced and a trailing
    `Pending` when the demand ran out before the end of the list. Nothing past
    the last demanded element is forced.
    """
    out: list[Forced | Pending] = []
    while True:
        if demand is not None and len(out) >= demand:
            if not isinstance(lst, Nil):
                out.append(PENDING)
            return tuple(out)
        match lst:
            case Nil():
                return tuple(out)
            case Cons(head, tail):
                out.append(Forced(head))
                lst = tail
            case Named(_, tail):
                lst = tail
            case ArtList(art):
                lst = ctx.force(art)


# ---------------------------------------------------------------------------
# Map, filter and reverse
# ---------------------------------------------------------------------------


def list_map_eager(ctx: ExecutionContext, lst: List, f: Callable[[Any], Any]) -> List:
    match lst:
        case Nil():
            return NIL
        case Cons(head, tail):
            return Cons(f(head), list_map_eager(ctx, tail, f))
        case Named(name, tail):
            nm1, nm2 = name_fork(name)
            rest = ctx.memo(nm1, list_map_eager, tail, f)
            return Named(name, ArtList(ctx.cell(nm2, rest)))
        case ArtList(art):
            return list_map_eager(ctx, ctx.force(art), f)


def list_map_lazy(ctx: ExecutionContext, lst: List, f: Callable[[Any], Any]) -> List:
    """Map lazily: the rest after each named boundary is a suspended thunk."""
    match lst:
        case Nil():
            return NIL
        case Cons(head, tail):
            return Cons(f(head), list_map_lazy(ctx, tail, f))
        case Named(name, tail):
            return Named(name, ArtList(ctx.thunk(name, list_map_lazy, tail, f)))
        case ArtList(art):
            return list_map_lazy(ctx, ctx.force(art), f)


def list_filter_eager(ctx: ExecutionContext, lst: List, pred: Callable[[Any], bool]) -> List:
    match lst:
        case Nil():
            return NIL
        case Cons(head, tail):
            rest = list_filter_eager(ctx, tail, pred)
            return Cons(head, rest) if pred(head) else rest
        case Named(name, tail):
            nm1, nm2 = name_fork(name)
            rest = ctx.memo(nm1, list_filter_eager, tail, pred)
            return Named(name, ArtList(ctx.cell(nm2, rest)))
        case ArtList(art):
            return list_filter_eager(ctx, ctx.force(art), pred)


def list_filter_lazy(ctx: ExecutionContext, lst: List, pred: Callable[[Any], bool]) -> List:
    match lst:
        case Nil():
            return NIL
        case Cons(head, tail):
            rest = list_filter_lazy(ctx, tail, pred)
            return Cons(head, rest) if pred(head) else rest
        case Named(name, tail):
            return Named(name, ArtList(ctx.thunk(name, list_filter_lazy, tail, pred)))
        case ArtList(art):
            return list_filter_lazy(ctx, ctx.force(art), pred)


def list_reverse(ctx: ExecutionContext, lst: List, acc: List) -> List:
    """Reverse `lst` onto `acc`, keeping a named boundary in the accumulator for each one in the input."""
    match lst:
        case Nil():
            return acc
        case Cons(head, tail):
            return list_reverse(ctx, tail, Cons(head, acc))
        case Named(name, tail):
            nm1, nm2 = name_fork(name)
            acc = Named(name, ArtList(ctx.cell(nm1, acc)))
            return ctx.memo(nm2, list_reverse, tail, acc)
        case ArtList(art):
            return list_reverse(ctx, ctx.force(art), acc)
