"""Probabilistically balanced trees built from lists, and folds over them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from adaptlab._engine import Art, Name, name_fork, name_level, name_of_usize, name_pair

from ._list import NIL, ArtList, Cons, List, Named, Nil

if TYPE_CHECKING:
    from collections.abc import Callable

    from adaptlab._engine import ExecutionContext

_TOP_LEVEL = 1 << 16


@dataclass(frozen=True, slots=True)
class Empty:
    pass


@dataclass(frozen=True, slots=True)
class Leaf:
    elm: Any


@dataclass(frozen=True, slots=True)
class Bin:
    left: Tree
    right: Tree


@dataclass(frozen=True, slots=True)
class NamedBin:
    name: Name
    level: int
    left: Tree
    right: Tree


@dataclass(frozen=True, slots=True)
class TreeArt:
    art: Art


type Tree = Empty | Leaf | Bin | NamedBin | TreeArt

EMPTY = Empty()


def tree_of_list(ctx: ExecutionContext, lst: List) -> Tree:
    """Build a balanced tree whose in-order leaves are the elements of `lst`.

    Each named boundary of the list gets a level derived from its name;
    elements have level 0. A boundary becomes a `NamedBin` whose subtrees
    are memoized under its name, so after an edit only the spine above the
    changed boundary is rebuilt.
    """
    tree, _ = _tree_of_list_rec(ctx, lst, EMPTY, 0, _TOP_LEVEL)
    return tree


def _tree_of_list_rec(
    ctx: ExecutionContext,
    lst: List,
    tree: Tree,
    tree_lev: int,
    parent_lev: int,
) -> tuple[Tree, List]:
    while True:
        match lst:
            case Nil():
                return tree, lst
            case ArtList(art):
                lst = ctx.force(art)
            case Cons(head, tail):
                if not tree_lev <= 0 <= parent_lev:
                    return tree, lst
                right, lst = _tree_of_list_rec(ctx, tail, Leaf(head), 0, 0)
                tree = _join(tree, right)
                tree_lev = 0
            case Named(name, tail):
                lev = name_level(name) + 1
                if not tree_lev <= lev <= parent_lev:
                    return tree, lst
                nm1, nm2 = name_fork(name)
                right, lst = ctx.memo(nm1, _tree_of_list_rec, tail, EMPTY, 0, lev)
                tree = TreeArt(ctx.cell(nm2, NamedBin(name, lev, tree, right)))
                tree_lev = lev


def _join(left: Tree, right: Tree) -> Tree:
    if isinstance(left, Empty):
        return right
    if isinstance(right, Empty):
        return left
    return Bin(left, right)


def tree_to_data(ctx: ExecutionContext, tree: Tree) -> Any:
    """Force a tree into plain nested data.

    Leaves become their element, binary nodes 2-tuples, named nodes
    ``(name, left, right)`` and the empty tree None.
    """
    match tree:
        case Empty():
            return None
        case Leaf(elm):
            return elm
        case Bin(left, right):
            return (tree_to_data(ctx, left), tree_to_data(ctx, right))
        case NamedBin(name, _, left, right):
            return (name.text, tree_to_data(ctx, left), tree_to_data(ctx, right))
        case TreeArt(art):
            return tree_to_data(ctx, ctx.force(art))


def monoid_of_tree(ctx: ExecutionContext, tree: Tree, zero: Any, op: Callable[[Any, Any], Any]) -> Any:
    """Fold a tree with an associative operation, memoizing at named nodes."""
    match tree:
        case Empty():
            return zero
        case Leaf(elm):
            return elm
        case Bin(left, right):
            return op(monoid_of_tree(ctx, left, zero, op), monoid_of_tree(ctx, right, zero, op))
        case NamedBin(name, _, left, right):
            nm1, nm2 = name_fork(name)
            a = ctx.memo(nm1, monoid_of_tree, left, zero, op)
            b = ctx.memo(nm2, monoid_of_tree, right, zero, op)
            return op(a, b)
        case TreeArt(art):
            return monoid_of_tree(ctx, ctx.force(art), zero, op)


# ---------------------------------------------------------------------------
# Mergesort
# ---------------------------------------------------------------------------


def mergesort_list_of_tree(ctx: ExecutionContext, tree: Tree) -> List:
    """Sort the leaves of a tree into a list.

    Sorted sublists of named nodes are memoized under the node's name, and the
    merge of two of them is lazy: each merged element is followed by a
    boundary named ``(name,k)`` behind a thunk that produces the rest.
    """
    match tree:
        case Empty():
            return NIL
        case Leaf(elm):
            return Cons(elm, NIL)
        case Bin(left, right):
            return list_merge(ctx, None, mergesort_list_of_tree(ctx, left), mergesort_list_of_tree(ctx, right), 0)
        case NamedBin(name, _, left, right):
            nm1, nm2 = name_fork(name)
            sorted_left = ctx.memo(nm1, mergesort_list_of_tree, left)
            sorted_right = ctx.memo(nm2, mergesort_list_of_tree, right)
            return list_merge(ctx, name, sorted_left, sorted_right, 0)
        case TreeArt(art):
            return mergesort_list_of_tree(ctx, ctx.force(art))


def list_merge(ctx: ExecutionContext, name: Name | None, l1: List, l2: List, k: int) -> List:
    """Merge two sorted lists; lazily after each element when `name` is given."""
    l1 = _skip_boundaries(ctx, l1)
    l2 = _skip_boundaries(ctx, l2)
    match l1, l2:
        case Nil(), _:
            return l2
        case _, Nil():
            return l1
        case Cons(h1, t1), Cons(h2, _) if h1 <= h2:
            head, l1 = h1, t1
        case _, Cons(h2, t2):
            head, l2 = h2, t2
    if name is None:
        return Cons(head, list_merge(ctx, None, l1, l2, k))
    nm = name_pair(name, name_of_usize(k))
    return Cons(head, Named(nm, ArtList(ctx.thunk(nm, list_merge, name, l1, l2, k + 1))))


def _skip_boundaries(ctx: ExecutionContext, lst: List) -> List:
    while True:
        match lst:
            case Named(_, tail):
                lst = tail
            case ArtList(art):
                lst = ctx.force(art)
            case _:
                return lst
