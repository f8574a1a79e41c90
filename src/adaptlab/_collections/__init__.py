"""List and tree computations over named, cacheable boundaries."""

from ._list import (
    NIL,
    ArtList,
    Cons,
    List,
    Named,
    Nil,
    list_art,
    list_cons,
    list_demand,
    list_filter_eager,
    list_filter_lazy,
    list_map_eager,
    list_map_lazy,
    list_name,
    list_names,
    list_nil,
    list_reverse,
    list_to_tuple,
)
from ._tree import (
    EMPTY,
    Bin,
    Empty,
    Leaf,
    NamedBin,
    Tree,
    TreeArt,
    list_merge,
    mergesort_list_of_tree,
    monoid_of_tree,
    tree_of_list,
    tree_to_data,
)

__all__ = [
    "EMPTY",
    "NIL",
    "ArtList",
    "Bin",
    "Cons",
    "Empty",
    "Leaf",
    "List",
    "Named",
    "NamedBin",
    "Nil",
    "Tree",
    "TreeArt",
    "list_art",
    "list_cons",
    "list_demand",
    "list_filter_eager",
    "list_filter_lazy",
    "list_map_eager",
    "list_map_lazy",
    "list_merge",
    "list_name",
    "list_names",
    "list_nil",
    "list_reverse",
    "list_to_tuple",
    "mergesort_list_of_tree",
    "monoid_of_tree",
    "tree_of_list",
    "tree_to_data",
]
