"""Tests for the lab catalog."""

import pytest

from adaptlab._catalog import LabDef, LazyMap, all_labs, find_lab
from adaptlab._compute import ComputeDemand


def test_catalog_order() -> None:
    assert [lab.name().text for lab in all_labs()] == [
        "list-lazy-map",
        "list-lazy-filter",
        "list-tree",
        "list-tree-max",
        "list-tree-sum",
        "list-eager-mergesort",
        "list-lazy-mergesort",
        "list-eager-map",
        "list-eager-filter",
        "list-reverse",
    ]


def test_names_are_unique() -> None:
    names = [lab.name() for lab in all_labs()]
    assert len(set(names)) == len(names)


def test_demand_driven_labs() -> None:
    lazy = {lab.name().text for lab in all_labs() if isinstance(lab, LabDef) and isinstance(lab.computer, ComputeDemand)}
    assert lazy == {"list-lazy-map", "list-lazy-filter", "list-lazy-mergesort"}


def test_find_lab() -> None:
    lab = find_lab("list-lazy-map")
    assert isinstance(lab, LabDef)
    assert isinstance(lab.computer, LazyMap)
    assert lab.url() is None


def test_find_unknown_lab() -> None:
    with pytest.raises(KeyError, match="Known labs: list-lazy-map, list-lazy-filter"):
        find_lab("list-sideways")
