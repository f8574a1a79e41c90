"""Serialization of `Div` trees to htpy elements."""

from __future__ import annotations

from typing import TYPE_CHECKING

from htpy import Element, div

if TYPE_CHECKING:
    from ._div import Div


def html_of_div(d: Div) -> Element:
    """Convert a `Div` tree to an htpy element; text is escaped."""
    return div(class_=d.class_attr)[d.text, [html_of_div(child) for child in d.extent]]


def html_of_divs(divs: list[Div]) -> list[Element]:
    return [html_of_div(d) for d in divs]
