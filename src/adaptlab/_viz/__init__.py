"""Rendering of reflected engine state and of lab reports."""

from ._div import (
    Div,
    css_ident,
    div_of_alloc_tree,
    div_of_edge,
    div_of_edge_trees,
    div_of_force_tree,
    div_of_loc,
    div_of_name,
    div_of_oploc,
    div_of_path,
    div_of_succ,
    div_of_trace,
    div_of_value_tree,
)
from ._html import html_of_div
from ._report import render_index_page, render_lab_page, url_for_lab, write_report

__all__ = [
    "Div",
    "css_ident",
    "div_of_alloc_tree",
    "div_of_edge",
    "div_of_edge_trees",
    "div_of_force_tree",
    "div_of_loc",
    "div_of_name",
    "div_of_oploc",
    "div_of_path",
    "div_of_succ",
    "div_of_trace",
    "div_of_value_tree",
    "html_of_div",
    "render_index_page",
    "render_lab_page",
    "url_for_lab",
    "write_report",
]
