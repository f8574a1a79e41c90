"""Shared page layout for adaptlab reports."""

from __future__ import annotations

from htpy import Element, Node, a, body, div, fieldset, head, header, html, input_, label, legend, meta, nav, script, style, title
from markupsafe import Markup

from ._css import CSS, TOGGLE_JS

# (checkbox id, label, selector, display when shown)
_TOGGLES = (
    ("toggle-paths", "paths", ".path", "inline-block"),
    ("toggle-names", "names", ".name", "inline"),
    ("toggle-effects", "effects", ".tr-effect", "inline"),
)


def base_page(
    *,
    page_title: str,
    heading: Node,
    content: Node,
    index_href: str | None = None,
) -> str:
    """Render a full, self-contained HTML page as a string.

    Args:
        page_title: The document title.
        heading: Content of the page header.
        content: The main content node.
        index_href: If provided, link back to the report index.

    Returns:
        Complete HTML document as a string.

    """
    page = html(lang="en")[
        _render_head(page_title),
        body[
            header[
                nav(".breadcrumbs")[a(href=index_href)["All labs"]] if index_href else None,
                div(".page-title")[heading],
            ],
            _render_toggles(),
            content,
        ],
    ]
    return f"<!DOCTYPE html>\n{page}"


def _render_head(page_title: str) -> Element:
    return head[
        meta(charset="UTF-8"),
        meta(name="viewport", content="width=device-width, initial-scale=1.0"),
        title[page_title],
        style[Markup(CSS)],  # noqa: S704
        script[Markup(TOGGLE_JS)],  # noqa: S704
    ]


def _render_toggles() -> Element:
    """Render the checkboxes that show and hide path, name and effect labels."""
    return fieldset(".toggles")[
        legend["Toggle labels:"],
        [
            [
                label(for_=checkbox_id)[text],
                input_(
                    type="checkbox",
                    id=checkbox_id,
                    onchange=f"toggleLabels(this, '{selector}', '{display}')",
                ),
            ]
            for checkbox_id, text, selector, display in _TOGGLES
        ],
    ]
