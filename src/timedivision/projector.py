"""Render the time division panel and put it into the host document."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from .models import Aggregate
from .schema import HostSchema

log = logging.getLogger(__name__)

PANEL_TITLE = "Time division"


def format_minutes(total: int) -> str:
    """Format minutes as 'Xmin' or 'Xh Ymin' (remainder shown even when 0)."""
    hours, minutes = divmod(total, 60)
    if hours:
        return f"{hours}h {minutes}min"
    return f"{minutes}min"


def summary_lines(aggregate: Aggregate) -> list[str]:
    return [f"{name}: {format_minutes(entry.total_minutes)}" for name, entry in aggregate.items()]


def _build_panel(soup: BeautifulSoup, schema: HostSchema) -> Tag:
    panel = soup.new_tag(
        "div",
        attrs={"id": schema.panel_id, "class": ["box", "box-small", "box-lighter", "box-border-bottom"]},
    )

    title = soup.new_tag("h3", attrs={"class": ["small", "no-margin-top"]})
    title.append(PANEL_TITLE)

    # Refresh affordance: activating it recomputes without the debounce delay
    refresh_wrapper = soup.new_tag("div", attrs={"class": ["float-end"]})
    refresh = soup.new_tag("a", attrs={"class": ["btn-icon"], "href": "#"})
    icon = soup.new_tag("i", attrs={"class": ["fa-sm", "fa-solid", "fa-history"], "aria-hidden": "true"})
    refresh.append(icon)
    refresh_wrapper.append(refresh)
    title.append(refresh_wrapper)

    panel.append(title)
    panel.append(soup.new_tag("div", attrs={"id": schema.rows_id}))
    return panel


def _build_row(soup: BeautifulSoup, name: str, total: int, avatar: str) -> Tag:
    row = soup.new_tag("div", attrs={"class": ["category-row", "d-flex"], "style": "margin-bottom: 8px"})

    user = soup.new_tag("span", attrs={"class": ["user", "user-inline"], "style": "margin-right: 0.5rem"})
    user.append(soup.new_tag("img", attrs={"class": ["gravatar"], "height": "18", "alt": name, "src": avatar}))

    time_wrapper = soup.new_tag("span")
    name_node = soup.new_tag("b")
    name_node.string = f"{name}: "
    time_node = soup.new_tag("small")
    time_node.string = format_minutes(total)
    time_wrapper.append(name_node)
    time_wrapper.append(time_node)

    row.append(user)
    row.append(time_wrapper)
    return row


def render(
    aggregate: Aggregate,
    soup: BeautifulSoup,
    schema: HostSchema | None = None,
    panel: Tag | None = None,
) -> Tag:
    """Return the summary panel with one row per facilitator.

    The panel is reused when one is passed in or already exists in *soup*;
    only its rows are replaced.
    """
    schema = schema or HostSchema()
    if panel is None:
        panel = soup.find(id=schema.panel_id)
    if panel is None:
        log.debug("Creating time division panel")
        panel = _build_panel(soup, schema)

    rows = panel.find(id=schema.rows_id)
    if rows is None:
        rows = soup.new_tag("div", attrs={"id": schema.rows_id})
        panel.append(rows)

    rows.clear()
    for name, entry in aggregate.items():
        rows.append(_build_row(soup, name, entry.total_minutes, entry.avatar))
    return panel


def place(panel: Tag, anchor: Tag, position: int = 1) -> bool:
    """Insert *panel* as the element child at *position* of *anchor*.

    Returns False when the panel is already there and nothing was moved.
    """
    elements = [child for child in anchor.children if isinstance(child, Tag)]
    others = [child for child in elements if child is not panel]
    target = min(position, len(others))

    for index, child in enumerate(elements):
        if child is panel and index == target:
            return False

    panel.extract()
    if target < len(others):
        others[target].insert_before(panel)
    else:
        anchor.append(panel)
    return True
