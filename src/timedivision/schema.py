"""Selectors describing where things live in the host application's markup.

The defaults match SessionLab's session planner. Another host (or a future
SessionLab redesign) only needs a different ``HostSchema``, supplied through
the ``schema`` section of the config file.
"""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class HostSchema:
    # Observed side
    root_selector: str = "#main-panel"
    watch_scope_selector: str = "#react-header-left"
    grouping_selector: str = ".block-users"
    duration_selector: str = ".FuzzyDurationTimeInput span"
    duration_field_tag: str = "b"
    participant_class: str = "user-inline"
    avatar_selector: str = "img"
    reassign_selector: str = ".user-edit a[role='button'], .user-edit a[role='button'] *"

    # Written side
    anchor_selector: str = "#vertical-tabs-tabpane-info > *"
    anchor_position: int = 1
    panel_id: str = "time-division"
    rows_id: str = "time-division-users"


def schema_from_mapping(raw: dict | None) -> HostSchema:
    """Build a HostSchema from a config mapping, keeping defaults for missing keys."""
    if not raw:
        return HostSchema()
    if not isinstance(raw, dict):
        raise ValueError("'schema' must be a mapping of selector overrides")

    known = {f.name for f in fields(HostSchema)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown schema key(s): {', '.join(unknown)}")

    kwargs: dict = {}
    for key, value in raw.items():
        if key == "anchor_position":
            kwargs[key] = int(value)
        else:
            kwargs[key] = str(value)
    return HostSchema(**kwargs)
