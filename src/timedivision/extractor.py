"""Extract session blocks from the planner and total them per facilitator."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from bs4 import Tag

from .models import Aggregate, ParticipantRef, ParticipantTotal, TimeBlock
from .schema import HostSchema

log = logging.getLogger(__name__)

_LEADING_DIGITS_RE = re.compile(r"^\s*(\d+)")


def parse_field(text: str | None) -> int:
    """Parse the leading digits of a duration field; anything else counts as 0."""
    if not text:
        return 0
    match = _LEADING_DIGITS_RE.match(text)
    if not match:
        return 0
    return int(match.group(1))


def parse_duration(fields: list[str]) -> int:
    """Convert duration fields to minutes.

    One field is minutes. With two fields the first is hours and the last is
    minutes. No fields at all is a zero-length block.
    """
    if not fields:
        return 0
    minutes = parse_field(fields[-1])
    if len(fields) > 1:
        minutes += parse_field(fields[0]) * 60
    return minutes


def _previous_element(node: Tag) -> Tag | None:
    for sibling in node.previous_siblings:
        if isinstance(sibling, Tag):
            return sibling
    return None


def duration_for(grouping: Tag, schema: HostSchema) -> int | None:
    """Duration of the block a grouping belongs to, or None if it has none.

    The duration input sits in the element right before the grouping.
    """
    header = _previous_element(grouping)
    if header is None:
        return None
    length_node = header.select_one(schema.duration_selector)
    if length_node is None:
        return None
    fields = [b.get_text() for b in length_node.find_all(schema.duration_field_tag)]
    return parse_duration(fields)


def participants_in(grouping: Tag, schema: HostSchema) -> list[ParticipantRef]:
    participants: list[ParticipantRef] = []
    for child in grouping.children:
        if not isinstance(child, Tag):
            continue
        # Skip decorative nodes (add buttons, separators)
        if schema.participant_class not in (child.get("class") or []):
            continue
        if child.find(True) is None:
            continue

        avatar_node = child.select_one(schema.avatar_selector)
        if avatar_node is None:
            continue
        name = avatar_node.get("alt")
        if not name:
            log.debug("Skipping participant entry without a name")
            continue
        participants.append(ParticipantRef(name=name, avatar=avatar_node.get("src") or ""))
    return participants


def find_time_blocks(root: Tag, schema: HostSchema) -> list[TimeBlock]:
    blocks: list[TimeBlock] = []
    for grouping in root.select(schema.grouping_selector):
        duration = duration_for(grouping, schema)
        if duration is None:
            continue
        blocks.append(TimeBlock(duration_minutes=duration, participants=participants_in(grouping, schema)))
    return blocks


def aggregate(blocks: Iterable[TimeBlock]) -> Aggregate:
    """Sum block durations per participant. The first avatar seen for a name is kept."""
    totals: Aggregate = {}
    for block in blocks:
        for participant in block.participants:
            entry = totals.get(participant.name)
            if entry is None:
                totals[participant.name] = ParticipantTotal(
                    total_minutes=block.duration_minutes,
                    avatar=participant.avatar,
                )
            else:
                entry.total_minutes += block.duration_minutes
    return totals


def extract(root: Tag, schema: HostSchema | None = None) -> Aggregate:
    """Compute the time division for everything under *root*. Read-only."""
    schema = schema or HostSchema()
    blocks = find_time_blocks(root, schema)
    result = aggregate(blocks)
    log.debug("Extracted %d blocks, %d facilitators", len(blocks), len(result))
    return result
