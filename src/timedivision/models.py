"""Data models for session blocks and per-facilitator totals."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ParticipantRef:
    name: str
    avatar: str = ""


@dataclass
class TimeBlock:
    """One session segment: its length and the facilitators assigned to it."""

    duration_minutes: int
    participants: list[ParticipantRef] = field(default_factory=list)


@dataclass
class ParticipantTotal:
    total_minutes: int
    avatar: str = ""


# Display name -> total. Insertion order is the order names were first seen.
Aggregate = dict[str, ParticipantTotal]


REASON_ACTIVATED = "activated"
REASON_MUTATION = "mutation"
REASON_REASSIGN = "reassign"
REASON_MANUAL = "manual"


@dataclass(frozen=True)
class RecomputeRequested:
    """Signal that the time division should be recalculated.

    ``immediate`` events skip the debounce window.
    """

    reason: str
    immediate: bool = False
