"""
Event sequence evaluation.

A sequence is a list of LineEvents. Evaluating a sequence scans the events
in start beat order and keeps the value of the last one that contributes,
so later events override earlier ones. Beats no event has reached evaluate
to 0.
"""

from __future__ import annotations

from collections.abc import Iterable

from chuk_mcp_phichain.constants import BoundaryMode
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind


def evaluate(events: Iterable[LineEvent], beat: Beat, mode: BoundaryMode = "inclusive") -> float:
    """
    Evaluate a sequence at a beat.

    Args:
        events: Events of a single kind
        beat: Beat to sample
        mode: Boundary mode passed to each event

    Returns:
        The value of the last contributing event, or 0.0
    """
    result = 0.0
    position = beat.value()
    for event in sorted_events(events):
        value = event.evaluate(position, mode)
        if value is not None:
            result = value
    return result


def evaluate_exclusive(events: Iterable[LineEvent], beat: Beat) -> float:
    """Evaluate a sequence where an event's start beat has no effect."""
    return evaluate(events, beat, "exclusive")


def of_kind(events: Iterable[LineEvent], kind: LineEventKind) -> list[LineEvent]:
    """Filter a sequence down to one kind, keeping order."""
    return [event for event in events if event.kind == kind]


def group_by_kind(events: Iterable[LineEvent]) -> dict[LineEventKind, list[LineEvent]]:
    """Group events by kind, keeping order within each group."""
    groups: dict[LineEventKind, list[LineEvent]] = {}
    for event in events:
        groups.setdefault(event.kind, []).append(event)
    return groups


def sorted_events(events: Iterable[LineEvent]) -> list[LineEvent]:
    """Sort by start beat (stable)."""
    return sorted(events, key=lambda event: event.start_beat)


def split_points(events: Iterable[LineEvent]) -> list[Beat]:
    """Every beat where an event starts or ends, sorted and unique."""
    points: set[Beat] = set()
    for event in events:
        points.add(event.start_beat)
        points.add(event.end_beat)
    return sorted(points)
