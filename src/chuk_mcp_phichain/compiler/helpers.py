"""
Helpers for working with event sequences.

Diagrams in the docstrings use:

    |========|  events
    |--------|  linear events
    |~~~~~~~~|  non-linear events
    ||||||||||  many 1/32 events
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from chuk_mcp_phichain.compiler.sequence import evaluate, sorted_events
from chuk_mcp_phichain.constants import EVENT_VALUE_EPSILON, MINIMUM_BEAT_DENOMINATOR
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.easing import Easing
from chuk_mcp_phichain.errors import DifferentKindError, OverlapError
from chuk_mcp_phichain.models.event import Constant, LineEvent, LineEventKind, Transition

logger = logging.getLogger(__name__)

# Resolution of sliced and resampled events
MINIMUM_BEAT = Beat.of(0, 1, MINIMUM_BEAT_DENOMINATOR)


def check_overlap(events: Sequence[LineEvent]) -> None:
    """
    Raise OverlapError if any two events overlap.

        |   |=====|      |=====|        ok
        |   |=====|                     overlap
        |       |======|
    """
    ordered = sorted_events(events)
    for a, b in zip(ordered, ordered[1:]):
        if a.end_beat > b.start_beat:
            raise OverlapError(b.start_beat)


def ensure_same_kind(events: Sequence[LineEvent]) -> LineEventKind | None:
    """
    Return the kind shared by all events, or None for an empty sequence.

    Raises:
        DifferentKindError: If the events differ in kind
    """
    if not events:
        return None
    kind = events[0].kind
    if any(event.kind != kind for event in events[1:]):
        raise DifferentKindError()
    return kind


def fill_gap_until(events: Sequence[LineEvent], until: Beat, default: float) -> list[LineEvent]:
    """
    Fill every gap from beat 0 up to `until` with constant events.

    A gap holds the end value of the event before it (`default` before the
    first event).

        0                                          until
        |      |=====|      |=====|       |=====|    |
        |------|=====|------|=====|-------|=====|----|
    """
    kind = ensure_same_kind(events)
    if kind is None:
        return []
    check_overlap(events)

    last_end = Beat.ZERO
    last_value = default
    filled: list[LineEvent] = []

    for event in sorted_events(events):
        if event.start_beat > last_end:
            filled.append(LineEvent.constant(kind, last_end, event.start_beat, last_value))
        filled.append(event)
        last_end = event.end_beat
        last_value = event.value.end

    if last_end < until:
        filled.append(LineEvent.constant(kind, last_end, until, last_value))

    return filled


def fill_gap(events: Sequence[LineEvent], default: float) -> list[LineEvent]:
    """Fill every gap from beat 0 up to the end of the last event."""
    until = max((event.end_beat for event in events), default=Beat.ZERO)
    return fill_gap_until(events, until, default)


def _slice(event: LineEvent, start: Beat, end: Beat, minimum: Beat) -> list[LineEvent]:
    """Resample an event into linear slices of at most `minimum` beats."""
    sliced = []
    current = start
    while current < end:
        next_beat = min(current + minimum, end)
        sliced.append(
            LineEvent.transition(
                event.kind,
                current,
                next_beat,
                event.value_at(current),
                event.value_at(next_beat),
                Easing.LINEAR,
            )
        )
        current = next_beat
    return sliced


def cut(event: LineEvent, minimum: Beat = MINIMUM_BEAT, force_linear: bool = False) -> list[LineEvent]:
    """
    Cut an event into small linear segments.

    - constant events are returned unchanged
    - linear events are returned unchanged unless `force_linear` is set
    - non-linear events with equal start and end become a constant
    - everything else is cut into `minimum`-beat linear slices

        |~~~~~~~~~~~~~~~~~~~~~~~~| (sine)
        |||||||||||||||||||||||||| (linear)
    """
    value = event.value
    if isinstance(value, Constant):
        return [event]
    if value.easing == Easing.LINEAR and not force_linear:
        return [event]
    if value.start == value.end:
        return [event.with_value(Constant(value.start))]
    return _slice(event, event.start_beat, event.end_beat, minimum)


def clamp(events: Sequence[LineEvent], min_beat: Beat, max_beat: Beat) -> list[LineEvent]:
    """
    Clamp an event sequence to [min_beat, max_beat].

        0          min                     max
        |====|====|-------|=====|~~~~~~~~~~~~~~~|=====|
                  |---|=====|||||||||

    Linear events crossing a bound are shortened, non-linear events are
    cut first and their outside slices dropped. Events entirely outside
    the bounds are dropped.
    """
    check_overlap(events)
    clamped: list[LineEvent] = []

    for event in sorted_events(events):
        if event.end_beat <= min_beat or event.start_beat >= max_beat:
            continue

        if event.start_beat < min_beat or event.end_beat > max_beat:
            value = event.value
            if isinstance(value, Transition) and value.start == value.end:
                event = event.with_value(Constant(value.start))
                value = event.value

            if isinstance(value, Transition) and value.easing != Easing.LINEAR:
                clamped.extend(
                    segment
                    for segment in cut(event)
                    if segment.start_beat >= min_beat and segment.end_beat <= max_beat
                )
                continue

            start_beat = max(event.start_beat, min_beat)
            end_beat = min(event.end_beat, max_beat)
            if isinstance(value, Transition):
                event = LineEvent.transition(
                    event.kind,
                    start_beat,
                    end_beat,
                    event.value_at(start_beat),
                    event.value_at(end_beat),
                    Easing.LINEAR,
                )
            else:
                event = LineEvent(event.kind, start_beat, end_beat, value)

        if event.start_beat == event.end_beat:
            continue
        clamped.append(event)

    return clamped


def clamp_max(events: Sequence[LineEvent], max_beat: Beat) -> list[LineEvent]:
    """Clamp from beat 0 to `max_beat`."""
    return clamp(events, Beat.ZERO, max_beat)


def clamp_min(events: Sequence[LineEvent], min_beat: Beat) -> list[LineEvent]:
    """Clamp from `min_beat` to the end of the last event."""
    until = max((event.end_beat for event in events), default=Beat.ZERO)
    return clamp(events, min_beat, until)


def _overlapping_groups(events: list[LineEvent]) -> list[list[LineEvent]]:
    groups: list[list[LineEvent]] = []
    latest_end: Beat | None = None
    for event in sorted_events(events):
        if latest_end is not None and event.start_beat < latest_end:
            groups[-1].append(event)
            latest_end = max(latest_end, event.end_beat)
        else:
            groups.append([event])
            latest_end = event.end_beat
    return groups


def merge(a: Sequence[LineEvent], b: Sequence[LineEvent]) -> list[LineEvent]:
    """
    Merge two sequences of one kind, summing values where they overlap.

        |              |-----|      |~~~~~|
        |     |=====|      |-----|     |~~~~~~~~|
        |     |=====|  |||||||||||  ||||||||||||

    Overlapping groups are resampled into 1/32 linear slices.
    """
    if not a:
        return list(b)
    if not b:
        return list(a)

    merged: list[LineEvent] = []
    for group in _overlapping_groups([*a, *b]):
        if len(group) == 1:
            merged.append(group[0])
            continue

        start = min(event.start_beat for event in group)
        end = max(event.end_beat for event in group)
        logger.debug("Merging %d overlapping events over %s..%s", len(group), start, end)

        current = start
        while current < end:
            next_beat = min(current + MINIMUM_BEAT, end)
            merged.append(
                LineEvent.transition(
                    group[0].kind,
                    current,
                    next_beat,
                    evaluate(a, current) + evaluate(b, current),
                    evaluate(a, next_beat) + evaluate(b, next_beat),
                    Easing.LINEAR,
                )
            )
            current = next_beat

    return merged


def are_contiguous(a: LineEvent, b: LineEvent) -> bool:
    """
    True when one event ends exactly where the other starts.

    Both the beat and the value must meet, in either order.
    """

    def meets(first: LineEvent, second: LineEvent) -> bool:
        return (
            first.end_beat == second.start_beat
            and abs(first.value.end - second.value.start) < EVENT_VALUE_EPSILON
        )

    return meets(a, b) or meets(b, a)
