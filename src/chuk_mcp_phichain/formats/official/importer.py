"""
Official chart → authoring chart.

Each official line becomes one root line. Times are converted under the
bpm of the first line; events are tidied up (contiguous constants merged,
long constants shortened, linear runs fitted to easings) so the result is
pleasant to edit.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from chuk_mcp_phichain.compiler.fitting import fit_events
from chuk_mcp_phichain.compiler.helpers import are_contiguous
from chuk_mcp_phichain.compiler.sequence import evaluate, group_by_kind, of_kind, sorted_events
from chuk_mcp_phichain.constants import CANVAS_HEIGHT, CANVAS_WIDTH, EVENT_VALUE_EPSILON
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.bpm_list import BpmList
from chuk_mcp_phichain.errors import NoLineError, UnsupportedFormatVersionError
from chuk_mcp_phichain.formats.official.options import OfficialInputOptions
from chuk_mcp_phichain.formats.official.schema import (
    OfficialChart,
    OfficialLine,
    OfficialNote,
    OfficialNoteKind,
)
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.event import Constant, LineEvent, LineEventKind, Transition
from chuk_mcp_phichain.models.line import Line
from chuk_mcp_phichain.models.note import Note, NoteKind

logger = logging.getLogger(__name__)

SUPPORTED_FORMAT_VERSIONS = (1, 3)

# Official time unit: 1/32 beat
OFFICIAL_TIME_TO_BEAT = 1.875 / 60.0

# Official note positions: 1 unit = 1/18 canvas width
POSITION_X_UNITS = 18.0

_NOTE_KINDS = {
    OfficialNoteKind.TAP: NoteKind.TAP,
    OfficialNoteKind.DRAG: NoteKind.DRAG,
    OfficialNoteKind.HOLD: NoteKind.HOLD,
    OfficialNoteKind.FLICK: NoteKind.FLICK,
}


def t(time: float) -> Beat:
    """Official time → beat."""
    return Beat.from_float(time * OFFICIAL_TIME_TO_BEAT)


def x(value: float) -> float:
    return (value - 0.5) * CANVAS_WIDTH


def y(value: float) -> float:
    return (value - 0.5) * CANVAS_HEIGHT


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def merge_constant_events(events: list[LineEvent]) -> list[LineEvent]:
    """Extend a numerically constant event over the contiguous constant that follows it."""
    merged: list[LineEvent] = []
    for event in events:
        if merged:
            last = merged[-1]
            if (
                last.value.is_numeric_constant()
                and event.value.is_numeric_constant()
                and are_contiguous(last, event)
            ):
                merged[-1] = LineEvent(last.kind, last.start_beat, event.end_beat, last.value)
                continue
        merged.append(event)
    return merged


def _move_events(line: OfficialLine, format_version: int) -> list[LineEvent]:
    x_events = []
    y_events = []
    for event in line.move_events:
        start, end = t(event.start_time), t(event.end_time)
        if format_version == 1:
            # X and Y packed as x * 1000 + y
            x_events.append(
                LineEvent.transition(
                    LineEventKind.X,
                    start,
                    end,
                    x(_round_half_away(event.start / 1e3) / 880.0),
                    x(_round_half_away(event.end / 1e3) / 880.0),
                )
            )
            y_events.append(
                LineEvent.transition(
                    LineEventKind.Y,
                    start,
                    end,
                    y(math.fmod(event.start, 1e3) / 530.0),
                    y(math.fmod(event.end, 1e3) / 530.0),
                )
            )
        else:
            x_events.append(LineEvent.transition(LineEventKind.X, start, end, x(event.start), x(event.end)))
            y_events.append(LineEvent.transition(LineEventKind.Y, start, end, y(event.start2), y(event.end2)))
    return merge_constant_events(x_events) + merge_constant_events(y_events)


def _line_events(line: OfficialLine, format_version: int) -> list[LineEvent]:
    events = _move_events(line, format_version)
    events.extend(
        LineEvent.transition(LineEventKind.ROTATION, t(e.start_time), t(e.end_time), e.start, e.end)
        for e in line.rotate_events
    )
    events.extend(
        LineEvent.transition(
            LineEventKind.OPACITY, t(e.start_time), t(e.end_time), e.start * 255.0, e.end * 255.0
        )
        for e in line.opacity_events
    )
    events.extend(
        LineEvent.constant(LineEventKind.SPEED, t(e.start_time), t(e.end_time), e.value / 2.0 * 9.0)
        for e in line.speed_events
    )
    return events


def _map_if(
    events: list[LineEvent],
    predicate: Callable[[LineEvent], bool],
    transform: Callable[[LineEvent], LineEvent],
) -> list[LineEvent]:
    return [transform(event) if predicate(event) else event for event in events]


def _remove_redundant_constants(events: list[LineEvent]) -> list[LineEvent]:
    """Drop constants that only repeat the end value of the event before them."""
    kept: list[LineEvent] = []
    for kind_events in group_by_kind(events).values():
        previous_end: float | None = None
        for event in sorted_events(kind_events):
            redundant = (
                previous_end is not None
                and event.value.is_numeric_constant()
                and abs(event.value.start - previous_end) < EVENT_VALUE_EPSILON
            )
            previous_end = event.value.end
            if not redundant:
                kept.append(event)
    return kept


def tidy_events(events: list[LineEvent], options: OfficialInputOptions) -> list[LineEvent]:
    """
    Make imported events editable.

    1. shorten numerically constant events to `constant_event_shrink_to`
    2. fit linear runs to easings (all kinds but speed), when enabled
    3. drop constants repeating the previous end value
    4. turn numerically constant transitions into constants
    """
    shrink_to = options.constant_event_shrink_to
    events = _map_if(
        events,
        lambda e: e.value.is_numeric_constant() and e.duration > shrink_to,
        lambda e: LineEvent(e.kind, e.start_beat, e.start_beat + shrink_to, e.value),
    )

    if options.easing_fitting:
        fitted: list[LineEvent] = []
        for kind, kind_events in group_by_kind(events).items():
            if kind == LineEventKind.SPEED:
                fitted.extend(kind_events)
            else:
                fitted.extend(fit_events(kind_events, options.easing_fitting_epsilon))
        events = fitted

    events = _remove_redundant_constants(events)

    return _map_if(
        events,
        lambda e: isinstance(e.value, Transition) and e.value.is_numeric_constant(),
        lambda e: e.with_value(Constant(e.value.start)),
    )


def _create_note(above: bool, note: OfficialNote) -> Note:
    kind = _NOTE_KINDS[note.kind]
    return Note(
        kind,
        above,
        t(note.time),
        note.position_x / POSITION_X_UNITS * CANVAS_WIDTH,
        note.speed,
        hold_beat=t(note.hold_time) if kind == NoteKind.HOLD else None,
    )


def import_line(line: OfficialLine, format_version: int, options: OfficialInputOptions) -> Line:
    """Convert one official line."""
    events = tidy_events(_line_events(line, format_version), options)
    notes = [_create_note(True, n) for n in line.notes_above]
    notes.extend(_create_note(False, n) for n in line.notes_below)

    # Official hold speeds are absolute; ours are relative to the line speed
    speed_events = of_kind(events, LineEventKind.SPEED)
    for note in notes:
        if note.kind != NoteKind.HOLD:
            continue
        factor = evaluate(speed_events, note.beat) / 9.0 * 2.0
        if factor != 0.0:
            note.speed /= factor

    return Line(notes=notes, events=events)


def official_to_chart(official: OfficialChart, options: OfficialInputOptions | None = None) -> Chart:
    """
    Convert an official chart to an authoring chart.

    Raises:
        NoLineError: If the chart has no lines
        UnsupportedFormatVersionError: If formatVersion is not 1 or 3
    """
    options = options or OfficialInputOptions()
    if not official.lines:
        raise NoLineError()
    if official.format_version not in SUPPORTED_FORMAT_VERSIONS:
        raise UnsupportedFormatVersionError(official.format_version)

    chart = Chart(offset=official.offset * 1000.0, bpm_list=BpmList.single(official.lines[0].bpm))
    for line in official.lines:
        chart.lines.append(import_line(line, official.format_version, options))

    logger.info(
        "Imported official chart (formatVersion %d): %d lines, %d notes",
        official.format_version,
        chart.line_count,
        chart.note_count,
    )
    return chart
