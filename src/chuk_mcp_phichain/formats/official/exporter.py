"""
Authoring chart → official chart (formatVersion 3).

The official format has a single bpm per line and no easings, so:
- every beat is re-expressed on the first bpm of the tempo map
- eased events are cut into short linear slices
- X and Y tracks are merged into shared move events
- floor positions of speed events and notes are integrated from the speeds
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from chuk_mcp_phichain.compiler.helpers import MINIMUM_BEAT, cut, fill_gap
from chuk_mcp_phichain.compiler.sequence import evaluate, of_kind, sorted_events
from chuk_mcp_phichain.compiler.steps import evaluate_curve_note_tracks, merge_children_line
from chuk_mcp_phichain.constants import CANVAS_HEIGHT, CANVAS_WIDTH
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.errors import EventSequenceError, OfficialOutputError
from chuk_mcp_phichain.formats.official.importer import OFFICIAL_TIME_TO_BEAT, POSITION_X_UNITS
from chuk_mcp_phichain.formats.official.options import OfficialOutputOptions
from chuk_mcp_phichain.formats.official.schema import (
    OfficialChart,
    OfficialLine,
    OfficialMoveEvent,
    OfficialNote,
    OfficialNoteKind,
    OfficialNumericEvent,
    OfficialSpeedEvent,
)
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind
from chuk_mcp_phichain.models.line import Line
from chuk_mcp_phichain.models.note import NoteKind

logger = logging.getLogger(__name__)

OUTPUT_FORMAT_VERSION = 3

# Closes the last move window
END_OF_CHART = Beat(1_000_000_000)
END_OF_CHART_TIME = 1e9

_NOTE_KINDS = {
    NoteKind.TAP: OfficialNoteKind.TAP,
    NoteKind.DRAG: OfficialNoteKind.DRAG,
    NoteKind.HOLD: OfficialNoteKind.HOLD,
    NoteKind.FLICK: OfficialNoteKind.FLICK,
}

TimeFn = Callable[[Beat], float]


def _sliced(line: Line, kind: LineEventKind) -> list[LineEvent]:
    """Gap-filled events of one kind, cut into 1/32 beat slices where eased."""
    try:
        filled = fill_gap(of_kind(line.events, kind), 0.0)
    except EventSequenceError as e:
        raise OfficialOutputError(line.name, kind, e) from e
    return [
        segment
        for event in filled
        for segment in cut(event, MINIMUM_BEAT, force_linear=kind == LineEventKind.SPEED)
    ]


def _move_events(line: Line, time: TimeFn, minimum_beat: Beat) -> list[OfficialMoveEvent]:
    x_events = sorted_events(s for e in of_kind(line.events, LineEventKind.X) for s in cut(e, minimum_beat))
    y_events = sorted_events(s for e in of_kind(line.events, LineEventKind.Y) for s in cut(e, minimum_beat))

    splits = {END_OF_CHART}
    for event in [*x_events, *y_events]:
        splits.add(event.start_beat)
        splits.add(event.end_beat)
    beats = sorted(splits)

    moves = []
    for start, end in zip(beats, beats[1:]):
        moves.append(
            OfficialMoveEvent(
                start_time=time(start),
                end_time=time(end),
                start=evaluate(x_events, start) / CANVAS_WIDTH + 0.5,
                end=evaluate(x_events, end, "exclusive") / CANVAS_WIDTH + 0.5,
                start2=evaluate(y_events, start) / CANVAS_HEIGHT + 0.5,
                end2=evaluate(y_events, end, "exclusive") / CANVAS_HEIGHT + 0.5,
            )
        )
    return moves


def _notes(line: Line, time: TimeFn) -> tuple[list[OfficialNote], list[OfficialNote]]:
    speed_events = of_kind(line.events, LineEventKind.SPEED)
    above: list[OfficialNote] = []
    below: list[OfficialNote] = []

    for note in sorted(line.notes, key=lambda n: n.beat):
        speed = note.speed
        hold_time = 0.0
        if note.kind == NoteKind.HOLD:
            # Official hold speeds are absolute
            speed *= evaluate(speed_events, note.beat) / 9.0 * 2.0
            hold_time = time(note.end_beat) - time(note.beat)
        official = OfficialNote(
            kind=_NOTE_KINDS[note.kind],
            time=time(note.beat),
            hold_time=hold_time,
            position_x=note.x / CANVAS_WIDTH * POSITION_X_UNITS,
            speed=speed,
        )
        (above if note.above else below).append(official)
    return above, below


def compute_floor_positions(line: OfficialLine) -> None:
    """
    Fill in floorPosition of speed events and notes.

    Speed events are made contiguous: each one starts at max(start, 0) and
    lasts until the next one starts (the last one until 1e9).
    """
    floor_position = 0.0
    count = len(line.speed_events)
    for i, event in enumerate(line.speed_events):
        event.start_time = max(event.start_time, 0.0)
        event.end_time = line.speed_events[i + 1].start_time if i < count - 1 else END_OF_CHART_TIME
        event.floor_position = floor_position
        floor_position += (event.end_time - event.start_time) * event.value / line.bpm * 1.875

    for note in [*line.notes_above, *line.notes_below]:
        base, speed, elapsed = 0.0, 0.0, 0.0
        for event in line.speed_events:
            if note.time > event.end_time:
                continue
            if note.time < event.start_time:
                break
            base = event.floor_position
            speed = event.value
            elapsed = note.time - event.start_time
        note.floor_position = base + speed * elapsed / line.bpm * 1.875


def export_line(line: Line, bpm: float, time: TimeFn, options: OfficialOutputOptions) -> OfficialLine:
    """Convert one flat line."""

    def numeric(event: LineEvent, scale: float = 1.0) -> OfficialNumericEvent:
        return OfficialNumericEvent(
            start_time=time(event.start_beat),
            end_time=time(event.end_beat),
            start=event.value.start * scale,
            end=event.value.end * scale,
        )

    notes_above, notes_below = _notes(line, time)
    official = OfficialLine(
        bpm=bpm,
        move_events=_move_events(line, time, options.minimum_beat),
        rotate_events=[numeric(e) for e in _sliced(line, LineEventKind.ROTATION)],
        opacity_events=[numeric(e, 1.0 / 255.0) for e in _sliced(line, LineEventKind.OPACITY)],
        speed_events=[
            OfficialSpeedEvent(
                start_time=time(e.start_beat),
                end_time=time(e.end_beat),
                value=e.value.start / 9.0 * 2.0,
            )
            for e in _sliced(line, LineEventKind.SPEED)
        ],
        notes_above=notes_above,
        notes_below=notes_below,
    )
    compute_floor_positions(official)
    return official


def chart_to_official(chart: Chart, options: OfficialOutputOptions | None = None) -> OfficialChart:
    """
    Convert an authoring chart to an official chart.

    Child lines are flattened and curve note tracks expanded first. Unit
    lines are kept so line indices stay stable.

    Raises:
        OfficialOutputError: If a line has overlapping events of one kind
    """
    options = options or OfficialOutputOptions()
    chart = evaluate_curve_note_tracks(merge_children_line(chart))

    bpm = chart.bpm_list[0].bpm
    bpm_list = chart.bpm_list

    def time(beat: Beat) -> float:
        return bpm_list.normalize_beat(bpm, beat).value() / OFFICIAL_TIME_TO_BEAT

    official = OfficialChart(
        format_version=OUTPUT_FORMAT_VERSION,
        offset=chart.offset / 1000.0,
        lines=[export_line(line, bpm, time, options) for line in chart.lines],
    )
    if len(bpm_list) > 1:
        logger.info("Normalized %d bpm points onto %.3f bpm", len(bpm_list), bpm)
    return official
