"""
Trajectory generation.

- generate_notes: expand a curve note track into notes between two anchors
- create_y_events: synthesize a Y track that brings a line down to y = 0 at
  a given beat, following a speed track
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from chuk_mcp_phichain.compiler.helpers import MINIMUM_BEAT, clamp_max, fill_gap_until
from chuk_mcp_phichain.compiler.sequence import of_kind, sorted_events
from chuk_mcp_phichain.constants import DEFAULT_SPEED, SPEED_UNIT_PER_SECOND
from chuk_mcp_phichain.core.beat import Beat, beat_range
from chuk_mcp_phichain.core.bpm_list import BpmList
from chuk_mcp_phichain.core.easing import Easing
from chuk_mcp_phichain.models.curve_note_track import CurveNoteTrackOptions
from chuk_mcp_phichain.models.event import Constant, LineEvent, LineEventKind
from chuk_mcp_phichain.models.note import Note

logger = logging.getLogger(__name__)


def generate_notes(from_note: Note, to_note: Note, options: CurveNoteTrackOptions) -> list[Note]:
    """
    Generate the notes of a curve note track.

    Beats run from the earlier anchor to the later one in steps of
    1/density (end exclusive). Step i of n maps to progress y = i/n; the
    inverse of the curve gives the x progress between the anchors. The
    first beat coincides with the earlier anchor and is skipped.

    Args:
        from_note: One anchor note
        to_note: The other anchor note
        options: Kind, density and curve of the generated notes

    Returns:
        Generated notes (empty for density 0 or anchors on the same beat)
    """
    if to_note.beat < from_note.beat:
        from_note, to_note = to_note, from_note
    if options.density <= 0 or from_note.beat == to_note.beat:
        return []

    beats = beat_range(from_note.beat, to_note.beat, Beat.of(0, 1, options.density))
    steps = len(beats)

    notes = []
    for i, beat in enumerate(beats):
        if i == 0:
            continue
        progress = options.curve.inverse(i / steps)
        x = from_note.x + (to_note.x - from_note.x) * progress
        notes.append(Note(options.kind, True, beat, x, 1.0))
    return notes


def _distance(bpm_list: BpmList, start: Beat, end: Beat, speed: float) -> float:
    return speed * (bpm_list.time_at(end) - bpm_list.time_at(start)) * SPEED_UNIT_PER_SECOND


def _speed_to_y(end_y: float, bpm_list: BpmList, event: LineEvent) -> list[LineEvent]:
    """
    Convert one speed event into Y events ending at `end_y`.

    Returned events are ordered from the end of the speed event backwards.
    """
    value = event.value
    if isinstance(value, Constant) or value.is_numeric_constant():
        start_y = end_y + _distance(bpm_list, event.start_beat, event.end_beat, value.start)
        return [LineEvent.transition(LineEventKind.Y, event.start_beat, event.end_beat, start_y, end_y)]

    # Integrate a changing speed with the average speed of 1/32 slices
    y_events = []
    current_y = end_y
    current = event.end_beat
    while current > event.start_beat:
        previous = max(current - MINIMUM_BEAT, event.start_beat)
        start_speed = event.value_at(previous)
        end_speed = event.value_at(current)
        start_y = current_y + _distance(bpm_list, previous, current, (start_speed + end_speed) / 2)
        y_events.append(
            LineEvent.transition(LineEventKind.Y, previous, current, start_y, current_y, Easing.LINEAR)
        )
        current_y = start_y
        current = previous
    return y_events


def create_y_events(bpm_list: BpmList, speed_events: Sequence[LineEvent], until: Beat) -> list[LineEvent]:
    """
    Synthesize a Y track that reaches 0 at `until`.

    A speed of 1 moves 120 canvas units per second. Gaps in the speed track
    are filled with the default speed and the track is cut at `until`. The
    Y track is built backwards from y = 0 at `until`.

    Args:
        bpm_list: Tempo map converting beats to seconds
        speed_events: Speed events of the line (other kinds are ignored)
        until: Beat at which the Y track ends at 0

    Returns:
        Linear Y events sorted by start beat

    Raises:
        OverlapError: If the speed events overlap
    """
    if until <= Beat.ZERO:
        return []

    speed = sorted_events(of_kind(speed_events, LineEventKind.SPEED))
    if not speed:
        speed = [LineEvent.constant(LineEventKind.SPEED, Beat.ZERO, until, DEFAULT_SPEED)]
    track = clamp_max(fill_gap_until(speed, until, DEFAULT_SPEED), until)

    y_events: list[LineEvent] = []
    current_y = 0.0
    for event in reversed(track):
        converted = _speed_to_y(current_y, bpm_list, event)
        if converted:
            current_y = converted[-1].value.start
        y_events.extend(converted)

    logger.debug("Created %d Y events until %s", len(y_events), until)
    return sorted_events(y_events)
