"""
RPE chart → authoring chart.

Father indices become the children tree. Event layers are additive; they
are merged per kind with summed values. Rotation is clockwise in RPE and
counter-clockwise here, so it is negated.
"""

from __future__ import annotations

import logging

from chuk_mcp_phichain.compiler.helpers import merge
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.bpm_list import BpmList, BpmPoint
from chuk_mcp_phichain.core.easing import AnyEasing, CustomEasing, Easing
from chuk_mcp_phichain.formats.rpe.options import RpeInputOptions
from chuk_mcp_phichain.formats.rpe.schema import (
    RPE_EASING,
    RpeBeat,
    RpeChart,
    RpeCommonEvent,
    RpeEventLayer,
    RpeJudgeLine,
    RpeNote,
    RpeNoteKind,
)
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind
from chuk_mcp_phichain.models.line import Line
from chuk_mcp_phichain.models.note import Note, NoteKind

logger = logging.getLogger(__name__)

_NOTE_KINDS = {
    RpeNoteKind.TAP: NoteKind.TAP,
    RpeNoteKind.HOLD: NoteKind.HOLD,
    RpeNoteKind.FLICK: NoteKind.FLICK,
    RpeNoteKind.DRAG: NoteKind.DRAG,
}


def beat(value: RpeBeat) -> Beat:
    return Beat.from_list(list(value))


def easing_from_rpe(event: RpeCommonEvent) -> AnyEasing:
    """Resolve the easing of an event, falling back to linear for unknown indices."""
    if event.bezier == 1:
        return CustomEasing(*event.bezier_points[:4])
    if 0 <= event.easing_type < len(RPE_EASING):
        return RPE_EASING[event.easing_type]
    logger.warning("Unknown easing type: %d", event.easing_type)
    return Easing.LINEAR


def _common(kind: LineEventKind, events: list[RpeCommonEvent], sign: float = 1.0) -> list[LineEvent]:
    return [
        LineEvent.transition(
            kind,
            beat(e.start_time),
            beat(e.end_time),
            sign * e.start,
            sign * e.end,
            easing_from_rpe(e),
        )
        for e in events
    ]


def layer_events(layer: RpeEventLayer) -> dict[LineEventKind, list[LineEvent]]:
    """Events of one layer, by kind."""
    return {
        LineEventKind.X: _common(LineEventKind.X, layer.move_x_events),
        LineEventKind.Y: _common(LineEventKind.Y, layer.move_y_events),
        LineEventKind.ROTATION: _common(LineEventKind.ROTATION, layer.rotate_events, -1.0),
        LineEventKind.OPACITY: _common(LineEventKind.OPACITY, list(layer.alpha_events)),
        LineEventKind.SPEED: [
            LineEvent.transition(LineEventKind.SPEED, beat(e.start_time), beat(e.end_time), e.start, e.end)
            for e in layer.speed_events
        ],
    }


def merge_layers(layers: list[RpeEventLayer | None]) -> list[LineEvent]:
    """Sum all event layers of a line into a single track per kind."""
    tracks: dict[LineEventKind, list[LineEvent]] = {kind: [] for kind in LineEventKind}
    for layer in layers:
        if layer is None:
            continue
        for kind, events in layer_events(layer).items():
            tracks[kind] = merge(tracks[kind], events)
    return [event for kind in LineEventKind for event in tracks[kind]]


def _note(note: RpeNote) -> Note:
    kind = _NOTE_KINDS[note.kind]
    start = beat(note.start_time)
    hold_beat = beat(note.end_time) - start if kind == NoteKind.HOLD else None
    return Note(kind, note.above == 1, start, note.position_x, note.speed, hold_beat=hold_beat)


def import_line(line: RpeJudgeLine, options: RpeInputOptions) -> Line:
    """Convert one RPE line, without its children."""
    notes = [_note(n) for n in line.notes if not (options.remove_fake_notes and n.is_fake)]
    if not line.rotate_with_father:
        logger.debug("Line '%s' has rotateWithFather off; imported as rotating with its father", line.name)
    return Line(name=line.name, notes=notes, events=merge_layers(line.event_layers))


def _parent_index(lines: list[RpeJudgeLine], index: int, kept: set[int]) -> int | None:
    """Father of a line, or None when it should be a root (missing father or a cycle)."""
    father = lines[index].father
    if father < 0:
        return None
    if father not in kept:
        logger.warning("Line %d refers to missing father %d; importing it as a root line", index, father)
        return None
    seen: set[int] = set()
    current = father
    while current >= 0 and current in kept and current not in seen:
        if current == index:
            logger.warning("Line %d is part of a father cycle; importing it as a root line", index)
            return None
        seen.add(current)
        current = lines[current].father
    return father


def rpe_to_chart(rpe: RpeChart, options: RpeInputOptions | None = None) -> Chart:
    """Convert an RPE chart to an authoring chart."""
    options = options or RpeInputOptions()
    lines = rpe.judge_line_list

    kept = {
        i for i, line in enumerate(lines) if not (options.remove_ui_controls and line.attach_ui)
    }
    if len(kept) < len(lines):
        logger.info("Removed %d UI control lines", len(lines) - len(kept))

    converted = {i: import_line(lines[i], options) for i in sorted(kept)}
    roots: list[Line] = []
    for i in sorted(kept):
        parent = _parent_index(lines, i, kept)
        if parent is None:
            roots.append(converted[i])
        else:
            converted[parent].children.append(converted[i])

    bpm_list = BpmList((BpmPoint(beat(p.start_time), p.bpm) for p in rpe.bpm_list), "BPMList")
    return Chart(offset=float(rpe.meta.offset), bpm_list=bpm_list, lines=roots)
