"""
Authoring chart → RPE chart.

The children tree is written as father indices in depth-first order, so
a father always precedes its children. Each line gets a single event
layer.
"""

from __future__ import annotations

import logging

from chuk_mcp_phichain.compiler.steps import apply_note_level_events, evaluate_curve_note_tracks
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.easing import AnyEasing, CustomEasing, Easing
from chuk_mcp_phichain.formats.base import CommonOutputOptions
from chuk_mcp_phichain.formats.rpe.schema import (
    RPE_EASING,
    RpeAlphaEvent,
    RpeBeat,
    RpeBpmPoint,
    RpeChart,
    RpeCommonEvent,
    RpeEventLayer,
    RpeJudgeLine,
    RpeMeta,
    RpeNote,
    RpeNoteKind,
    RpeSpeedEvent,
)
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind
from chuk_mcp_phichain.models.line import Line
from chuk_mcp_phichain.models.note import Note, NoteKind

logger = logging.getLogger(__name__)

RPE_LINEAR = 1

_NOTE_KINDS = {
    NoteKind.TAP: RpeNoteKind.TAP,
    NoteKind.HOLD: RpeNoteKind.HOLD,
    NoteKind.FLICK: RpeNoteKind.FLICK,
    NoteKind.DRAG: RpeNoteKind.DRAG,
}


def rpe_beat(beat: Beat) -> RpeBeat:
    whole, numerator, denominator = beat.to_list()
    return (whole, numerator, denominator)


def easing_to_rpe(easing: AnyEasing) -> tuple[int, int, list[float]]:
    """(easingType, bezier, bezierPoints) of an easing."""
    if isinstance(easing, CustomEasing):
        return RPE_LINEAR, 1, [easing.x1, easing.y1, easing.x2, easing.y2]
    if isinstance(easing, Easing) and easing in RPE_EASING[RPE_LINEAR:]:
        return RPE_EASING.index(easing, RPE_LINEAR), 0, [0.0, 0.0, 0.0, 0.0]
    logger.warning("Unsupported easing type: %s", easing)
    return RPE_LINEAR, 0, [0.0, 0.0, 0.0, 0.0]


def _common(
    event: LineEvent, sign: float = 1.0, model: type[RpeCommonEvent] = RpeCommonEvent
) -> RpeCommonEvent:
    easing_type, bezier, points = easing_to_rpe(event.value.easing)
    return model(
        bezier=bezier,
        bezier_points=points,
        easing_type=easing_type,
        start=sign * event.value.start,
        end=sign * event.value.end,
        start_time=rpe_beat(event.start_beat),
        end_time=rpe_beat(event.end_beat),
    )


def event_layer(line: Line) -> RpeEventLayer:
    """All events of a line in one layer."""
    layer = RpeEventLayer()
    for event in line.events:
        if event.kind == LineEventKind.SPEED:
            layer.speed_events.append(
                RpeSpeedEvent(
                    start=event.value.start,
                    end=event.value.end,
                    start_time=rpe_beat(event.start_beat),
                    end_time=rpe_beat(event.end_beat),
                )
            )
        elif event.kind == LineEventKind.X:
            layer.move_x_events.append(_common(event))
        elif event.kind == LineEventKind.Y:
            layer.move_y_events.append(_common(event))
        elif event.kind == LineEventKind.ROTATION:
            layer.rotate_events.append(_common(event, -1.0))
        elif event.kind == LineEventKind.OPACITY:
            layer.alpha_events.append(_common(event, model=RpeAlphaEvent))
    return layer


def rpe_note(note: Note) -> RpeNote:
    return RpeNote(
        above=1 if note.above else 0,
        start_time=rpe_beat(note.beat),
        end_time=rpe_beat(note.end_beat),
        position_x=note.x,
        speed=note.speed,
        kind=_NOTE_KINDS[note.kind],
    )


def push_line(line: Line, father: int, target: list[RpeJudgeLine]) -> None:
    """Append a line and, after it, its descendants."""
    index = len(target)
    target.append(
        RpeJudgeLine(
            name=line.name,
            father=father,
            rotate_with_father=True,
            event_layers=[event_layer(line)],
            notes=[rpe_note(note) for note in line.notes],
        )
    )
    for child in line.children:
        push_line(child, index, target)


def chart_to_rpe(chart: Chart) -> RpeChart:
    """
    Convert an authoring chart to an RPE chart.

    Curve note tracks are expanded and notes with events moved to their
    own child lines first; the line tree itself is kept.
    """
    chart = apply_note_level_events(evaluate_curve_note_tracks(chart))
    rpe = RpeChart(
        bpm_list=[RpeBpmPoint(bpm=p.bpm, start_time=rpe_beat(p.beat)) for p in chart.bpm_list],
        meta=RpeMeta(offset=round(chart.offset)),
        judge_line_list=[],
    )
    for line in chart.lines:
        push_line(line, -1, rpe.judge_line_list)
    return rpe


def apply_rounding(rpe: RpeChart, options: CommonOutputOptions) -> RpeChart:
    """Round move, rotate and speed values and note positions."""
    rpe = rpe.model_copy(deep=True)
    for line in rpe.judge_line_list:
        for layer in line.event_layers:
            if layer is None:
                continue
            for event in [*layer.move_x_events, *layer.move_y_events, *layer.rotate_events]:
                event.start = options.round_value(event.start)
                event.end = options.round_value(event.end)
            for speed in layer.speed_events:
                speed.start = options.round_value(speed.start)
                speed.end = options.round_value(speed.end)
        for note in line.notes:
            note.position_x = options.round_value(note.position_x)
    return rpe
