"""
Give notes with note-level events their own line.

Each such note moves to a new child line carrying the note's events. The
child line does not scroll (speed 0); instead a synthesized Y track brings
it down onto the parent line exactly at the note's beat.
"""

from __future__ import annotations

import copy
from dataclasses import replace

from chuk_mcp_phichain.compiler.curve import create_y_events
from chuk_mcp_phichain.compiler.sequence import of_kind
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.bpm_list import BpmList
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind
from chuk_mcp_phichain.models.line import Line


def _apply(line: Line, bpm_list: BpmList) -> Line:
    notes = []
    note_lines = []
    parent_speed = of_kind(line.events, LineEventKind.SPEED)

    for index, note in enumerate(line.notes):
        if not note.events:
            notes.append(note)
            continue
        events = [e for e in note.events if e.kind != LineEventKind.SPEED]
        events.append(LineEvent.constant(LineEventKind.SPEED, Beat.ZERO, Beat.ONE, 0.0))
        events.extend(create_y_events(bpm_list, parent_speed, note.beat))
        note_lines.append(
            Line(name=f"{line.name} (note {index})", notes=[note.without_events()], events=events)
        )

    return replace(
        line,
        notes=notes,
        children=[_apply(child, bpm_list) for child in line.children] + note_lines,
    )


def apply_note_level_events(chart: Chart) -> Chart:
    """
    Move every note carrying events onto a dedicated child line.

    Raises:
        OverlapError: If a parent line's speed events overlap
    """
    chart = copy.deepcopy(chart)
    return replace(chart, lines=[_apply(line, chart.bpm_list) for line in chart.lines])
