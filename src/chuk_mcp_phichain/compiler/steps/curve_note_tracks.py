"""Expand curve note tracks into concrete notes."""

from __future__ import annotations

import copy
import logging
from dataclasses import replace

from chuk_mcp_phichain.compiler.curve import generate_notes
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.line import Line

logger = logging.getLogger(__name__)


def _expand(line: Line) -> Line:
    notes = list(line.notes)
    for track in line.curve_note_tracks:
        if 0 <= track.from_index < len(line.notes) and 0 <= track.to_index < len(line.notes):
            notes.extend(
                generate_notes(line.notes[track.from_index], line.notes[track.to_index], track.options)
            )
        else:
            logger.debug(
                "Skipping curve note track %d -> %d on '%s': index out of range",
                track.from_index,
                track.to_index,
                line.name,
            )
    return replace(
        line,
        notes=notes,
        curve_note_tracks=[],
        children=[_expand(child) for child in line.children],
    )


def evaluate_curve_note_tracks(chart: Chart) -> Chart:
    """
    Replace every curve note track with the notes it generates.

    Tracks referencing a missing note are dropped. The input chart is not
    modified.
    """
    chart = copy.deepcopy(chart)
    return replace(chart, lines=[_expand(line) for line in chart.lines])
