"""
Chart data model.

This module provides:
- LineEvent: One segment of a value track (Constant or Transition)
- Note: Playable object on a line
- CurveNoteTrack: Shorthand expanding into generated notes
- Line: Authoring line with notes, events and child lines
- Chart: Authoring chart (tree of lines)
- PrimitiveChart: Flat playback chart
"""

from chuk_mcp_phichain.models.chart import Chart, PrimitiveChart, PrimitiveEvent, PrimitiveLine
from chuk_mcp_phichain.models.curve_note_track import CurveNoteTrack, CurveNoteTrackOptions
from chuk_mcp_phichain.models.event import (
    Constant,
    Direction,
    EventValue,
    LineEvent,
    LineEventKind,
    Transition,
)
from chuk_mcp_phichain.models.line import Line, default_line_events
from chuk_mcp_phichain.models.note import Note, NoteKind

__all__ = [
    # Events
    "LineEvent",
    "LineEventKind",
    "Constant",
    "Transition",
    "EventValue",
    "Direction",
    # Notes
    "Note",
    "NoteKind",
    "CurveNoteTrack",
    "CurveNoteTrackOptions",
    # Lines and charts
    "Line",
    "default_line_events",
    "Chart",
    "PrimitiveChart",
    "PrimitiveLine",
    "PrimitiveEvent",
]
