"""
Lines - judge lines carrying notes, events and child lines.

Authoring lines form a tree: a child line moves relative to its parent.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from chuk_mcp_phichain.constants import DEFAULT_LINE_NAME, DEFAULT_OPACITY, DEFAULT_SPEED
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.errors import ChartFormatError
from chuk_mcp_phichain.models.curve_note_track import CurveNoteTrack
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind
from chuk_mcp_phichain.models.note import Note


def default_line_events() -> list[LineEvent]:
    """Constant events over beats 0..1 giving a visible, centred line."""
    return [
        LineEvent.constant(LineEventKind.X, Beat.ZERO, Beat.ONE, 0.0),
        LineEvent.constant(LineEventKind.Y, Beat.ZERO, Beat.ONE, 0.0),
        LineEvent.constant(LineEventKind.ROTATION, Beat.ZERO, Beat.ONE, 0.0),
        LineEvent.constant(LineEventKind.OPACITY, Beat.ZERO, Beat.ONE, DEFAULT_OPACITY),
        LineEvent.constant(LineEventKind.SPEED, Beat.ZERO, Beat.ONE, DEFAULT_SPEED),
    ]


@dataclass
class Line:
    """An authoring line."""

    name: str = DEFAULT_LINE_NAME
    notes: list[Note] = field(default_factory=list)
    events: list[LineEvent] = field(default_factory=list)
    children: list[Line] = field(default_factory=list)
    curve_note_tracks: list[CurveNoteTrack] = field(default_factory=list)

    @classmethod
    def new(cls, name: str = DEFAULT_LINE_NAME) -> Line:
        """Create a line with the default events."""
        return cls(name=name, events=default_line_events())

    def walk(self) -> Iterator[Line]:
        """Yield this line and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "notes": [note.to_dict() for note in self.notes],
            "events": [event.to_dict() for event in self.events],
            "children": [child.to_dict() for child in self.children],
            "curve_note_tracks": [track.to_dict() for track in self.curve_note_tracks],
        }

    @classmethod
    def from_dict(cls, d: Any, path: str = "line") -> Line:
        """Create from dictionary."""
        if not isinstance(d, dict):
            raise ChartFormatError("expected a line object", path)
        for key in ("notes", "events", "children", "curve_note_tracks"):
            if not isinstance(d.get(key, []), list):
                raise ChartFormatError(f"'{key}' must be a list", f"{path}.{key}")
        return cls(
            name=str(d.get("name", DEFAULT_LINE_NAME)),
            notes=[Note.from_dict(n, f"{path}.notes[{i}]") for i, n in enumerate(d.get("notes", []))],
            events=[
                LineEvent.from_dict(e, f"{path}.events[{i}]") for i, e in enumerate(d.get("events", []))
            ],
            children=[
                Line.from_dict(c, f"{path}.children[{i}]") for i, c in enumerate(d.get("children", []))
            ],
            curve_note_tracks=[
                CurveNoteTrack.from_dict(t, f"{path}.curve_note_tracks[{i}]")
                for i, t in enumerate(d.get("curve_note_tracks", []))
            ],
        )
