"""
Charts - the authoring chart and the flat primitive chart.

The authoring Chart holds a tree of lines. The PrimitiveChart is what the
compiler produces: flat lines with notes and fully explicit transitions,
ready for playback or export.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from chuk_mcp_phichain.constants import CURRENT_FORMAT, PRIMITIVE_FORMAT
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.bpm_list import BpmList
from chuk_mcp_phichain.core.easing import AnyEasing, Easing, easing_from_json
from chuk_mcp_phichain.errors import ChartFormatError
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind, Transition
from chuk_mcp_phichain.models.line import Line
from chuk_mcp_phichain.models.note import Note


def _read_header(d: Any, path: str) -> tuple[float, BpmList, list[Any]]:
    if not isinstance(d, dict):
        raise ChartFormatError("expected a chart object", path)
    if not isinstance(d.get("lines"), list):
        raise ChartFormatError("'lines' must be a list", f"{path}.lines")
    offset = d.get("offset", 0.0)
    if not isinstance(offset, (int, float)) or isinstance(offset, bool):
        raise ChartFormatError("'offset' must be a number", f"{path}.offset")
    bpm_list = BpmList.from_list(d["bpm_list"], f"{path}.bpm_list") if "bpm_list" in d else BpmList()
    return float(offset), bpm_list, d["lines"]


@dataclass
class Chart:
    """
    An authoring chart.

    offset is in milliseconds. lines is a forest; use iter_lines() to walk
    every line including nested children.
    """

    offset: float = 0.0
    bpm_list: BpmList = field(default_factory=BpmList)
    lines: list[Line] = field(default_factory=list)
    format: int = CURRENT_FORMAT

    def iter_lines(self) -> Iterator[Line]:
        for line in self.lines:
            yield from line.walk()

    @property
    def line_count(self) -> int:
        return sum(1 for _ in self.iter_lines())

    @property
    def note_count(self) -> int:
        return sum(len(line.notes) for line in self.iter_lines())

    @property
    def event_count(self) -> int:
        return sum(len(line.events) for line in self.iter_lines())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "format": self.format,
            "offset": self.offset,
            "bpm_list": self.bpm_list.to_list(),
            "lines": [line.to_dict() for line in self.lines],
        }

    @classmethod
    def from_dict(cls, d: Any, path: str = "chart") -> Chart:
        """
        Create from a current-format dictionary.

        Older documents must be migrated first (see migration.migrate).
        """
        offset, bpm_list, lines = _read_header(d, path)
        return cls(
            offset=offset,
            bpm_list=bpm_list,
            lines=[Line.from_dict(line, f"{path}.lines[{i}]") for i, line in enumerate(lines)],
            format=int(d.get("format", CURRENT_FORMAT)),
        )

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> Chart:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))


@dataclass(frozen=True)
class PrimitiveEvent:
    """An event with explicit start and end values."""

    kind: LineEventKind
    start_beat: Beat
    end_beat: Beat
    start: float
    end: float
    easing: AnyEasing = Easing.LINEAR

    @classmethod
    def from_event(cls, event: LineEvent) -> PrimitiveEvent:
        return cls(
            event.kind,
            event.start_beat,
            event.end_beat,
            event.value.start,
            event.value.end,
            event.value.easing,
        )

    def into_event(self) -> LineEvent:
        return LineEvent(
            self.kind, self.start_beat, self.end_beat, Transition(self.start, self.end, self.easing)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "start_beat": self.start_beat.to_list(),
            "end_beat": self.end_beat.to_list(),
            "start": self.start,
            "end": self.end,
            "easing": self.easing.to_json(),
        }

    @classmethod
    def from_dict(cls, d: Any, path: str = "event") -> PrimitiveEvent:
        """Create from dictionary."""
        if not isinstance(d, dict):
            raise ChartFormatError("expected an event object", path)
        try:
            kind = LineEventKind(d.get("kind"))
        except ValueError:
            raise ChartFormatError(f"unknown event kind {d.get('kind')!r}", f"{path}.kind") from None
        for key in ("start", "end"):
            if not isinstance(d.get(key), (int, float)) or isinstance(d.get(key), bool):
                raise ChartFormatError(f"'{key}' must be a number", f"{path}.{key}")
        return cls(
            kind=kind,
            start_beat=Beat.from_list(d.get("start_beat"), f"{path}.start_beat"),
            end_beat=Beat.from_list(d.get("end_beat"), f"{path}.end_beat"),
            start=float(d["start"]),
            end=float(d["end"]),
            easing=easing_from_json(d.get("easing", "linear"), f"{path}.easing"),
        )


@dataclass
class PrimitiveLine:
    """A flat line: notes and primitive events only."""

    notes: list[Note] = field(default_factory=list)
    events: list[PrimitiveEvent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "notes": [note.without_events().to_dict() for note in self.notes],
            "events": [event.to_dict() for event in self.events],
        }

    @classmethod
    def from_dict(cls, d: Any, path: str = "line") -> PrimitiveLine:
        if not isinstance(d, dict):
            raise ChartFormatError("expected a line object", path)
        return cls(
            notes=[Note.from_dict(n, f"{path}.notes[{i}]") for i, n in enumerate(d.get("notes", []))],
            events=[
                PrimitiveEvent.from_dict(e, f"{path}.events[{i}]")
                for i, e in enumerate(d.get("events", []))
            ],
        )


@dataclass
class PrimitiveChart:
    """The flat, playback-ready chart."""

    offset: float = 0.0
    bpm_list: BpmList = field(default_factory=BpmList)
    lines: list[PrimitiveLine] = field(default_factory=list)
    format: int = PRIMITIVE_FORMAT

    @property
    def note_count(self) -> int:
        return sum(len(line.notes) for line in self.lines)

    @property
    def event_count(self) -> int:
        return sum(len(line.events) for line in self.lines)

    @classmethod
    def from_chart(cls, chart: Chart) -> PrimitiveChart:
        """
        Convert a flattened authoring chart.

        Raises:
            ValueError: If any line still has children or curve note tracks
        """
        lines = []
        for line in chart.lines:
            if line.children or line.curve_note_tracks:
                raise ValueError(f"Line '{line.name}' is not compiled; flatten the chart first")
            lines.append(
                PrimitiveLine(
                    notes=[note.without_events() for note in line.notes],
                    events=[PrimitiveEvent.from_event(event) for event in line.events],
                )
            )
        return cls(offset=chart.offset, bpm_list=chart.bpm_list.copy(), lines=lines)

    def into_chart(self) -> Chart:
        """Lift back to an authoring chart with unnamed, childless lines."""
        return Chart(
            offset=self.offset,
            bpm_list=self.bpm_list.copy(),
            lines=[
                Line(
                    notes=list(line.notes),
                    events=[event.into_event() for event in line.events],
                )
                for line in self.lines
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "format": self.format,
            "offset": self.offset,
            "bpm_list": self.bpm_list.to_list(),
            "lines": [line.to_dict() for line in self.lines],
        }

    @classmethod
    def from_dict(cls, d: Any, path: str = "chart") -> PrimitiveChart:
        """Create from dictionary."""
        offset, bpm_list, lines = _read_header(d, path)
        return cls(
            offset=offset,
            bpm_list=bpm_list,
            lines=[PrimitiveLine.from_dict(line, f"{path}.lines[{i}]") for i, line in enumerate(lines)],
            format=int(d.get("format", PRIMITIVE_FORMAT)),
        )

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> PrimitiveChart:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))
