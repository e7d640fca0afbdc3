"""
Line events - segments of a line's value tracks.

A LineEvent drives one property (x, y, rotation, opacity or speed) over a
beat span. Its value is either a Constant or an eased Transition.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from chuk_mcp_phichain.constants import EVENT_VALUE_EPSILON, BoundaryMode
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.easing import AnyEasing, Easing, easing_from_json, tween
from chuk_mcp_phichain.errors import ChartFormatError, EventSequenceError


class LineEventKind(str, Enum):
    """The property a line event drives."""

    X = "x"
    Y = "y"
    ROTATION = "rotation"
    OPACITY = "opacity"
    SPEED = "speed"


class Direction(str, Enum):
    """Direction of a value over an event."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    CONSTANT = "constant"


@dataclass(frozen=True)
class Constant:
    """A value that holds for the whole event."""

    value: float

    @property
    def start(self) -> float:
        return self.value

    @property
    def end(self) -> float:
        return self.value

    @property
    def easing(self) -> AnyEasing:
        return Easing.LINEAR

    def is_constant(self) -> bool:
        return True

    def is_numeric_constant(self) -> bool:
        return True

    def into_constant(self) -> Constant:
        return self

    def direction(self) -> Direction:
        return Direction.CONSTANT

    def to_dict(self) -> dict[str, Any]:
        return {"constant": self.value}


@dataclass(frozen=True)
class Transition:
    """A value eased from start to end."""

    start: float
    end: float
    easing: AnyEasing = Easing.LINEAR

    def is_constant(self) -> bool:
        return False

    def is_numeric_constant(self) -> bool:
        """True when start and end are equal, whatever the easing."""
        return abs(self.start - self.end) < EVENT_VALUE_EPSILON

    def into_constant(self) -> Constant | Transition:
        """Collapse to a Constant when numerically constant."""
        if self.is_numeric_constant():
            return Constant(self.start)
        return self

    def direction(self) -> Direction:
        if self.is_numeric_constant():
            return Direction.CONSTANT
        return Direction.INCREASING if self.end > self.start else Direction.DECREASING

    def to_dict(self) -> dict[str, Any]:
        return {
            "transition": {
                "start": self.start,
                "end": self.end,
                "easing": self.easing.to_json(),
            }
        }


EventValue = Constant | Transition


def event_value_from_dict(data: Any, path: str = "value") -> EventValue:
    """Parse {"constant": v} or {"transition": {start, end, easing}}."""
    if isinstance(data, dict) and "constant" in data:
        value = data["constant"]
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ChartFormatError("constant must be a number", f"{path}.constant")
        return Constant(float(value))
    if isinstance(data, dict) and isinstance(data.get("transition"), dict):
        body = data["transition"]
        for key in ("start", "end"):
            if not isinstance(body.get(key), (int, float)) or isinstance(body.get(key), bool):
                raise ChartFormatError(f"'{key}' must be a number", f"{path}.transition.{key}")
        return Transition(
            float(body["start"]),
            float(body["end"]),
            easing_from_json(body.get("easing", "linear"), f"{path}.transition.easing"),
        )
    raise ChartFormatError("expected {'constant': ...} or {'transition': {...}}", path)


@dataclass(frozen=True)
class LineEvent:
    """
    One segment of a value track.

    Evaluation is on float beats. A beat inside the span yields the eased
    value, a beat past the end holds the end value, a beat before the
    start yields None.
    """

    kind: LineEventKind
    start_beat: Beat
    end_beat: Beat
    value: EventValue

    @classmethod
    def constant(cls, kind: LineEventKind, start_beat: Beat, end_beat: Beat, value: float) -> LineEvent:
        return cls(kind, start_beat, end_beat, Constant(value))

    @classmethod
    def transition(
        cls,
        kind: LineEventKind,
        start_beat: Beat,
        end_beat: Beat,
        start: float,
        end: float,
        easing: AnyEasing = Easing.LINEAR,
    ) -> LineEvent:
        return cls(kind, start_beat, end_beat, Transition(start, end, easing))

    @property
    def duration(self) -> Beat:
        return self.end_beat - self.start_beat

    def _eased(self, beat: float) -> float:
        start = self.start_beat.value()
        end = self.end_beat.value()
        if end == start:
            return self.value.end
        percent = (beat - start) / (end - start)
        return tween(self.value.start, self.value.end, percent, self.value.easing)

    def evaluate(self, beat: float, mode: BoundaryMode = "inclusive") -> float | None:
        """
        Evaluate the event at a float beat.

        Args:
            beat: Beat as a float
            mode: "inclusive" covers [start, end]; "exclusive" covers (start, end]
                so a sample exactly at the start is not affected

        Returns:
            The value, or None when the beat is before the event
        """
        start = self.start_beat.value()
        end = self.end_beat.value()
        covered = start <= beat <= end if mode == "inclusive" else start < beat <= end
        if covered:
            return self._eased(beat)
        if beat > end:
            return self.value.end
        return None

    def evaluate_exclusive(self, beat: float) -> float | None:
        return self.evaluate(beat, "exclusive")

    def value_at(self, beat: Beat) -> float:
        """
        Evaluate the event at a beat it has reached.

        Raises:
            EventSequenceError: If the beat is before the event starts
        """
        value = self.evaluate(beat.value())
        if value is None:
            raise EventSequenceError(
                f"beat {beat} is before the {self.kind.value} event starting at {self.start_beat}"
            )
        return value

    def with_value(self, value: EventValue) -> LineEvent:
        return replace(self, value=value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "start_beat": self.start_beat.to_list(),
            "end_beat": self.end_beat.to_list(),
            "value": self.value.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Any, path: str = "event") -> LineEvent:
        """Create from dictionary."""
        if not isinstance(d, dict):
            raise ChartFormatError("expected an event object", path)
        try:
            kind = LineEventKind(d.get("kind"))
        except ValueError:
            raise ChartFormatError(f"unknown event kind {d.get('kind')!r}", f"{path}.kind") from None
        for key in ("start_beat", "end_beat", "value"):
            if key not in d:
                raise ChartFormatError(f"missing '{key}'", path)
        return cls(
            kind=kind,
            start_beat=Beat.from_list(d["start_beat"], f"{path}.start_beat"),
            end_beat=Beat.from_list(d["end_beat"], f"{path}.end_beat"),
            value=event_value_from_dict(d["value"], f"{path}.value"),
        )
