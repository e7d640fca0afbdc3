"""
Notes - the playable objects on a line.

A note may carry note-level events. Such notes are given their own motion
track by the compiler; everywhere else a note is a plain value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.errors import ChartFormatError
from chuk_mcp_phichain.models.event import LineEvent


class NoteKind(str, Enum):
    """Kinds of notes."""

    TAP = "tap"
    DRAG = "drag"
    HOLD = "hold"
    FLICK = "flick"


@dataclass
class Note:
    """
    A note on a line.

    x is in canvas units along the line, speed is a multiplier of the
    line speed. hold_beat is required for holds and ignored otherwise.
    """

    kind: NoteKind
    above: bool
    beat: Beat
    x: float
    speed: float = 1.0
    hold_beat: Beat | None = None
    events: list[LineEvent] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.kind == NoteKind.HOLD:
            if self.hold_beat is None:
                raise ValueError("A hold note needs a hold_beat")
        else:
            self.hold_beat = None

    @classmethod
    def tap(cls, beat: Beat, x: float = 0.0, above: bool = True) -> Note:
        return cls(NoteKind.TAP, above, beat, x)

    @classmethod
    def drag(cls, beat: Beat, x: float = 0.0, above: bool = True) -> Note:
        return cls(NoteKind.DRAG, above, beat, x)

    @classmethod
    def flick(cls, beat: Beat, x: float = 0.0, above: bool = True) -> Note:
        return cls(NoteKind.FLICK, above, beat, x)

    @classmethod
    def hold(cls, beat: Beat, hold_beat: Beat, x: float = 0.0, above: bool = True) -> Note:
        return cls(NoteKind.HOLD, above, beat, x, hold_beat=hold_beat)

    @property
    def end_beat(self) -> Beat:
        """Beat at which the note is fully resolved."""
        if self.hold_beat is not None:
            return self.beat + self.hold_beat
        return self.beat

    def without_events(self) -> Note:
        return replace(self, events=[])

    def kind_to_json(self) -> Any:
        if self.kind == NoteKind.HOLD:
            if self.hold_beat is None:
                raise ChartFormatError("a hold note needs a hold_beat", "kind.hold.hold_beat")
            return {"hold": {"hold_beat": self.hold_beat.to_list()}}
        return self.kind.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        d: dict[str, Any] = {
            "kind": self.kind_to_json(),
            "above": self.above,
            "beat": self.beat.to_list(),
            "x": self.x,
            "speed": self.speed,
        }
        # Only include note-level events if present
        if self.events:
            d["events"] = [event.to_dict() for event in self.events]
        return d

    @classmethod
    def from_dict(cls, d: Any, path: str = "note") -> Note:
        """Create from dictionary."""
        if not isinstance(d, dict):
            raise ChartFormatError("expected a note object", path)
        for key in ("kind", "above", "beat", "x"):
            if key not in d:
                raise ChartFormatError(f"missing '{key}'", path)

        raw_kind = d["kind"]
        hold_beat = None
        if isinstance(raw_kind, dict) and isinstance(raw_kind.get("hold"), dict):
            kind = NoteKind.HOLD
            hold_beat = Beat.from_list(raw_kind["hold"].get("hold_beat"), f"{path}.kind.hold.hold_beat")
        elif raw_kind in ("tap", "drag", "flick"):
            kind = NoteKind(raw_kind)
        else:
            raise ChartFormatError(f"unknown note kind {raw_kind!r}", f"{path}.kind")

        x, speed = d["x"], d.get("speed", 1.0)
        for key, value in (("x", x), ("speed", speed)):
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ChartFormatError(f"'{key}' must be a number, got {value!r}", f"{path}.{key}")

        return cls(
            kind=kind,
            above=bool(d["above"]),
            beat=Beat.from_list(d["beat"], f"{path}.beat"),
            x=float(x),
            speed=float(speed),
            hold_beat=hold_beat,
            events=[
                LineEvent.from_dict(e, f"{path}.events[{i}]")
                for i, e in enumerate(d.get("events") or [])
            ],
        )
