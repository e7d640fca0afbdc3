"""
Curve note tracks - authoring shorthand for a dense run of notes.

A track references two notes of its line by index; the compiler expands it
into generated notes between them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chuk_mcp_phichain.constants import DEFAULT_CURVE_DENSITY
from chuk_mcp_phichain.core.easing import AnyEasing, Easing, easing_from_json
from chuk_mcp_phichain.errors import ChartFormatError
from chuk_mcp_phichain.models.note import NoteKind


@dataclass(frozen=True)
class CurveNoteTrackOptions:
    """How a curve note track is expanded."""

    kind: NoteKind = NoteKind.DRAG
    density: int = DEFAULT_CURVE_DENSITY  # Notes per beat
    curve: AnyEasing = Easing.LINEAR

    def __post_init__(self) -> None:
        if self.kind == NoteKind.HOLD:
            raise ValueError("Curve note tracks cannot generate hold notes")
        if self.density < 0:
            raise ValueError(f"Density must be >= 0, got {self.density}")


@dataclass
class CurveNoteTrack:
    """A curve between the notes at indices `from_index` and `to_index`."""

    from_index: int
    to_index: int
    options: CurveNoteTrackOptions = field(default_factory=CurveNoteTrackOptions)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (options are flattened)."""
        return {
            "from": self.from_index,
            "to": self.to_index,
            "kind": self.options.kind.value,
            "density": self.options.density,
            "curve": self.options.curve.to_json(),
        }

    @classmethod
    def from_dict(cls, d: Any, path: str = "curve_note_track") -> CurveNoteTrack:
        """Create from dictionary."""
        if not isinstance(d, dict) or "from" not in d or "to" not in d:
            raise ChartFormatError("expected an object with 'from' and 'to'", path)
        try:
            options = CurveNoteTrackOptions(
                kind=NoteKind(d.get("kind", NoteKind.DRAG.value)),
                density=int(d.get("density", DEFAULT_CURVE_DENSITY)),
                curve=easing_from_json(d.get("curve", "linear"), f"{path}.curve"),
            )
        except (ValueError, TypeError) as e:
            if isinstance(e, ChartFormatError):
                raise
            raise ChartFormatError(str(e), path) from e
        for key in ("from", "to"):
            if not isinstance(d[key], int) or isinstance(d[key], bool):
                raise ChartFormatError(f"'{key}' must be a note index, got {d[key]!r}", f"{path}.{key}")
        return cls(d["from"], d["to"], options)
