"""
Line lifetime - when a line matters.

A line is alive while it is visible or still has notes to resolve. A line
with an empty lifetime is a unit line and can be removed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from chuk_mcp_phichain.compiler.ranges import BeatRange, find_ranges, merge_ranges
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.models.line import Line


@dataclass(frozen=True)
class LineLifetime:
    """Merged, sorted ranges during which a line is alive."""

    ranges: tuple[BeatRange, ...] = field(default_factory=tuple)

    def is_unit(self) -> bool:
        return not self.ranges

    def is_valid(self, beat: Beat) -> bool:
        """Return True if the line is alive at a beat."""
        return any(r.contains(beat) for r in self.ranges)

    def overlaps(self, other: LineLifetime) -> bool:
        """Return True if any range properly intersects a range of the other lifetime."""
        return any(a.overlaps(b) for a in self.ranges for b in other.ranges)

    @property
    def start(self) -> Beat | None:
        return self.ranges[0].start if self.ranges else None

    def to_list(self) -> list[dict[str, str]]:
        return [r.to_dict() for r in self.ranges]


def merge_lifetimes(lifetimes: Iterable[LineLifetime]) -> LineLifetime:
    """Union of several lifetimes."""
    return LineLifetime(tuple(merge_ranges(r for lifetime in lifetimes for r in lifetime.ranges)))


def find_lifetime(line: Line) -> LineLifetime:
    """
    Compute the lifetime of a flat line.

    The visible ranges of the line, plus 0..(latest note end) when the
    line has notes.
    """
    ranges: list[BeatRange] = []
    if line.notes:
        ranges.append(BeatRange(Beat.ZERO, max(note.end_beat for note in line.notes)))
    ranges.extend(find_ranges(line.events, lambda state: state.is_visible()))
    return LineLifetime(tuple(merge_ranges(ranges)))
