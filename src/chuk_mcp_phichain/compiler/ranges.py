"""
Beat ranges - half-open [start, end) intervals on the beat axis.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from chuk_mcp_phichain.compiler.helpers import MINIMUM_BEAT
from chuk_mcp_phichain.compiler.sequence import split_points
from chuk_mcp_phichain.compiler.state import LineState, evaluate_state
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.models.event import LineEvent


@dataclass(frozen=True, order=True)
class BeatRange:
    """A half-open range of beats."""

    start: Beat
    end: Beat

    def contains(self, beat: Beat) -> bool:
        return self.start <= beat < self.end

    def overlaps(self, other: BeatRange) -> bool:
        """Open-interval intersection: touching ranges do not overlap."""
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": str(self.start), "end": str(self.end)}

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"


def merge_ranges(ranges: Iterable[BeatRange]) -> list[BeatRange]:
    """
    Merge overlapping or touching ranges.

    Example:
        [0..10, 20..30, 5..25, 40..50] -> [0..30, 40..50]
    """
    merged: list[BeatRange] = []
    for current in sorted(ranges):
        if merged and current.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = BeatRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def find_ranges(
    events: Sequence[LineEvent], predicate: Callable[[LineState], bool]
) -> list[BeatRange]:
    """
    Find the beat ranges where a predicate on the line state holds.

    Between each pair of consecutive split points the state is sampled every
    1/32 beat. A run starts at the window start where the predicate first
    holds and closes at the window end where it first fails. A run still
    open after the last split point extends to Beat.MAX.
    """
    ranges: list[BeatRange] = []
    points = split_points(events)
    run_start: Beat | None = None

    for window_start, window_end in zip(points, points[1:]):
        current = window_start
        while current <= window_end:
            if predicate(evaluate_state(events, current)):
                if run_start is None:
                    run_start = window_start
            elif run_start is not None:
                ranges.append(BeatRange(run_start, window_end))
                run_start = None
            current = current + MINIMUM_BEAT

    if run_start is not None:
        ranges.append(BeatRange(run_start, Beat.MAX))

    return ranges
