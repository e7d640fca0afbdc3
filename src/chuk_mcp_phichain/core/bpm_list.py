"""
Tempo map - BpmPoint and BpmList.

A BpmList is a piecewise-linear mapping between beats and elapsed seconds.
The elapsed time of every point is derived and recomputed on each mutation;
it is never serialized.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from chuk_mcp_phichain.constants import DEFAULT_BPM, ErrorMessages
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.errors import ChartFormatError, EmptyBpmListError


@dataclass
class BpmPoint:
    """A tempo change at a beat."""

    beat: Beat
    bpm: float
    time: float = field(default=0.0, compare=False)

    def __post_init__(self) -> None:
        if self.bpm <= 0:
            raise ValueError(ErrorMessages.INVALID_BPM.format(bpm=self.bpm))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (time is derived, not stored)."""
        return {"beat": self.beat.to_list(), "bpm": self.bpm}

    @classmethod
    def from_dict(cls, d: Any, path: str = "bpm_point") -> BpmPoint:
        """Create from dictionary."""
        if not isinstance(d, dict) or "beat" not in d or "bpm" not in d:
            raise ChartFormatError("expected an object with 'beat' and 'bpm'", path)
        bpm = d["bpm"]
        if not isinstance(bpm, (int, float)) or isinstance(bpm, bool) or bpm <= 0:
            raise ChartFormatError(f"bpm must be a positive number, got {bpm!r}", f"{path}.bpm")
        return cls(Beat.from_list(d["beat"], f"{path}.beat"), float(bpm))


class BpmList:
    """
    An ordered, non-empty list of tempo points.

    The first point is at beat 0 and beats are strictly increasing. Elapsed
    times are cached on the points and recomputed by every mutating method.
    """

    def __init__(self, points: Iterable[BpmPoint] | None = None, path: str = "bpm_list"):
        """
        Initialize the tempo map.

        Args:
            points: Tempo points; defaults to a single 120 bpm point at beat 0
            path: Location reported in errors

        Raises:
            EmptyBpmListError: If an empty sequence is given
            ChartFormatError: If the first point is not at beat 0 or two
                points share a beat
        """
        if points is None:
            points = [BpmPoint(Beat.ZERO, DEFAULT_BPM)]
        self.points: list[BpmPoint] = sorted(
            (BpmPoint(p.beat, p.bpm) for p in points), key=lambda p: p.beat
        )
        if not self.points:
            raise EmptyBpmListError(ErrorMessages.EMPTY_BPM_LIST)
        if self.points[0].beat != Beat.ZERO:
            raise ChartFormatError(ErrorMessages.BPM_NOT_AT_ZERO.format(beat=self.points[0].beat), path)
        for i, (a, b) in enumerate(zip(self.points, self.points[1:]), start=1):
            if a.beat == b.beat:
                raise ChartFormatError(ErrorMessages.DUPLICATE_BPM_POINT.format(beat=b.beat), f"{path}[{i}]")
        self.compute()

    @classmethod
    def single(cls, bpm: float) -> BpmList:
        """Create a tempo map with one point at beat 0."""
        return cls([BpmPoint(Beat.ZERO, bpm)])

    def compute(self) -> None:
        """Recompute the elapsed time of every point."""
        time = 0.0
        previous: BpmPoint | None = None
        for point in self.points:
            if previous is not None:
                time += (point.beat.value() - previous.beat.value()) * (60.0 / previous.bpm)
            point.time = time
            previous = point

    def insert(self, point: BpmPoint) -> None:
        """
        Insert a point, keeping beat order.

        A point at the beat of an existing point replaces its bpm.

        Raises:
            ValueError: If the point is before beat 0
        """
        if point.beat < Beat.ZERO:
            raise ValueError(ErrorMessages.BPM_NOT_AT_ZERO.format(beat=point.beat))
        for i, existing in enumerate(self.points):
            if existing.beat == point.beat:
                self.set_bpm(i, point.bpm)
                return

        index = next(
            (i for i, p in enumerate(self.points) if p.beat > point.beat),
            len(self.points),
        )
        self.points.insert(index, BpmPoint(point.beat, point.bpm))
        self.compute()

    def remove(self, index: int) -> BpmPoint:
        """
        Remove a point by index.

        The first point anchors the map and cannot be removed.
        """
        if index == 0 or index == -len(self.points):
            raise ValueError("The first bpm point cannot be removed")
        point = self.points.pop(index)
        self.compute()
        return point

    def set_bpm(self, index: int, bpm: float) -> None:
        """Change the bpm of a point."""
        self.points[index] = BpmPoint(self.points[index].beat, bpm)
        self.compute()

    def time_at(self, beat: Beat) -> float:
        """
        Elapsed seconds at a beat.

        Uses the last point at or before the beat (or the first point when
        none precedes it) and extrapolates with its bpm.
        """
        point = self.points[0]
        for candidate in self.points:
            if candidate.beat <= beat:
                point = candidate
            else:
                break
        return point.time + (beat.value() - point.beat.value()) * (60.0 / point.bpm)

    def beat_at(self, time: float) -> Beat:
        """Beat reached after a number of seconds."""
        point = self.points[0]
        for candidate in self.points:
            if candidate.time <= time:
                point = candidate
            else:
                break
        return Beat.from_float(point.beat.value() + (time - point.time) * point.bpm / 60.0)

    def normalize_beat(self, base_bpm: float, beat: Beat) -> Beat:
        """
        Re-express a beat of this tempo map on a single fixed bpm.

        Example:
            [(0, 120), (4, 240)] normalizes beat 8 on 120 bpm to beat 6
        """
        return BpmList.single(base_bpm).beat_at(self.time_at(beat))

    def to_list(self) -> list[dict[str, Any]]:
        """Convert to a list of dictionaries for serialization."""
        return [point.to_dict() for point in self.points]

    @classmethod
    def from_list(cls, data: Any, path: str = "bpm_list") -> BpmList:
        """Create from a list of dictionaries."""
        if not isinstance(data, list):
            raise ChartFormatError("expected a list of bpm points", path)
        if not data:
            raise EmptyBpmListError(ErrorMessages.EMPTY_BPM_LIST)
        return cls((BpmPoint.from_dict(p, f"{path}[{i}]") for i, p in enumerate(data)), path)

    def copy(self) -> BpmList:
        """Return an independent copy."""
        return BpmList(self.points)

    def __iter__(self) -> Iterator[BpmPoint]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index: int) -> BpmPoint:
        return self.points[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BpmList):
            return NotImplemented
        return self.points == other.points

    def __repr__(self) -> str:
        inner = ", ".join(f"({p.beat}, {p.bpm})" for p in self.points)
        return f"BpmList([{inner}])"
