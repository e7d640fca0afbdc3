"""
Beat - exact musical time.

A beat is a whole part plus a reduced fraction in [0, 1). Arithmetic stays
exact; floats only appear when a beat is converted for evaluation.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, ClassVar

from chuk_mcp_phichain.constants import ErrorMessages
from chuk_mcp_phichain.errors import ChartFormatError

# Largest denominator used when approximating a float
MAX_DENOMINATOR = 1_000_000

_BEAT_PATTERN = re.compile(
    r"^\s*(?:(?P<whole>-?\d+)\s*(?:\+\s*(?P<num>\d+)\s*/\s*(?P<den>\d+))?"
    r"|(?P<onum>\d+)\s*/\s*(?P<oden>\d+))\s*$"
)


@dataclass(frozen=True, order=True)
class Beat:
    """
    A position in musical time.

    Stored as (whole, fraction) with 0 <= fraction < 1, normalized on
    construction so equal beats compare and hash equal.

    Immutable and hashable.
    """

    whole: int
    fraction: Fraction = field(default=Fraction(0))

    # Common beats (defined after class)
    ZERO: ClassVar[Beat]
    ONE: ClassVar[Beat]
    MAX: ClassVar[Beat]
    MIN: ClassVar[Beat]

    def __post_init__(self) -> None:
        total = Fraction(self.whole) + Fraction(self.fraction)
        whole = math.floor(total)
        object.__setattr__(self, "whole", whole)
        object.__setattr__(self, "fraction", total - whole)

    @classmethod
    def of(cls, whole: int = 0, numerator: int = 0, denominator: int = 1) -> Beat:
        """Create a beat from `whole + numerator / denominator`."""
        if denominator == 0:
            raise ValueError("Beat denominator must not be zero")
        return cls(whole, Fraction(numerator, denominator))

    @classmethod
    def from_fraction(cls, value: Fraction | int) -> Beat:
        """Create a beat from an exact rational value."""
        return cls(0, Fraction(value))

    @classmethod
    def from_float(cls, value: float) -> Beat:
        """
        Create a beat from a float.

        The float is approximated by the closest fraction whose denominator
        does not exceed MAX_DENOMINATOR.
        """
        if not math.isfinite(value):
            raise ValueError(f"Cannot convert {value} to a beat")
        return cls(0, Fraction(value).limit_denominator(MAX_DENOMINATOR))

    @classmethod
    def parse(cls, text: str) -> Beat:
        """
        Parse a beat from text.

        Accepted forms: '2', '3/4', '1+1/4'.
        """
        match = _BEAT_PATTERN.match(text)
        if match is None:
            raise ValueError(ErrorMessages.INVALID_BEAT.format(beat=text))
        if match.group("onum") is not None:
            return cls.of(0, int(match.group("onum")), int(match.group("oden")))
        numerator = int(match.group("num") or 0)
        denominator = int(match.group("den") or 1)
        return cls.of(int(match.group("whole")), numerator, denominator)

    @property
    def numerator(self) -> int:
        """Numerator of the fractional part."""
        return self.fraction.numerator

    @property
    def denominator(self) -> int:
        """Denominator of the fractional part."""
        return self.fraction.denominator

    def as_fraction(self) -> Fraction:
        """Return the beat as a single exact fraction."""
        return self.whole + self.fraction

    def value(self) -> float:
        """Return the beat as a float."""
        return self.whole + self.fraction.numerator / self.fraction.denominator

    def to_list(self) -> list[int]:
        """Serialize as [whole, numerator, denominator]."""
        return [self.whole, self.fraction.numerator, self.fraction.denominator]

    @classmethod
    def from_list(cls, data: Any, path: str = "beat") -> Beat:
        """Deserialize from [whole, numerator, denominator]."""
        if (
            not isinstance(data, (list, tuple))
            or len(data) != 3
            or not all(isinstance(x, int) and not isinstance(x, bool) for x in data)
        ):
            raise ChartFormatError(f"expected [whole, numerator, denominator], got {data!r}", path)
        if data[2] == 0:
            raise ChartFormatError("beat denominator is zero", path)
        return cls.of(data[0], data[1], data[2])

    def __add__(self, other: Beat) -> Beat:
        if not isinstance(other, Beat):
            return NotImplemented
        return Beat(self.whole + other.whole, self.fraction + other.fraction)

    def __sub__(self, other: Beat) -> Beat:
        if not isinstance(other, Beat):
            return NotImplemented
        return Beat(self.whole - other.whole, self.fraction - other.fraction)

    def __mul__(self, n: int | Fraction) -> Beat:
        if isinstance(n, (int, Fraction)):
            return Beat(0, self.as_fraction() * n)
        return NotImplemented

    def __rmul__(self, n: int | Fraction) -> Beat:
        return self.__mul__(n)

    def __str__(self) -> str:
        if self.fraction == 0:
            return str(self.whole)
        return f"{self.whole}+{self.fraction.numerator}/{self.fraction.denominator}"

    def __repr__(self) -> str:
        return f"Beat({self})"


# Define common beats
Beat.ZERO = Beat(0)
Beat.ONE = Beat(1)
Beat.MAX = Beat(2**31 - 1)
Beat.MIN = Beat(-(2**31))


def attach(value: float, density: int) -> Beat:
    """
    Snap a float beat to the nearest grid line of a given density.

    Args:
        value: Beat as a float
        density: Grid lines per beat

    Returns:
        The snapped beat (e.g. attach(1.3, 4) == 1+1/4)
    """
    if density <= 0:
        raise ValueError(f"Density must be positive, got {density}")
    return Beat(0, Fraction(math.floor(value * density + 0.5), density))


def beat_range(start: Beat, end: Beat, step: Beat) -> list[Beat]:
    """Beats from start (inclusive) to end (exclusive) in fixed steps."""
    if step <= Beat.ZERO:
        raise ValueError(f"Step must be positive, got {step}")
    beats = []
    current = start
    while current < end:
        beats.append(current)
        current = current + step
    return beats
