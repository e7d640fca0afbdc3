"""
Easing - normalized shape functions remapping progress 0..1 to 0..1.

The 31 named easings follow https://easings.net/. Three parametric easings
complete the set:
- CustomEasing: cubic bezier through (x1, y1) and (x2, y2)
- StepsEasing: quantized into n steps
- ElasticEasing: damped oscillation with angular frequency omega

Every easing supports ease(t) and an approximate inverse(y).
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from chuk_mcp_phichain.errors import ChartFormatError

_BACK_C1 = 1.70158
_BACK_C2 = _BACK_C1 * 1.525
_BACK_C3 = _BACK_C1 + 1.0
_ELASTIC_C4 = (2.0 * math.pi) / 3.0
_ELASTIC_C5 = (2.0 * math.pi) / 4.5
_BOUNCE_N1 = 7.5625
_BOUNCE_D1 = 2.75

# Inverse search resolution
_INVERSE_SCAN_STEPS = 64
_BISECTION_ITERATIONS = 60


def _bounce_out(x: float) -> float:
    if x < 1.0 / _BOUNCE_D1:
        return _BOUNCE_N1 * x * x
    if x < 2.0 / _BOUNCE_D1:
        x -= 1.5 / _BOUNCE_D1
        return _BOUNCE_N1 * x * x + 0.75
    if x < 2.5 / _BOUNCE_D1:
        x -= 2.25 / _BOUNCE_D1
        return _BOUNCE_N1 * x * x + 0.9375
    x -= 2.625 / _BOUNCE_D1
    return _BOUNCE_N1 * x * x + 0.984375


def _expo_in(x: float) -> float:
    return 0.0 if x == 0.0 else 2.0 ** (10.0 * x - 10.0)


def _expo_out(x: float) -> float:
    return 1.0 if x == 1.0 else 1.0 - 2.0 ** (-10.0 * x)


def _expo_in_out(x: float) -> float:
    if x == 0.0 or x == 1.0:
        return x
    if x < 0.5:
        return 2.0 ** (20.0 * x - 10.0) / 2.0
    return (2.0 - 2.0 ** (-20.0 * x + 10.0)) / 2.0


def _circ_in_out(x: float) -> float:
    if x < 0.5:
        return (1.0 - math.sqrt(max(0.0, 1.0 - (2.0 * x) ** 2))) / 2.0
    return (math.sqrt(max(0.0, 1.0 - (-2.0 * x + 2.0) ** 2)) + 1.0) / 2.0


def _back_in_out(x: float) -> float:
    if x < 0.5:
        return ((2.0 * x) ** 2 * ((_BACK_C2 + 1.0) * 2.0 * x - _BACK_C2)) / 2.0
    return ((2.0 * x - 2.0) ** 2 * ((_BACK_C2 + 1.0) * (x * 2.0 - 2.0) + _BACK_C2) + 2.0) / 2.0


def _elastic_in(x: float) -> float:
    if x == 0.0 or x == 1.0:
        return x
    return -(2.0 ** (10.0 * x - 10.0)) * math.sin((x * 10.0 - 10.75) * _ELASTIC_C4)


def _elastic_out(x: float) -> float:
    if x == 0.0 or x == 1.0:
        return x
    return 2.0 ** (-10.0 * x) * math.sin((x * 10.0 - 0.75) * _ELASTIC_C4) + 1.0


def _elastic_in_out(x: float) -> float:
    if x == 0.0 or x == 1.0:
        return x
    if x < 0.5:
        return -(2.0 ** (20.0 * x - 10.0) * math.sin((20.0 * x - 11.125) * _ELASTIC_C5)) / 2.0
    return (2.0 ** (-20.0 * x + 10.0) * math.sin((20.0 * x - 11.125) * _ELASTIC_C5)) / 2.0 + 1.0


def _in_out(power: int) -> Callable[[float], float]:
    factor = 2.0 ** (power - 1)

    def ease(x: float) -> float:
        if x < 0.5:
            return factor * x**power
        return 1.0 - (-2.0 * x + 2.0) ** power / 2.0

    return ease


def _search_inverse(ease: Callable[[float], float], y: float) -> float:
    """Find the first t in [0, 1] with ease(t) == y by scanning then bisecting."""
    if y <= 0.0:
        return 0.0
    if y >= 1.0:
        return 1.0

    low = 0.0
    low_value = ease(low) - y
    for i in range(1, _INVERSE_SCAN_STEPS + 1):
        high = i / _INVERSE_SCAN_STEPS
        high_value = ease(high) - y
        if high_value == 0.0:
            return high
        if (low_value < 0.0) != (high_value < 0.0):
            for _ in range(_BISECTION_ITERATIONS):
                middle = (low + high) / 2.0
                middle_value = ease(middle) - y
                if (low_value < 0.0) == (middle_value < 0.0):
                    low, low_value = middle, middle_value
                else:
                    high = middle
            return (low + high) / 2.0
        low, low_value = high, high_value

    return y


class Easing(str, Enum):
    """
    The named easings.

    Declaration order is significant: easing fitting tries candidates in
    this order and keeps the first that fits.
    """

    LINEAR = "linear"
    # Sine
    EASE_IN_SINE = "ease_in_sine"
    EASE_OUT_SINE = "ease_out_sine"
    EASE_IN_OUT_SINE = "ease_in_out_sine"
    # Quad
    EASE_IN_QUAD = "ease_in_quad"
    EASE_OUT_QUAD = "ease_out_quad"
    EASE_IN_OUT_QUAD = "ease_in_out_quad"
    # Cubic
    EASE_IN_CUBIC = "ease_in_cubic"
    EASE_OUT_CUBIC = "ease_out_cubic"
    EASE_IN_OUT_CUBIC = "ease_in_out_cubic"
    # Quart
    EASE_IN_QUART = "ease_in_quart"
    EASE_OUT_QUART = "ease_out_quart"
    EASE_IN_OUT_QUART = "ease_in_out_quart"
    # Quint
    EASE_IN_QUINT = "ease_in_quint"
    EASE_OUT_QUINT = "ease_out_quint"
    EASE_IN_OUT_QUINT = "ease_in_out_quint"
    # Expo
    EASE_IN_EXPO = "ease_in_expo"
    EASE_OUT_EXPO = "ease_out_expo"
    EASE_IN_OUT_EXPO = "ease_in_out_expo"
    # Circ
    EASE_IN_CIRC = "ease_in_circ"
    EASE_OUT_CIRC = "ease_out_circ"
    EASE_IN_OUT_CIRC = "ease_in_out_circ"
    # Back
    EASE_IN_BACK = "ease_in_back"
    EASE_OUT_BACK = "ease_out_back"
    EASE_IN_OUT_BACK = "ease_in_out_back"
    # Elastic
    EASE_IN_ELASTIC = "ease_in_elastic"
    EASE_OUT_ELASTIC = "ease_out_elastic"
    EASE_IN_OUT_ELASTIC = "ease_in_out_elastic"
    # Bounce
    EASE_IN_BOUNCE = "ease_in_bounce"
    EASE_OUT_BOUNCE = "ease_out_bounce"
    EASE_IN_OUT_BOUNCE = "ease_in_out_bounce"

    def ease(self, t: float) -> float:
        """Map progress t to eased progress."""
        return _EASE_FUNCTIONS[self](t)

    def inverse(self, y: float) -> float:
        """Find the progress whose eased value is y (first match for non-monotonic easings)."""
        if self is Easing.LINEAR:
            return y
        return _search_inverse(self.ease, y)

    def is_linear(self) -> bool:
        return self is Easing.LINEAR

    def is_in(self) -> bool:
        """Return True for ease-in variants."""
        return self.value.startswith("ease_in_") and not self.is_in_out()

    def is_out(self) -> bool:
        """Return True for ease-out variants."""
        return self.value.startswith("ease_out_")

    def is_in_out(self) -> bool:
        """Return True for ease-in-out variants."""
        return self.value.startswith("ease_in_out_")

    def to_json(self) -> Any:
        """Serialize as its snake_case name."""
        return self.value

    def __str__(self) -> str:
        return self.value


_EASE_FUNCTIONS: dict[Easing, Callable[[float], float]] = {
    Easing.LINEAR: lambda x: x,
    Easing.EASE_IN_SINE: lambda x: 1.0 - math.cos((x * math.pi) / 2.0),
    Easing.EASE_OUT_SINE: lambda x: math.sin((x * math.pi) / 2.0),
    Easing.EASE_IN_OUT_SINE: lambda x: -(math.cos(math.pi * x) - 1.0) / 2.0,
    Easing.EASE_IN_QUAD: lambda x: x**2,
    Easing.EASE_OUT_QUAD: lambda x: 1.0 - (1.0 - x) ** 2,
    Easing.EASE_IN_OUT_QUAD: _in_out(2),
    Easing.EASE_IN_CUBIC: lambda x: x**3,
    Easing.EASE_OUT_CUBIC: lambda x: 1.0 - (1.0 - x) ** 3,
    Easing.EASE_IN_OUT_CUBIC: _in_out(3),
    Easing.EASE_IN_QUART: lambda x: x**4,
    Easing.EASE_OUT_QUART: lambda x: 1.0 - (1.0 - x) ** 4,
    Easing.EASE_IN_OUT_QUART: _in_out(4),
    Easing.EASE_IN_QUINT: lambda x: x**5,
    Easing.EASE_OUT_QUINT: lambda x: 1.0 - (1.0 - x) ** 5,
    Easing.EASE_IN_OUT_QUINT: _in_out(5),
    Easing.EASE_IN_EXPO: _expo_in,
    Easing.EASE_OUT_EXPO: _expo_out,
    Easing.EASE_IN_OUT_EXPO: _expo_in_out,
    Easing.EASE_IN_CIRC: lambda x: 1.0 - math.sqrt(max(0.0, 1.0 - x**2)),
    Easing.EASE_OUT_CIRC: lambda x: math.sqrt(max(0.0, 1.0 - (x - 1.0) ** 2)),
    Easing.EASE_IN_OUT_CIRC: _circ_in_out,
    Easing.EASE_IN_BACK: lambda x: _BACK_C3 * x**3 - _BACK_C1 * x**2,
    Easing.EASE_OUT_BACK: lambda x: 1.0 + _BACK_C3 * (x - 1.0) ** 3 + _BACK_C1 * (x - 1.0) ** 2,
    Easing.EASE_IN_OUT_BACK: _back_in_out,
    Easing.EASE_IN_ELASTIC: _elastic_in,
    Easing.EASE_OUT_ELASTIC: _elastic_out,
    Easing.EASE_IN_OUT_ELASTIC: _elastic_in_out,
    Easing.EASE_IN_BOUNCE: lambda x: 1.0 - _bounce_out(1.0 - x),
    Easing.EASE_OUT_BOUNCE: _bounce_out,
    Easing.EASE_IN_OUT_BOUNCE: lambda x: (
        (1.0 - _bounce_out(1.0 - 2.0 * x)) / 2.0
        if x < 0.5
        else (1.0 + _bounce_out(2.0 * x - 1.0)) / 2.0
    ),
}

# Candidates for easing fitting, in declaration order
FITTING_EASINGS: tuple[Easing, ...] = tuple(Easing)


@dataclass(frozen=True)
class CustomEasing:
    """
    Cubic bezier easing from (0, 0) to (1, 1).

    (x1, y1) and (x2, y2) are the two inner control points, as in CSS
    cubic-bezier().
    """

    x1: float
    y1: float
    x2: float
    y2: float

    @staticmethod
    def _component(a: float, b: float, s: float) -> float:
        inv = 1.0 - s
        return 3.0 * inv * inv * s * a + 3.0 * inv * s * s * b + s * s * s

    def _solve(self, x: float) -> float:
        """Find the curve parameter whose x component equals x."""
        low, high = 0.0, 1.0
        for _ in range(_BISECTION_ITERATIONS):
            middle = (low + high) / 2.0
            if self._component(self.x1, self.x2, middle) < x:
                low = middle
            else:
                high = middle
        return (low + high) / 2.0

    def ease(self, t: float) -> float:
        t = min(1.0, max(0.0, t))
        if t == 0.0 or t == 1.0:
            return t
        return self._component(self.y1, self.y2, self._solve(t))

    def inverse(self, y: float) -> float:
        return _search_inverse(self.ease, y)

    def is_linear(self) -> bool:
        return False

    def to_json(self) -> Any:
        return {"custom": [self.x1, self.y1, self.x2, self.y2]}

    def __str__(self) -> str:
        return "custom"


@dataclass(frozen=True)
class StepsEasing:
    """Quantize progress into a number of steps."""

    steps: int

    def ease(self, t: float) -> float:
        return round(t * self.steps) / max(self.steps, 1)

    def inverse(self, y: float) -> float:
        return _search_inverse(self.ease, y)

    def is_linear(self) -> bool:
        return False

    def to_json(self) -> Any:
        return {"steps": self.steps}

    def __str__(self) -> str:
        return f"steps({self.steps})"


@dataclass(frozen=True)
class ElasticEasing:
    """Damped oscillation settling at 1 with angular frequency omega."""

    omega: float

    def ease(self, t: float) -> float:
        if self.omega == 0.0:
            return 1.0 - (1.0 - t) ** 2 * (2.0 * t + 1.0)
        return 1.0 - (1.0 - t) ** 2 * (
            2.0 * math.sin(self.omega * t) / self.omega + math.cos(self.omega * t)
        )

    def inverse(self, y: float) -> float:
        return _search_inverse(self.ease, y)

    def is_linear(self) -> bool:
        return False

    def to_json(self) -> Any:
        return {"elastic": self.omega}

    def __str__(self) -> str:
        return f"elastic({self.omega})"


AnyEasing = Easing | CustomEasing | StepsEasing | ElasticEasing


def tween(x1: float, x2: float, t: float, easing: AnyEasing) -> float:
    """Interpolate from x1 to x2 at progress t along an easing."""
    return x1 + easing.ease(t) * (x2 - x1)


def easing_from_json(data: Any, path: str = "easing") -> AnyEasing:
    """
    Parse an easing from its serialized form.

    Accepts a snake_case name, {"custom": [x1, y1, x2, y2]},
    {"steps": n} or {"elastic": omega}.
    """
    if isinstance(data, str):
        try:
            return Easing(data)
        except ValueError:
            raise ChartFormatError(f"unknown easing {data!r}", path) from None
    if isinstance(data, dict) and len(data) == 1:
        ((key, value),) = data.items()
        if key == "custom":
            if not isinstance(value, list) or len(value) != 4:
                raise ChartFormatError("custom easing needs 4 numbers", path)
            return CustomEasing(*(float(v) for v in value))
        if key == "steps" and isinstance(value, int):
            return StepsEasing(value)
        if key == "elastic" and isinstance(value, (int, float)):
            return ElasticEasing(float(value))
    raise ChartFormatError(f"invalid easing {data!r}", path)
