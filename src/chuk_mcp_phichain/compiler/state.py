"""Line state sampled from a line's events at a beat."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from chuk_mcp_phichain.compiler.sequence import evaluate, of_kind
from chuk_mcp_phichain.constants import CANVAS_HEIGHT, CANVAS_WIDTH
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind


@dataclass(frozen=True)
class LineState:
    """Position, rotation, opacity and speed of a line at one beat."""

    x: float
    y: float
    rotation: float
    opacity: float
    speed: float

    def is_visible(self) -> bool:
        """
        Return True if the line can be seen.

        The line must be opaque and its centre must lie on the canvas
        (origin at the canvas centre).
        """
        if self.opacity <= 0.0:
            return False
        return abs(self.x) <= CANVAS_WIDTH / 2 and abs(self.y) <= CANVAS_HEIGHT / 2


def evaluate_state(events: Sequence[LineEvent], beat: Beat) -> LineState:
    """Sample every track of a line at a beat."""
    return LineState(
        x=evaluate(of_kind(events, LineEventKind.X), beat),
        y=evaluate(of_kind(events, LineEventKind.Y), beat),
        rotation=evaluate(of_kind(events, LineEventKind.ROTATION), beat),
        opacity=evaluate(of_kind(events, LineEventKind.OPACITY), beat),
        speed=evaluate(of_kind(events, LineEventKind.SPEED), beat),
    )
