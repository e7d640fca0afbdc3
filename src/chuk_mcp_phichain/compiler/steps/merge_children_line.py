"""
Flatten child lines into the root level.

A child line moves in its parent's frame. Flattening bakes the parent's
X, Y and rotation into the child's own motion tracks by composing the two
rigid transforms every 1/32 beat.
"""

from __future__ import annotations

import copy
import math
from dataclasses import replace

from chuk_mcp_phichain.compiler.helpers import MINIMUM_BEAT
from chuk_mcp_phichain.compiler.sequence import evaluate, of_kind, split_points
from chuk_mcp_phichain.constants import BoundaryMode
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.easing import Easing
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind
from chuk_mcp_phichain.models.line import Line

MOTION_KINDS = frozenset({LineEventKind.X, LineEventKind.Y, LineEventKind.ROTATION})

Pose = tuple[float, float, float]


class _MotionTracks:
    def __init__(self, line: Line):
        self.x = of_kind(line.events, LineEventKind.X)
        self.y = of_kind(line.events, LineEventKind.Y)
        self.rotation = of_kind(line.events, LineEventKind.ROTATION)

    def pose(self, beat: Beat, mode: BoundaryMode) -> Pose:
        return (
            evaluate(self.x, beat, mode),
            evaluate(self.y, beat, mode),
            evaluate(self.rotation, beat, mode),
        )


def compose(parent: Pose, child: Pose) -> Pose:
    """Place a child pose (x, y, degrees) in its parent's frame."""
    px, py, protation = parent
    cx, cy, crotation = child
    angle = math.radians(protation)
    cos, sin = math.cos(angle), math.sin(angle)
    return (
        px + cx * cos - cy * sin,
        py + cx * sin + cy * cos,
        protation + crotation,
    )


def _bake(parent: Line, child: Line) -> list[LineEvent]:
    """Sample the composed motion of a child in its parent into linear events."""
    points = split_points(e for e in [*parent.events, *child.events] if e.kind in MOTION_KINDS)
    if not points:
        return []

    parent_tracks = _MotionTracks(parent)
    child_tracks = _MotionTracks(child)
    moves: list[LineEvent] = []
    rotations: list[LineEvent] = []

    current, last = points[0], points[-1]
    while current < last:
        end = min(current + MINIMUM_BEAT, last)
        sx, sy, srotation = compose(
            parent_tracks.pose(current, "exclusive"), child_tracks.pose(current, "exclusive")
        )
        ex, ey, erotation = compose(
            parent_tracks.pose(end, "inclusive"), child_tracks.pose(end, "inclusive")
        )
        moves.append(LineEvent.transition(LineEventKind.X, current, end, sx, ex, Easing.LINEAR))
        moves.append(LineEvent.transition(LineEventKind.Y, current, end, sy, ey, Easing.LINEAR))
        rotations.append(
            LineEvent.transition(LineEventKind.ROTATION, current, end, srotation, erotation, Easing.LINEAR)
        )
        current = end

    return moves + rotations


def flatten_line(line: Line) -> list[Line]:
    """
    Flatten a line and its descendants.

    Returns the baked descendants (deepest first) followed by the line
    itself with its children removed.
    """
    if not line.children:
        return [line]

    flattened: list[Line] = []
    for child in (leaf for c in line.children for leaf in flatten_line(c)):
        others = [e for e in child.events if e.kind not in MOTION_KINDS]
        flattened.append(replace(child, events=others + _bake(line, child), children=[]))
    flattened.append(replace(line, children=[]))
    return flattened


def merge_children_line(chart: Chart) -> Chart:
    """Flatten every line tree of a chart. The input chart is not modified."""
    chart = copy.deepcopy(chart)
    lines = [flat for line in chart.lines for flat in flatten_line(line)]
    return replace(chart, lines=lines)
