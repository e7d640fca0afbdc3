"""
Pack lines with disjoint lifetimes into shared lines.

Lines are taken in order of lifetime start and placed into the first group
whose combined lifetime they do not overlap (first-fit interval packing).
Each group becomes one line whose tracks follow each member inside that
member's lifetime.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace

from chuk_mcp_phichain.compiler.helpers import clamp, fill_gap_until
from chuk_mcp_phichain.compiler.lifetime import LineLifetime, find_lifetime, merge_lifetimes
from chuk_mcp_phichain.compiler.sequence import group_by_kind
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.errors import EventSequenceError
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.event import LineEvent
from chuk_mcp_phichain.models.line import Line

logger = logging.getLogger(__name__)


@dataclass
class LineGroup:
    """Lines sharing one physical line."""

    lifetime: LineLifetime = field(default_factory=LineLifetime)
    members: list[tuple[Line, LineLifetime]] = field(default_factory=list)

    def fits(self, lifetime: LineLifetime) -> bool:
        return not self.lifetime.overlaps(lifetime)

    def add(self, line: Line, lifetime: LineLifetime) -> None:
        self.members.append((line, lifetime))
        self.lifetime = merge_lifetimes([self.lifetime, lifetime])


def _windowed_events(line: Line, lifetime: LineLifetime) -> list[LineEvent]:
    """A line's tracks restricted to its lifetime, gaps filled with held values."""
    events: list[LineEvent] = []
    if lifetime.is_unit():
        return events
    until = max(r.end for r in lifetime.ranges)
    for kind_events in group_by_kind(line.events).values():
        filled = fill_gap_until(kind_events, until, 0.0)
        for window in lifetime.ranges:
            events.extend(clamp(filled, window.start, window.end))
    return events


def group_lines(lines: list[Line]) -> list[LineGroup]:
    """Group lines so that no two members of a group have overlapping lifetimes."""
    lifetimes = [find_lifetime(line) for line in lines]
    order = sorted(
        range(len(lines)),
        key=lambda i: (lifetimes[i].start if lifetimes[i].start is not None else Beat.MAX, i),
    )

    groups: list[LineGroup] = []
    for i in order:
        line, lifetime = lines[i], lifetimes[i]
        target = next((g for g in groups if g.fits(lifetime)), None)
        if target is None:
            target = LineGroup()
            groups.append(target)
        target.add(line, lifetime)
    return groups


def _merge_group(group: LineGroup) -> list[Line]:
    """Merge a group into one line; members whose tracks overlap within a kind stay apart."""
    if len(group.members) == 1:
        return [group.members[0][0]]

    events: list[LineEvent] = []
    notes = []
    for line, lifetime in group.members:
        try:
            events.extend(_windowed_events(line, lifetime))
        except EventSequenceError as e:
            logger.warning("Line '%s' cannot share a line: %s", line.name, e)
            return [member for member, _ in group.members]
        notes.extend(line.notes)

    first = group.members[0][0]
    name = " + ".join(line.name for line, _ in group.members)
    return [replace(first, name=name, notes=notes, events=events, children=[], curve_note_tracks=[])]


def reuse_lines(chart: Chart) -> Chart:
    """
    Reduce the number of lines of a flattened chart by sharing lines.

    Unit lines should be removed first; they are never alive and would be
    packed away with no events.
    """
    chart = copy.deepcopy(chart)
    lines: list[Line] = []
    for group in group_lines(chart.lines):
        lines.extend(_merge_group(group))
    logger.info("Reused lines: %d -> %d", len(chart.lines), len(lines))
    return replace(chart, lines=lines)
