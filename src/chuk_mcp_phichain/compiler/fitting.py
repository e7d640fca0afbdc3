"""
Easing fitting - compact runs of small linear events into eased events.

Importers that only know linear segments (or that sample curves) produce
long runs of short events. Fitting looks for runs that follow one of the
named easings and replaces each with a single eased event.

    In:  |----|----|----|----|----|   (many small linear segments)
    Out: |~~~~~~~~~~~~~~~~~~~~~~~~|   (single eased event)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from chuk_mcp_phichain.compiler.helpers import are_contiguous
from chuk_mcp_phichain.compiler.sequence import sorted_events
from chuk_mcp_phichain.constants import DEFAULT_EASING_FITTING_EPSILON
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.easing import FITTING_EASINGS, Easing
from chuk_mcp_phichain.models.event import Direction, LineEvent, Transition

logger = logging.getLogger(__name__)


@dataclass
class FitResult:
    """
    Outcome of fit_easing.

    `fitted` is the replacement event, or None when no easing fits; in
    that case `events` holds the original events unchanged.
    """

    fitted: LineEvent | None
    events: list[LineEvent] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.fitted is not None


def fit_easing(
    events: Sequence[LineEvent],
    epsilon: float = DEFAULT_EASING_FITTING_EPSILON,
    candidates: Sequence[Easing] = FITTING_EASINGS,
) -> FitResult:
    """
    Try to replace a contiguous run of events with a single eased event.

    Every candidate spans [first.start_beat, last.end_beat] with values
    [first.start, last.end]. A candidate fits when it lands within epsilon
    of every event's start and end value. Candidates are tried in order and
    the first fit wins.

    Args:
        events: A contiguous run of events of one kind
        epsilon: Allowed deviation per sampled value
        candidates: Easings to try, in priority order

    Returns:
        FitResult with the fitted event, or the original events
    """
    if len(events) < 2:
        return FitResult(None, list(events))

    first = events[0]
    last = events[-1]

    for easing in candidates:
        target = LineEvent(
            first.kind,
            first.start_beat,
            last.end_beat,
            Transition(first.value.start, last.value.end, easing),
        )
        fits = True
        for event in events:
            if (
                abs(target.value_at(event.start_beat) - event.value.start) > epsilon
                or abs(target.value_at(event.end_beat) - event.value.end) > epsilon
            ):
                fits = False
                break
        if fits:
            logger.debug("Fitted %d events with %s", len(events), easing)
            return FitResult(target, [target])

    return FitResult(None, list(events))


class _Buffer:
    """A run of events sharing contiguity, duration and direction."""

    def __init__(self, epsilon: float):
        self.epsilon = epsilon
        self.events: list[LineEvent] = []
        self.duration: Beat | None = None
        self.direction: Direction | None = None

    def accept(self, event: LineEvent) -> bool:
        # Constant events cannot be fitted
        if event.value.is_numeric_constant():
            return False
        if not self.events:
            return True
        return (
            are_contiguous(self.events[-1], event)
            and (self.duration is None or self.duration == event.duration)
            and (self.direction is None or self.direction == event.value.direction())
        )

    def push(self, event: LineEvent) -> None:
        if not self.events:
            self.duration = event.duration
            self.direction = event.value.direction()
        self.events.append(event)

    def drain_into(self, target: list[LineEvent]) -> None:
        if not self.events:
            return
        target.extend(fit_easing(self.events, self.epsilon).events)
        self.events = []
        self.duration = None
        self.direction = None


def fit_events(
    events: Sequence[LineEvent], epsilon: float = DEFAULT_EASING_FITTING_EPSILON
) -> list[LineEvent]:
    """
    Fit a whole event sequence.

    Events are sorted by start beat and grouped greedily into runs of
    contiguous events with the same duration and direction; each run is
    passed to fit_easing. Events that cannot join a run (constants) pass
    through in place.
    """
    fitted: list[LineEvent] = []
    buffer = _Buffer(epsilon)

    for event in sorted_events(events):
        if not buffer.accept(event):
            buffer.drain_into(fitted)
        if buffer.accept(event):
            buffer.push(event)
        else:
            fitted.append(event)

    buffer.drain_into(fitted)
    if len(fitted) < len(events):
        logger.debug("Fitted %d events into %d", len(events), len(fitted))
    return fitted
