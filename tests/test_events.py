"""
Tests for line events and event sequences.

Tests cover:
- Constant, Transition and LineEvent (models/event.py)
- Note serialization (models/note.py)
- Sequence evaluation (compiler/sequence.py)
- Filling, cutting, clamping and merging (compiler/helpers.py)
"""

import pytest

from chuk_mcp_phichain.compiler.helpers import (
    MINIMUM_BEAT,
    are_contiguous,
    check_overlap,
    clamp,
    cut,
    ensure_same_kind,
    fill_gap,
    fill_gap_until,
    merge,
)
from chuk_mcp_phichain.compiler.sequence import (
    evaluate,
    evaluate_exclusive,
    group_by_kind,
    of_kind,
    split_points,
)
from chuk_mcp_phichain.core import Beat, Easing
from chuk_mcp_phichain.errors import ChartFormatError, DifferentKindError, EventSequenceError, OverlapError
from chuk_mcp_phichain.models import (
    Constant,
    CurveNoteTrack,
    Direction,
    LineEvent,
    LineEventKind,
    Note,
    NoteKind,
    Transition,
)

X = LineEventKind.X


def linear(start_beat: int, end_beat: int, start: float, end: float, kind: LineEventKind = X) -> LineEvent:
    return LineEvent.transition(kind, Beat(start_beat), Beat(end_beat), start, end)


def constant(start_beat: int, end_beat: int, value: float, kind: LineEventKind = X) -> LineEvent:
    return LineEvent.constant(kind, Beat(start_beat), Beat(end_beat), value)


class TestEventValue:
    """Tests for Constant and Transition."""

    def test_constant(self) -> None:
        """A constant has equal start and end."""
        value = Constant(3.0)
        assert value.start == value.end == 3.0
        assert value.easing is Easing.LINEAR
        assert value.direction() == Direction.CONSTANT

    def test_numeric_constant_transition(self) -> None:
        """Transitions with (nearly) equal ends collapse to constants."""
        value = Transition(1.0, 1.00001, Easing.EASE_IN_SINE)
        assert value.is_numeric_constant()
        assert value.into_constant() == Constant(1.0)

    def test_direction(self) -> None:
        """Direction of a transition."""
        assert Transition(0.0, 1.0).direction() == Direction.INCREASING
        assert Transition(1.0, 0.0).direction() == Direction.DECREASING
        assert Transition(0.0, 5.0).into_constant() == Transition(0.0, 5.0)


class TestLineEvent:
    """Tests for LineEvent evaluation and serialization."""

    def test_evaluate_inside(self) -> None:
        """Inside the span the eased value is returned."""
        event = linear(0, 4, 0.0, 100.0)
        assert event.evaluate(2.0) == pytest.approx(50.0)
        assert event.evaluate(0.0) == 0.0
        assert event.evaluate(4.0) == 100.0

    def test_evaluate_outside(self) -> None:
        """After the end the end value holds; before the start there is no value."""
        event = linear(1, 4, 0.0, 100.0)
        assert event.evaluate(5.0) == 100.0
        assert event.evaluate(0.5) is None

    def test_evaluate_exclusive_start(self) -> None:
        """In exclusive mode the start beat is not covered."""
        event = linear(1, 2, 10.0, 20.0)
        assert event.evaluate(1.0, "exclusive") is None
        assert event.evaluate_exclusive(1.5) == pytest.approx(15.0)

    def test_eased_evaluation(self) -> None:
        """The easing shapes the value."""
        event = LineEvent.transition(X, Beat.ZERO, Beat(2), 0.0, 100.0, Easing.EASE_IN_QUAD)
        assert event.evaluate(1.0) == pytest.approx(25.0)

    def test_zero_length(self) -> None:
        """A zero-length event yields its end value."""
        event = LineEvent.transition(X, Beat(1), Beat(1), 0.0, 7.0)
        assert event.evaluate(1.0) == 7.0

    def test_value_at(self) -> None:
        """Beats the event has reached are sampled; earlier beats raise."""
        event = linear(1, 3, 0.0, 100.0)
        assert event.value_at(Beat(2)) == pytest.approx(50.0)
        assert event.value_at(Beat(5)) == 100.0
        with pytest.raises(EventSequenceError, match="before the x event"):
            event.value_at(Beat.of(0, 1, 2))

    def test_duration(self) -> None:
        """Duration in beats."""
        event = LineEvent.constant(X, Beat.of(1, 1, 2), Beat(3), 0.0)
        assert event.duration == Beat.of(1, 1, 2)

    def test_round_trip(self) -> None:
        """to_dict/from_dict keep every field."""
        event = LineEvent.transition(
            LineEventKind.ROTATION, Beat.of(0, 1, 4), Beat(2), -30.0, 45.0, Easing.EASE_OUT_BACK
        )
        data = event.to_dict()
        assert data == {
            "kind": "rotation",
            "start_beat": [0, 1, 4],
            "end_beat": [2, 0, 1],
            "value": {"transition": {"start": -30.0, "end": 45.0, "easing": "ease_out_back"}},
        }
        assert LineEvent.from_dict(data) == event

    def test_constant_round_trip(self) -> None:
        """Constants serialize as {'constant': v}."""
        event = constant(0, 1, 255.0, LineEventKind.OPACITY)
        assert event.to_dict()["value"] == {"constant": 255.0}
        assert LineEvent.from_dict(event.to_dict()) == event

    def test_from_dict_unknown_kind(self) -> None:
        """Unknown kinds report the field path."""
        data = linear(0, 1, 0.0, 1.0).to_dict()
        data["kind"] = "scale"
        with pytest.raises(ChartFormatError) as exc_info:
            LineEvent.from_dict(data, "lines[0].events[3]")
        assert exc_info.value.path == "lines[0].events[3].kind"


class TestNote:
    """Tests for note serialization."""

    def test_round_trip(self) -> None:
        """Holds keep their length under the kind."""
        note = Note.hold(Beat(2), Beat.of(0, 1, 2), x=-120.5, above=False)
        data = note.to_dict()
        assert data["kind"] == {"hold": {"hold_beat": [0, 1, 2]}}
        assert Note.from_dict(data) == note

    def test_hold_without_length(self) -> None:
        """A hold that lost its length cannot be serialized."""
        note = Note.hold(Beat.ONE, Beat.ONE)
        note.hold_beat = None
        with pytest.raises(ChartFormatError):
            note.to_dict()

    @pytest.mark.parametrize("key, value", [("x", "left"), ("x", None), ("speed", [1]), ("speed", True)])
    def test_non_numeric_fields(self, key: str, value: object) -> None:
        """Non-numeric x and speed report the field path."""
        data = Note.tap(Beat.ONE).to_dict()
        data[key] = value
        with pytest.raises(ChartFormatError) as exc_info:
            Note.from_dict(data, "lines[0].notes[2]")
        assert exc_info.value.path == f"lines[0].notes[2].{key}"

    def test_missing_speed_defaults(self) -> None:
        """Speed is optional."""
        data = Note.tap(Beat.ONE, x=5).to_dict()
        del data["speed"]
        note = Note.from_dict(data)
        assert note.kind == NoteKind.TAP
        assert note.speed == 1.0
        assert note.x == 5.0

    def test_curve_track_indices(self) -> None:
        """Curve track endpoints must be note indices."""
        data = CurveNoteTrack(0, 1).to_dict()
        assert CurveNoteTrack.from_dict(data) == CurveNoteTrack(0, 1)

        data["to"] = "1"
        with pytest.raises(ChartFormatError) as exc_info:
            CurveNoteTrack.from_dict(data, "tracks[0]")
        assert exc_info.value.path == "tracks[0].to"


class TestSequence:
    """Tests for sequence evaluation."""

    def test_gap_holds_previous_end(self) -> None:
        """Between events the previous end value holds."""
        events = [linear(0, 2, 0.0, 10.0), linear(4, 6, 20.0, 30.0)]
        assert evaluate(events, Beat(3)) == 10.0
        assert evaluate(events, Beat(5)) == pytest.approx(25.0)

    def test_default_is_zero(self) -> None:
        """Before any event the value is 0."""
        assert evaluate([linear(1, 2, 5.0, 6.0)], Beat.ZERO) == 0.0
        assert evaluate([], Beat(10)) == 0.0

    def test_later_events_win(self) -> None:
        """The last contributing event in start order wins."""
        events = [constant(2, 3, 7.0), constant(0, 4, 5.0)]
        assert evaluate(events, Beat.of(2, 1, 2)) == 7.0
        assert evaluate(events, Beat.of(3, 1, 2)) == 7.0

    def test_exclusive_boundary(self) -> None:
        """In exclusive mode an event starting at the beat does not apply."""
        events = [linear(0, 1, 0.0, 10.0), constant(1, 2, 50.0)]
        assert evaluate(events, Beat(1)) == 50.0
        assert evaluate_exclusive(events, Beat(1)) == 10.0

    def test_split_points(self) -> None:
        """Unique, sorted start and end beats."""
        events = [linear(2, 4, 0.0, 1.0), linear(0, 2, 0.0, 1.0)]
        assert split_points(events) == [Beat.ZERO, Beat(2), Beat(4)]

    def test_grouping(self) -> None:
        """Filter and group by kind."""
        events = [constant(0, 1, 0.0), constant(0, 1, 1.0, LineEventKind.Y), constant(1, 2, 2.0)]
        assert of_kind(events, X) == [events[0], events[2]]
        groups = group_by_kind(events)
        assert list(groups) == [X, LineEventKind.Y]
        assert len(groups[X]) == 2


class TestHelpers:
    """Tests for sequence helpers."""

    def test_check_overlap(self) -> None:
        """Overlapping events raise with the beat of the overlap."""
        check_overlap([linear(0, 1, 0.0, 1.0), linear(1, 2, 0.0, 1.0)])
        with pytest.raises(OverlapError) as exc_info:
            check_overlap([linear(0, 2, 0.0, 1.0), linear(1, 3, 0.0, 1.0)])
        assert exc_info.value.beat == Beat(1)

    def test_ensure_same_kind(self) -> None:
        """Mixed kinds raise DifferentKindError."""
        assert ensure_same_kind([]) is None
        assert ensure_same_kind([constant(0, 1, 0.0)]) == X
        with pytest.raises(DifferentKindError):
            ensure_same_kind([constant(0, 1, 0.0), constant(0, 1, 0.0, LineEventKind.Y)])

    def test_fill_gap_until(self) -> None:
        """Gaps become constants holding the previous value."""
        filled = fill_gap_until([constant(1, 2, 5.0)], Beat(4), 0.0)
        assert filled == [constant(0, 1, 0.0), constant(1, 2, 5.0), constant(2, 4, 5.0)]

    def test_fill_gap(self) -> None:
        """fill_gap stops at the last event."""
        filled = fill_gap([linear(2, 3, 1.0, 2.0)], 9.0)
        assert filled == [constant(0, 2, 9.0), linear(2, 3, 1.0, 2.0)]
        assert fill_gap([], 0.0) == []

    def test_cut_keeps_linear(self) -> None:
        """Linear and constant events pass through."""
        event = linear(0, 1, 0.0, 1.0)
        assert cut(event) == [event]
        assert cut(constant(0, 1, 3.0)) == [constant(0, 1, 3.0)]

    def test_cut_force_linear(self) -> None:
        """force_linear slices linear events too."""
        slices = cut(linear(0, 1, 0.0, 32.0), force_linear=True)
        assert len(slices) == 32
        assert slices[1].start_beat == MINIMUM_BEAT
        assert slices[1].value.start == pytest.approx(1.0)

    def test_cut_eased(self) -> None:
        """Eased events become 1/32 linear slices."""
        event = LineEvent.transition(X, Beat.ZERO, Beat.ONE, 0.0, 1.0, Easing.EASE_IN_SINE)
        slices = cut(event)
        assert len(slices) == 32
        assert slices[0].start_beat == Beat.ZERO
        assert slices[-1].end_beat == Beat.ONE
        assert slices[-1].value.end == pytest.approx(1.0)
        assert all(s.value.easing is Easing.LINEAR for s in slices)

    def test_cut_flat_eased_becomes_constant(self) -> None:
        """An eased event with equal ends becomes a constant."""
        event = LineEvent.transition(X, Beat.ZERO, Beat.ONE, 2.0, 2.0, Easing.EASE_OUT_QUAD)
        assert cut(event) == [constant(0, 1, 2.0)]

    def test_clamp_linear(self) -> None:
        """Linear events crossing a bound are shortened."""
        clamped = clamp([linear(0, 4, 0.0, 40.0)], Beat(1), Beat(3))
        assert len(clamped) == 1
        assert clamped[0].start_beat == Beat(1)
        assert clamped[0].end_beat == Beat(3)
        assert clamped[0].value.start == pytest.approx(10.0)
        assert clamped[0].value.end == pytest.approx(30.0)

    def test_clamp_drops_outside(self) -> None:
        """Events entirely outside the bounds are dropped."""
        events = [constant(0, 1, 1.0), constant(1, 2, 2.0), constant(5, 6, 3.0)]
        assert clamp(events, Beat(1), Beat(4)) == [constant(1, 2, 2.0)]

    def test_clamp_eased(self) -> None:
        """Eased events are cut and only inside slices kept."""
        event = LineEvent.transition(X, Beat.ZERO, Beat(2), 0.0, 1.0, Easing.EASE_IN_QUAD)
        clamped = clamp([event], Beat.ONE, Beat(2))
        assert len(clamped) == 32
        assert clamped[0].start_beat == Beat.ONE

    def test_merge_disjoint(self) -> None:
        """Disjoint events are kept as they are."""
        merged = merge([constant(0, 2, 1.0)], [constant(4, 5, 2.0)])
        assert merged == [constant(0, 2, 1.0), constant(4, 5, 2.0)]

    def test_merge_overlapping_sums(self) -> None:
        """Overlapping events are resampled with summed values."""
        merged = merge([constant(0, 1, 1.0)], [constant(0, 1, 2.0)])
        assert len(merged) == 32
        assert all(e.value.start == 3.0 and e.value.end == 3.0 for e in merged)

    def test_merge_empty(self) -> None:
        """Merging with nothing returns the other side."""
        events = [constant(0, 1, 1.0)]
        assert merge(events, []) == events
        assert merge([], events) == events

    def test_are_contiguous(self) -> None:
        """Beats and values must meet, in either order."""
        a = linear(0, 1, 0.0, 5.0)
        b = linear(1, 2, 5.0, 9.0)
        assert are_contiguous(a, b)
        assert are_contiguous(b, a)
        assert not are_contiguous(a, linear(1, 2, 6.0, 9.0))
        assert not are_contiguous(a, linear(2, 3, 5.0, 9.0))
