"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from chuk_mcp_phichain.core import Beat, BpmList
from chuk_mcp_phichain.models import Chart, Line, LineEvent, LineEventKind, Note


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def simple_chart() -> Chart:
    """One default line with a tap, a drag and a hold at 120 bpm."""
    line = Line.new("main")
    line.notes = [
        Note.tap(Beat(1), x=-200.0),
        Note.drag(Beat.of(1, 1, 2), x=0.0, above=False),
        Note.hold(Beat(2), Beat.of(0, 1, 2), x=200.0),
    ]
    return Chart(offset=0.0, bpm_list=BpmList.single(120), lines=[line])


@pytest.fixture
def nested_chart() -> Chart:
    """A rotated parent line with one child offset along X."""
    child = Line(
        name="child",
        notes=[Note.tap(Beat(1))],
        events=[
            LineEvent.constant(LineEventKind.X, Beat.ZERO, Beat.ONE, 100.0),
            LineEvent.constant(LineEventKind.OPACITY, Beat.ZERO, Beat.ONE, 255.0),
            LineEvent.constant(LineEventKind.SPEED, Beat.ZERO, Beat.ONE, 10.0),
        ],
    )
    parent = Line(
        name="parent",
        events=[
            LineEvent.constant(LineEventKind.ROTATION, Beat.ZERO, Beat.ONE, 90.0),
            LineEvent.constant(LineEventKind.OPACITY, Beat.ZERO, Beat.ONE, 255.0),
            LineEvent.constant(LineEventKind.SPEED, Beat.ZERO, Beat.ONE, 10.0),
        ],
        children=[child],
    )
    return Chart(bpm_list=BpmList.single(120), lines=[parent])
