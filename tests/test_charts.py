"""
Tests for chart management and validation.
"""

import json
from pathlib import Path

import pytest

from chuk_mcp_phichain.charts import (
    ChartManager,
    ValidationSeverity,
    parse_line_path,
    resolve_line,
    validate_chart,
)
from chuk_mcp_phichain.core import Beat, BpmList, Easing
from chuk_mcp_phichain.core.bpm_list import BpmPoint
from chuk_mcp_phichain.errors import MigrationError
from chuk_mcp_phichain.models import (
    Chart,
    CurveNoteTrack,
    Line,
    LineEvent,
    LineEventKind,
    Note,
    NoteKind,
)


@pytest.fixture
def manager(temp_dir: Path) -> ChartManager:
    return ChartManager(temp_dir / "charts")


class TestLinePaths:
    """Tests for line addressing."""

    def test_parse(self) -> None:
        """Paths split on '/'."""
        assert parse_line_path("0") == [0]
        assert parse_line_path("0/2") == [0, 2]
        assert parse_line_path(3) == [3]

    def test_parse_invalid(self) -> None:
        """Non-numeric parts are rejected."""
        with pytest.raises(ValueError, match="Invalid line path"):
            parse_line_path("a/b")

    def test_resolve(self, nested_chart: Chart) -> None:
        """Paths walk the line tree."""
        assert resolve_line(nested_chart, "0").name == "parent"
        assert resolve_line(nested_chart, "0/0").name == "child"

    def test_resolve_out_of_range(self, nested_chart: Chart) -> None:
        """Missing lines raise ValueError."""
        with pytest.raises(ValueError, match="out of range"):
            resolve_line(nested_chart, "0/1")
        with pytest.raises(ValueError):
            resolve_line(nested_chart, 4)


class TestValidator:
    """Tests for ChartValidator."""

    def test_valid_chart(self, simple_chart: Chart) -> None:
        """A default chart has no issues."""
        result = validate_chart(simple_chart)
        assert result.is_valid
        assert result.issues == []
        assert "no issues" in str(result)

    def test_no_lines(self) -> None:
        """Empty charts get a warning."""
        result = validate_chart(Chart())
        assert result.is_valid
        assert result.codes() == ["NO_LINES"]

    def test_bpm_list(self) -> None:
        """Tempo changes are reported."""
        chart = Chart(bpm_list=BpmList([BpmPoint(Beat.ZERO, 120.0), BpmPoint(Beat(4), 140.0)]), lines=[Line.new()])
        result = validate_chart(chart)
        assert result.is_valid
        assert result.codes() == ["BPM_CHANGES"]

    def test_event_problems(self) -> None:
        """Overlapping and reversed events are errors."""
        line = Line.new("bad")
        line.events.append(LineEvent.constant(LineEventKind.X, Beat.of(0, 1, 2), Beat(2), 1.0))
        line.events.append(LineEvent.constant(LineEventKind.Y, Beat(4), Beat(3), 1.0))
        result = validate_chart(Chart(lines=[line]))

        assert not result.is_valid
        codes = result.codes()
        assert "EVENT_OVERLAP" in codes
        assert "INVALID_EVENT_RANGE" in codes
        reversed_event = next(i for i in result.errors if i.code == "INVALID_EVENT_RANGE")
        assert reversed_event.location == "lines/0/events/6"

    def test_note_problems(self) -> None:
        """Zero-length holds and negative beats are reported."""
        line = Line.new()
        line.notes = [Note.hold(Beat.ONE, Beat.ZERO), Note.tap(Beat.of(-1, 1, 2))]
        result = validate_chart(Chart(lines=[line]))
        assert [i.code for i in result.errors] == ["INVALID_HOLD"]
        assert [i.code for i in result.warnings] == ["NEGATIVE_NOTE_BEAT"]

    def test_lines_without_events(self) -> None:
        """Lines without events or opacity are flagged."""
        no_opacity = Line(
            name="dark",
            notes=[Note.tap(Beat.ONE)],
            events=[LineEvent.constant(LineEventKind.SPEED, Beat.ZERO, Beat.ONE, 10.0)],
        )
        result = validate_chart(Chart(lines=[Line(name="empty"), no_opacity]))
        assert result.is_valid
        assert result.codes() == ["NO_EVENTS", "NO_OPACITY_EVENTS"]

    def test_curve_tracks(self) -> None:
        """Curve tracks must point at two different existing notes."""
        line = Line.new()
        line.notes = [Note.tap(Beat.ZERO)]
        line.curve_note_tracks = [CurveNoteTrack(0, 3), CurveNoteTrack(0, 0)]
        result = validate_chart(Chart(lines=[line]))
        assert result.codes() == ["INVALID_CURVE_TRACK", "EMPTY_CURVE_TRACK"]

    def test_children_are_checked(self, nested_chart: Chart) -> None:
        """Issues in child lines carry their path."""
        nested_chart.lines[0].children[0].notes.append(Note.tap(Beat.of(-1, 0, 1)))
        result = validate_chart(nested_chart)
        assert result.warnings[0].location == "lines/0/0/notes/1"

    def test_issue_format(self) -> None:
        """Issues render with severity and location."""
        result = validate_chart(Chart())
        issue = result.issues[0]
        assert issue.severity == ValidationSeverity.WARNING
        assert str(issue) == "[WARNING] NO_LINES: Chart has no lines at lines"
        assert issue.to_dict()["severity"] == "warning"


class TestChartManager:
    """Tests for ChartManager."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, manager: ChartManager) -> None:
        """Created charts are cached."""
        chart = await manager.create("song", bpm=150, offset=20, line_count=2)
        assert chart.line_count == 2
        assert chart.bpm_list[0].bpm == 150
        assert chart.offset == 20
        assert await manager.get("song") is chart
        assert await manager.get("missing") is None

    @pytest.mark.asyncio
    async def test_create_negative_lines(self, manager: ChartManager) -> None:
        """line_count cannot be negative."""
        with pytest.raises(ValueError):
            await manager.create("song", line_count=-1)

    @pytest.mark.asyncio
    async def test_require(self, manager: ChartManager) -> None:
        """require raises for unknown charts."""
        with pytest.raises(ValueError, match="not found"):
            await manager.require("missing")

    @pytest.mark.asyncio
    async def test_save_and_load(self, manager: ChartManager, temp_dir: Path) -> None:
        """Saved charts load back from disk."""
        await manager.create("my song")
        path = await manager.save("my song")
        assert path.name == "my_song.chart.json"

        fresh = ChartManager(temp_dir / "charts")
        chart = await fresh.get("my song")
        assert chart is not None
        assert chart.line_count == 1

    @pytest.mark.asyncio
    async def test_load_migrates(self, manager: ChartManager) -> None:
        """Old files are migrated on load."""
        manager.charts_dir.mkdir(parents=True)
        old = {"format": 3, "offset": 0, "bpm_list": [{"beat": [0, 0, 1], "bpm": 120}], "lines": [
            {"name": "old", "notes": [], "events": []}
        ]}
        (manager.charts_dir / "old.chart.json").write_text(json.dumps(old), encoding="utf-8")

        chart = await manager.get("old")
        assert chart is not None
        assert chart.lines[0].name == "old"
        assert chart.lines[0].children == []

    @pytest.mark.asyncio
    async def test_load_unsupported(self, manager: ChartManager) -> None:
        """Unknown formats raise MigrationError."""
        manager.charts_dir.mkdir(parents=True)
        path = manager.charts_dir / "new.chart.json"
        path.write_text(json.dumps({"format": 99, "lines": []}), encoding="utf-8")
        with pytest.raises(MigrationError):
            await manager.load(path)

    @pytest.mark.asyncio
    async def test_list_charts(self, manager: ChartManager) -> None:
        """Saved charts are listed; unreadable files are skipped."""
        assert await manager.list_charts() == []

        await manager.create("a", bpm=100, line_count=3)
        await manager.save("a")
        (manager.charts_dir / "broken.chart.json").write_text("{not json", encoding="utf-8")

        charts = await manager.list_charts()
        assert len(charts) == 1
        assert charts[0].name == "a"
        assert charts[0].bpm == 100
        assert charts[0].line_count == 3
        assert "a" in repr(charts[0])

    @pytest.mark.asyncio
    async def test_delete(self, manager: ChartManager) -> None:
        """Delete removes cached and saved charts."""
        await manager.create("a")
        await manager.save("a")
        assert await manager.delete("a")
        assert await manager.get("a") is None
        assert not await manager.delete("a")

        await manager.create("b")
        assert await manager.delete("b")

    @pytest.mark.asyncio
    async def test_import(self, manager: ChartManager) -> None:
        """Documents of other formats are imported into the cache."""
        data = {
            "BPMList": [{"bpm": 140, "startTime": [0, 0, 1]}],
            "judgeLineList": [{"Name": "rpe line", "eventLayers": []}],
        }
        chart = await manager.import_chart("imported", data, "rpe")
        assert chart.lines[0].name == "rpe line"
        assert await manager.get("imported") is chart

    @pytest.mark.asyncio
    async def test_edit(self, manager: ChartManager) -> None:
        """Lines, notes, events, tempo changes and curve tracks are added."""
        await manager.create("song")

        assert await manager.add_line("song", "second") == "1"
        assert await manager.add_line("song", "child", parent="0") == "0/0"

        assert await manager.add_note("song", "0/0", "tap", "1") == 0
        assert await manager.add_note("song", "0/0", "hold", "2", x=100, hold_beat="1/2") == 1

        event = await manager.add_event("song", "1", "x", "0", "2", 0.0, 100.0, Easing.EASE_IN_SINE)
        assert event.value.easing is Easing.EASE_IN_SINE
        constant = await manager.add_event("song", "1", "opacity", "2", "3", 128.0)
        assert constant.value.start == constant.value.end == 128.0

        bpm_list = await manager.add_bpm_point("song", "4", 240)
        assert [p.bpm for p in bpm_list] == [120, 240]
        bpm_list = await manager.add_bpm_point("song", "0", 150)
        assert [p.bpm for p in bpm_list] == [150, 240]

        track = await manager.add_curve_note_track("song", "0/0", 0, 1, density=8)
        assert track.options.density == 8

        chart = await manager.require("song")
        child = chart.lines[0].children[0]
        assert child.name == "child"
        assert child.notes[1].kind == NoteKind.HOLD
        assert child.notes[1].hold_beat == Beat.of(0, 1, 2)

    @pytest.mark.asyncio
    async def test_edit_errors(self, manager: ChartManager) -> None:
        """Invalid edits raise ValueError."""
        await manager.create("song")
        with pytest.raises(ValueError):
            await manager.add_event("song", "0", "x", "2", "1", 0.0)
        with pytest.raises(ValueError):
            await manager.add_note("song", "0", "hold", "1")
        with pytest.raises(ValueError):
            await manager.add_note("song", "3", "tap", "1")
        with pytest.raises(ValueError, match="Note index"):
            await manager.add_curve_note_track("song", "0", 0, 1)
