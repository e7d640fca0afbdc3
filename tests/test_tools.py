"""
Tests for MCP tools.

Tests the MCP tool implementations for charts, structure, compilation
and conversion.
"""

import json
import math
from pathlib import Path
from typing import Any

import pytest

from chuk_mcp_phichain.charts import ChartManager
from chuk_mcp_phichain.compiler import CompileOptions
from chuk_mcp_phichain.models import Line
from chuk_mcp_phichain.settings import ConversionSettings
from chuk_mcp_phichain.tools import (
    register_chart_tools,
    register_compilation_tools,
    register_conversion_tools,
    register_structure_tools,
)


# Mock MCP server for testing tools
class MockMCPServer:
    """Mock MCP server that just stores registered tools."""

    def __init__(self, name: str):
        self.name = name
        self.tools: dict = {}

    def tool(self, func):
        """Decorator to register a tool."""
        self.tools[func.__name__] = func
        return func


@pytest.fixture
def manager(temp_dir: Path) -> ChartManager:
    return ChartManager(temp_dir / "charts")


@pytest.fixture
def tools(temp_dir: Path, manager: ChartManager) -> dict[str, Any]:
    """Every tool registered on one mock server."""
    mcp = MockMCPServer("test")
    settings = ConversionSettings()
    output_dir = temp_dir / "output"
    register_chart_tools(mcp, manager, settings)
    register_structure_tools(mcp, manager)
    register_compilation_tools(mcp, manager, settings, output_dir)
    register_conversion_tools(mcp, manager, settings, output_dir)
    return mcp.tools


async def call(tools: dict[str, Any], name: str, /, **kwargs: Any) -> dict[str, Any]:
    return json.loads(await tools[name](**kwargs))


class TestRegistration:
    """Tests for tool registration."""

    def test_register_returns_tools(self, temp_dir: Path, manager: ChartManager) -> None:
        """Each register function returns what it registered."""
        mcp = MockMCPServer("test")
        chart_tools = register_chart_tools(mcp, manager, ConversionSettings())
        assert set(chart_tools) == {
            "phichain_create_chart",
            "phichain_get_chart",
            "phichain_list_charts",
            "phichain_save_chart",
            "phichain_delete_chart",
            "phichain_import_chart",
        }
        assert chart_tools["phichain_create_chart"] is mcp.tools["phichain_create_chart"]

    def test_all_tools(self, tools: dict[str, Any]) -> None:
        """Every group is registered."""
        assert len(tools) == 20
        assert "phichain_add_curve_note_track" in tools
        assert "phichain_line_lifetimes" in tools
        assert "phichain_export_chart" in tools


class TestChartTools:
    """Tests for chart lifecycle tools."""

    @pytest.mark.asyncio
    async def test_create_chart(self, tools: dict[str, Any]) -> None:
        """Create chart tool."""
        data = await call(tools, "phichain_create_chart", name="song", bpm=174, line_count=2)
        assert data["status"] == "success"
        assert data["chart"]["name"] == "song"
        assert data["chart"]["lines"] == 2
        assert data["chart"]["bpm_list"][0]["bpm"] == 174

    @pytest.mark.asyncio
    async def test_create_chart_invalid(self, tools: dict[str, Any]) -> None:
        """Negative line counts are rejected."""
        data = await call(tools, "phichain_create_chart", name="song", line_count=-1)
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_get_chart(self, tools: dict[str, Any]) -> None:
        """Get chart tool, with and without the document."""
        await call(tools, "phichain_create_chart", name="song")

        data = await call(tools, "phichain_get_chart", name="song")
        assert data["status"] == "success"
        assert "document" not in data

        data = await call(tools, "phichain_get_chart", name="song", full=True)
        assert data["document"]["format"] == 5
        assert len(data["document"]["lines"]) == 1

    @pytest.mark.asyncio
    async def test_get_chart_not_found(self, tools: dict[str, Any]) -> None:
        """Get chart returns error for missing chart."""
        data = await call(tools, "phichain_get_chart", name="nonexistent")
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_save_and_list(self, tools: dict[str, Any]) -> None:
        """Saved charts are listed."""
        await call(tools, "phichain_create_chart", name="one")
        data = await call(tools, "phichain_save_chart", name="one")
        assert data["status"] == "success"
        assert Path(data["path"]).exists()

        await call(tools, "phichain_create_chart", name="two", bpm=90)
        await call(tools, "phichain_save_chart", name="two")

        data = await call(tools, "phichain_list_charts")
        assert data["status"] == "success"
        assert data["count"] == 2
        assert {c["name"] for c in data["charts"]} == {"one", "two"}

    @pytest.mark.asyncio
    async def test_save_missing(self, tools: dict[str, Any]) -> None:
        """Saving an unknown chart is an error."""
        data = await call(tools, "phichain_save_chart", name="missing")
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_delete_chart(self, tools: dict[str, Any]) -> None:
        """Delete chart tool."""
        await call(tools, "phichain_create_chart", name="song")
        data = await call(tools, "phichain_delete_chart", name="song")
        assert data["status"] == "success"

        data = await call(tools, "phichain_delete_chart", name="song")
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_import_chart(self, tools: dict[str, Any], temp_dir: Path) -> None:
        """Import chart tool reads a file of another format."""
        path = temp_dir / "song.rpe.json"
        path.write_text(
            json.dumps(
                {
                    "BPMList": [{"bpm": 200, "startTime": [0, 0, 1]}],
                    "judgeLineList": [{"Name": "a"}, {"Name": "b", "father": 0}],
                }
            ),
            encoding="utf-8",
        )
        data = await call(tools, "phichain_import_chart", name="imported", path=str(path), source="rpe")
        assert data["status"] == "success"
        assert data["chart"]["root_lines"] == 1
        assert data["chart"]["lines"] == 2

    @pytest.mark.asyncio
    async def test_import_chart_errors(self, tools: dict[str, Any], temp_dir: Path) -> None:
        """Missing files and unknown formats are reported."""
        data = await call(
            tools, "phichain_import_chart", name="x", path=str(temp_dir / "missing.json"), source="rpe"
        )
        assert data["status"] == "error"

        path = temp_dir / "song.json"
        path.write_text("{}", encoding="utf-8")
        data = await call(tools, "phichain_import_chart", name="x", path=str(path), source="osu")
        assert data["status"] == "error"
        assert "osu" in data["message"]


class TestStructureTools:
    """Tests for chart editing tools."""

    @pytest.mark.asyncio
    async def test_add_line(self, tools: dict[str, Any]) -> None:
        """Root and child lines get index paths."""
        await call(tools, "phichain_create_chart", name="song")

        data = await call(tools, "phichain_add_line", chart="song", name="second")
        assert data["status"] == "success"
        assert data["line"] == "1"

        data = await call(tools, "phichain_add_line", chart="song", name="child", parent="1")
        assert data["line"] == "1/0"

        data = await call(tools, "phichain_add_line", chart="song", parent="5")
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_add_note(self, tools: dict[str, Any]) -> None:
        """Notes are appended and their index returned."""
        await call(tools, "phichain_create_chart", name="song")

        data = await call(tools, "phichain_add_note", chart="song", line="0", kind="tap", beat="1")
        assert data["status"] == "success"
        assert data["note"] == 0

        data = await call(
            tools, "phichain_add_note", chart="song", line="0", kind="hold", beat="2", hold_beat="1/2"
        )
        assert data["note"] == 1

        data = await call(tools, "phichain_add_note", chart="song", line="0", kind="slide", beat="2")
        assert data["status"] == "error"

        data = await call(tools, "phichain_add_note", chart="song", line="0", kind="tap", beat="two")
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_add_event(self, tools: dict[str, Any]) -> None:
        """Transitions and constants are added."""
        await call(tools, "phichain_create_chart", name="song")

        data = await call(
            tools,
            "phichain_add_event",
            chart="song",
            line="0",
            kind="x",
            start_beat="1",
            end_beat="2",
            start=0.0,
            end=300.0,
            easing="ease_in_out_quad",
        )
        assert data["status"] == "success"
        assert data["event"]["value"]["transition"]["easing"] == "ease_in_out_quad"

        data = await call(
            tools, "phichain_add_event", chart="song", line="0", kind="opacity", start_beat="1", end_beat="2", start=0.0
        )
        assert data["event"]["value"] == {"constant": 0.0}

        data = await call(
            tools,
            "phichain_add_event",
            chart="song",
            line="0",
            kind="y",
            start_beat="1",
            end_beat="2",
            start=0.0,
            end=1.0,
            easing={"custom": [0.25, 0.1, 0.25, 1.0]},
        )
        assert data["event"]["value"]["transition"]["easing"] == {"custom": [0.25, 0.1, 0.25, 1.0]}

        data = await call(
            tools, "phichain_add_event", chart="song", line="0", kind="x", start_beat="1", end_beat="2",
            start=0.0, end=1.0, easing="wobble",
        )
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_add_bpm_point(self, tools: dict[str, Any]) -> None:
        """Tempo changes are inserted in order."""
        await call(tools, "phichain_create_chart", name="song")
        data = await call(tools, "phichain_add_bpm_point", chart="song", beat="8", bpm=180)
        assert [p["bpm"] for p in data["bpm_list"]] == [120, 180]

    @pytest.mark.asyncio
    async def test_add_curve_note_track(self, tools: dict[str, Any]) -> None:
        """Curve tracks connect two existing notes."""
        await call(tools, "phichain_create_chart", name="song")
        await call(tools, "phichain_add_note", chart="song", line="0", kind="tap", beat="0", x=-300)
        await call(tools, "phichain_add_note", chart="song", line="0", kind="tap", beat="1", x=300)

        data = await call(
            tools, "phichain_add_curve_note_track", chart="song", line="0", from_note=0, to_note=1,
            density=8, curve="ease_in_sine",
        )
        assert data["status"] == "success"
        assert data["curve_note_track"]["from"] == 0
        assert data["curve_note_track"]["curve"] == "ease_in_sine"

        data = await call(tools, "phichain_add_curve_note_track", chart="song", line="0", from_note=0, to_note=4)
        assert data["status"] == "error"

        data = await call(
            tools, "phichain_add_curve_note_track", chart="song", line="0", from_note=0, to_note=1, kind="hold"
        )
        assert data["status"] == "error"


class TestCompilationTools:
    """Tests for compilation and analysis tools."""

    @pytest.mark.asyncio
    async def test_compile(self, tools: dict[str, Any]) -> None:
        """Compile writes a primitive chart."""
        await call(tools, "phichain_create_chart", name="song")
        await call(tools, "phichain_add_line", chart="song", name="child", parent="0")
        await call(tools, "phichain_add_note", chart="song", line="0/0", kind="tap", beat="1")

        data = await call(tools, "phichain_compile", chart="song")
        assert data["status"] == "success"
        assert data["path"].endswith("song.primitive.json")
        assert data["compilation"]["lines"] == {"before": 2, "after": 2}
        assert data["compilation"]["notes"]["after"] == 1

        primitive = json.loads(Path(data["path"]).read_text(encoding="utf-8"))
        assert len(primitive["lines"]) == 2

    @pytest.mark.asyncio
    async def test_compile_overrides(self, tools: dict[str, Any], manager: ChartManager) -> None:
        """Options given to the tool override the settings."""
        await call(tools, "phichain_create_chart", name="song")
        chart = await manager.require("song")
        chart.lines.append(Line(name="ghost"))

        data = await call(tools, "phichain_compile", chart="song")
        assert data["compilation"]["lines"] == {"before": 2, "after": 1}

        data = await call(tools, "phichain_compile", chart="song", output_name="kept", remove_unit_lines=False)
        assert data["path"].endswith("kept.primitive.json")
        assert data["compilation"]["lines"]["after"] == 2

    @pytest.mark.asyncio
    async def test_compile_missing(self, tools: dict[str, Any]) -> None:
        """Compiling an unknown chart is an error."""
        data = await call(tools, "phichain_compile", chart="missing")
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_line_lifetimes(self, tools: dict[str, Any]) -> None:
        """Lifetimes are listed per flat line, unit lines included."""
        await call(tools, "phichain_create_chart", name="song", line_count=2)
        await call(
            tools, "phichain_add_event", chart="song", line="1", kind="opacity", start_beat="1", end_beat="2", start=0.0
        )
        await call(
            tools, "phichain_add_event", chart="song", line="1", kind="y", start_beat="1", end_beat="2", start=-1000.0
        )

        data = await call(tools, "phichain_line_lifetimes", chart="song")
        assert data["status"] == "success"
        assert len(data["lines"]) == 2
        assert data["lines"][0]["unit"] is False
        assert data["lines"][0]["ranges"][0]["start"] == "0"
        assert data["lines"][1]["ranges"] == [{"start": "0", "end": "1"}]
        assert data["unit_lines"] == 0

    @pytest.mark.asyncio
    async def test_validate(self, tools: dict[str, Any]) -> None:
        """Validate reports errors."""
        await call(tools, "phichain_create_chart", name="song")
        data = await call(tools, "phichain_validate", chart="song")
        assert data["valid"] is True

        await call(
            tools, "phichain_add_event", chart="song", line="0", kind="x", start_beat="0", end_beat="2", start=1.0
        )
        data = await call(tools, "phichain_validate", chart="song")
        assert data["valid"] is False
        assert data["errors"][0]["code"] == "EVENT_OVERLAP"

    @pytest.mark.asyncio
    async def test_evaluate_line(self, tools: dict[str, Any]) -> None:
        """Evaluate samples the line's tracks."""
        await call(tools, "phichain_create_chart", name="song")
        await call(
            tools, "phichain_add_event", chart="song", line="0", kind="x", start_beat="1", end_beat="3",
            start=0.0, end=200.0,
        )

        data = await call(tools, "phichain_evaluate_line", chart="song", line="0", beat="2")
        assert data["status"] == "success"
        assert data["state"]["x"] == pytest.approx(100.0)
        assert data["state"]["opacity"] == 255.0
        assert data["visible"] is True

        data = await call(tools, "phichain_evaluate_line", chart="song", line="3", beat="2")
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_fit_events(self, tools: dict[str, Any]) -> None:
        """Linear runs sampled from an easing are compacted."""
        await call(tools, "phichain_create_chart", name="song")
        for i in range(4):
            start = 100.0 * (1 - math.cos(i / 4 * math.pi / 2))
            end = 100.0 * (1 - math.cos((i + 1) / 4 * math.pi / 2))
            await call(
                tools, "phichain_add_event", chart="song", line="0", kind="x",
                start_beat=str(i + 1), end_beat=str(i + 2), start=start, end=end,
            )

        data = await call(tools, "phichain_fit_events", chart="song", line="0")
        assert data["status"] == "success"
        assert data["events"] == {"before": 9, "after": 6}

        chart = await call(tools, "phichain_get_chart", name="song", full=True)
        x_events = [e for e in chart["document"]["lines"][0]["events"] if e["kind"] == "x"]
        assert x_events[-1]["value"]["transition"]["easing"] == "ease_in_sine"

    @pytest.mark.asyncio
    async def test_fit_events_errors(self, tools: dict[str, Any]) -> None:
        """Invalid epsilon or kinds are rejected."""
        await call(tools, "phichain_create_chart", name="song")
        data = await call(tools, "phichain_fit_events", chart="song", line="0", epsilon=0.0)
        assert data["status"] == "error"
        data = await call(tools, "phichain_fit_events", chart="song", line="0", kinds=["scale"])
        assert data["status"] == "error"


class TestConversionTools:
    """Tests for format conversion tools."""

    @pytest.mark.asyncio
    async def test_convert(self, tools: dict[str, Any], temp_dir: Path) -> None:
        """Convert writes next to the output directory with the target suffix."""
        source = temp_dir / "song.json"
        source.write_text(
            json.dumps(
                {
                    "formatVersion": 3,
                    "offset": 0,
                    "judgeLineList": [{"bpm": 120, "notesAbove": [{"type": 1, "time": 32, "positionX": 0}]}],
                }
            ),
            encoding="utf-8",
        )
        data = await call(tools, "phichain_convert", input_path=str(source), source="official", target="rpe")
        assert data["status"] == "success"
        assert data["path"].endswith("song.rpe.json")

        rpe = json.loads(Path(data["path"]).read_text(encoding="utf-8"))
        assert len(rpe["judgeLineList"][0]["notes"]) == 1

    @pytest.mark.asyncio
    async def test_convert_errors(self, tools: dict[str, Any], temp_dir: Path) -> None:
        """Unknown formats and missing files are errors."""
        data = await call(tools, "phichain_convert", input_path="x.json", source="official", target="osu")
        assert data["status"] == "error"
        data = await call(
            tools, "phichain_convert", input_path=str(temp_dir / "none.json"), source="official", target="rpe"
        )
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_export_chart(self, tools: dict[str, Any]) -> None:
        """Stored charts export to any format."""
        await call(tools, "phichain_create_chart", name="song")
        await call(tools, "phichain_add_note", chart="song", line="0", kind="flick", beat="1")

        data = await call(tools, "phichain_export_chart", chart="song", target="official")
        assert data["status"] == "success"
        assert data["format"] == "official"
        official = json.loads(Path(data["path"]).read_text(encoding="utf-8"))
        assert official["judgeLineList"][0]["notesAbove"][0]["type"] == 4

        data = await call(tools, "phichain_export_chart", chart="song", target="primitive", output_name="flat")
        assert data["path"].endswith("flat.primitive.json")

        data = await call(tools, "phichain_export_chart", chart="missing", target="rpe")
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_migrate(self, tools: dict[str, Any], temp_dir: Path) -> None:
        """Old chart files are upgraded."""
        source = temp_dir / "old.chart.json"
        source.write_text(
            json.dumps({"format": 3, "offset": 0, "lines": [{"name": "a", "notes": [], "events": []}]}),
            encoding="utf-8",
        )
        target = temp_dir / "new" / "old.chart.json"

        data = await call(tools, "phichain_migrate", input_path=str(source), output_path=str(target))
        assert data["status"] == "success"
        assert data["from_format"] == 3
        assert data["to_format"] == 5

        migrated = json.loads(target.read_text(encoding="utf-8"))
        assert migrated["format"] == 5
        assert migrated["lines"][0]["children"] == []

    @pytest.mark.asyncio
    async def test_migrate_unsupported(self, tools: dict[str, Any], temp_dir: Path) -> None:
        """Unsupported formats are reported."""
        source = temp_dir / "future.chart.json"
        source.write_text(json.dumps({"format": 42, "lines": []}), encoding="utf-8")
        data = await call(tools, "phichain_migrate", input_path=str(source))
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_list_formats(self, tools: dict[str, Any]) -> None:
        """All four formats are listed."""
        data = await call(tools, "phichain_list_formats")
        assert data["status"] == "success"
        assert [f["name"] for f in data["formats"]] == ["phichain", "primitive", "official", "rpe"]


class TestSettingsIntegration:
    """Tools honour the settings they were registered with."""

    @pytest.mark.asyncio
    async def test_compile_defaults_from_settings(self, temp_dir: Path, manager: ChartManager) -> None:
        """Compile options default to the settings' compile section."""
        mcp = MockMCPServer("test")
        settings = ConversionSettings(compile=CompileOptions(remove_unit_lines=False))
        register_chart_tools(mcp, manager, settings)
        register_compilation_tools(mcp, manager, settings, temp_dir / "output")

        await call(mcp.tools, "phichain_create_chart", name="song")
        chart = await manager.require("song")
        chart.lines.append(Line(name="ghost"))

        data = await call(mcp.tools, "phichain_compile", chart="song")
        assert data["compilation"]["lines"]["after"] == 2
