"""
Chart Manager - handles authoring chart lifecycle.

Provides async operations for creating, loading, saving, importing and
editing charts. Charts are stored as phichain JSON files
(`<name>.chart.json`) and migrated to the current format when loaded.

Lines are addressed by a path of indices through the line tree:
"0" is the first root line, "0/2" the third child of that line.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from chuk_mcp_phichain.constants import (
    CHART_FILE_SUFFIX,
    DEFAULT_BPM,
    DEFAULT_CURVE_DENSITY,
    DEFAULT_LINE_NAME,
    ErrorMessages,
    FormatName,
)
from chuk_mcp_phichain.converter import read_chart
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.core.bpm_list import BpmList, BpmPoint
from chuk_mcp_phichain.core.easing import AnyEasing, Easing
from chuk_mcp_phichain.errors import PhichainError
from chuk_mcp_phichain.migration import get_format, migrate
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.curve_note_track import CurveNoteTrack, CurveNoteTrackOptions
from chuk_mcp_phichain.models.event import LineEvent, LineEventKind
from chuk_mcp_phichain.models.line import Line
from chuk_mcp_phichain.models.note import Note, NoteKind
from chuk_mcp_phichain.settings import ConversionSettings

logger = logging.getLogger(__name__)


class ChartMetadata:
    """Lightweight metadata for listing charts."""

    def __init__(
        self,
        name: str,
        path: Path,
        format: int,
        bpm: float,
        line_count: int,
        modified: datetime,
    ):
        self.name = name
        self.path = path
        self.format = format
        self.bpm = bpm
        self.line_count = line_count
        self.modified = modified

    def __repr__(self) -> str:
        return f"ChartMetadata({self.name!r}, format {self.format}, {self.bpm}bpm)"


def parse_line_path(path: str | int) -> list[int]:
    """Split a line path like '0/2' into indices."""
    if isinstance(path, int):
        return [path]
    try:
        return [int(part) for part in str(path).strip("/").split("/")]
    except ValueError:
        raise ValueError(f"Invalid line path: '{path}'. Expected indices like '0' or '0/2'.") from None


def resolve_line(chart: Chart, path: str | int) -> Line:
    """
    Find a line by its index path.

    Raises:
        ValueError: If any index is out of range
    """
    lines = chart.lines
    line: Line | None = None
    for index in parse_line_path(path):
        if not 0 <= index < len(lines):
            raise ValueError(ErrorMessages.LINE_NOT_FOUND.format(index=path))
        line = lines[index]
        lines = line.children
    if line is None:
        raise ValueError(ErrorMessages.LINE_NOT_FOUND.format(index=path))
    return line


def _count_lines(lines: list[Any]) -> int:
    return sum(1 + _count_lines(line.get("children", [])) for line in lines if isinstance(line, dict))


class ChartManager:
    """
    Manages chart lifecycle with file persistence.

    Charts are kept in a cache after the first access; edits apply to
    the cached chart and are written back by save().
    """

    def __init__(self, charts_dir: Path):
        """
        Initialize the manager.

        Args:
            charts_dir: Directory for storing chart files
        """
        self.charts_dir = charts_dir
        self._cache: dict[str, Chart] = {}

    async def create(
        self,
        name: str,
        bpm: float = DEFAULT_BPM,
        offset: float = 0.0,
        line_count: int = 1,
    ) -> Chart:
        """
        Create a new chart.

        Args:
            name: Chart name
            bpm: Initial tempo
            offset: Audio offset in milliseconds
            line_count: Number of default lines to start with

        Returns:
            The created Chart
        """
        if line_count < 0:
            raise ValueError(f"line_count must be >= 0, got {line_count}")

        chart = Chart(
            offset=offset,
            bpm_list=BpmList.single(bpm),
            lines=[Line.new() for _ in range(line_count)],
        )
        self._cache[name] = chart
        return chart

    async def get(self, name: str) -> Chart | None:
        """
        Get a chart by name.

        Checks cache first, then loads from file if not cached.

        Args:
            name: Chart name

        Returns:
            The Chart or None if not found
        """
        if name in self._cache:
            return self._cache[name]

        path = self._get_path(name)
        if path.exists():
            chart = await self.load(path)
            self._cache[name] = chart
            return chart

        return None

    async def require(self, name: str) -> Chart:
        """Get a chart, raising ValueError when it does not exist."""
        chart = await self.get(name)
        if chart is None:
            raise ValueError(ErrorMessages.CHART_NOT_FOUND.format(name=name))
        return chart

    async def save(self, name: str) -> Path:
        """
        Save a cached chart to disk.

        Args:
            name: Chart name

        Returns:
            Path to the saved file
        """
        chart = await self.require(name)
        self.charts_dir.mkdir(parents=True, exist_ok=True)

        path = self._get_path(name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(chart.to_json())

        return path

    async def load(self, path: Path) -> Chart:
        """
        Load a chart file, migrating older formats.

        Raises:
            MigrationError: If the document cannot be migrated
            ChartFormatError: If the migrated document is malformed
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        version = get_format(data)
        chart = Chart.from_dict(migrate(data))
        if version != chart.format:
            logger.info("Migrated %s from format %d to %d", path.name, version, chart.format)
        return chart

    async def list_charts(self) -> list[ChartMetadata]:
        """
        List all charts in the directory.

        Returns:
            List of chart metadata, most recently modified first
        """
        if not self.charts_dir.exists():
            return []

        result = []
        for path in self.charts_dir.glob(f"*{CHART_FILE_SUFFIX}"):
            try:
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)

                bpm_list = data.get("bpm_list") or [{"bpm": DEFAULT_BPM}]
                result.append(
                    ChartMetadata(
                        name=path.name[: -len(CHART_FILE_SUFFIX)],
                        path=path,
                        format=get_format(data),
                        bpm=float(bpm_list[0].get("bpm", DEFAULT_BPM)),
                        line_count=_count_lines(data.get("lines", [])),
                        modified=datetime.fromtimestamp(path.stat().st_mtime),
                    )
                )
            except (OSError, json.JSONDecodeError, AttributeError, TypeError, PhichainError) as e:
                logger.warning("Skipping unreadable chart %s: %s", path.name, e)

        return sorted(result, key=lambda m: m.modified, reverse=True)

    async def delete(self, name: str) -> bool:
        """
        Delete a chart.

        Args:
            name: Chart name

        Returns:
            True if deleted, False if not found
        """
        path = self._get_path(name)
        removed = self._cache.pop(name, None) is not None

        if path.exists():
            path.unlink()
            return True

        return removed

    async def import_chart(
        self,
        name: str,
        data: Any,
        source: FormatName | str,
        settings: ConversionSettings | None = None,
    ) -> Chart:
        """
        Import a document of any supported format as a new chart.

        Args:
            name: Chart name
            data: Decoded source document
            source: Source format name
            settings: Conversion options

        Returns:
            The imported Chart
        """
        chart = read_chart(data, source, settings)
        self._cache[name] = chart
        logger.info("Imported %s chart as '%s': %d lines", FormatName(source).value, name, chart.line_count)
        return chart

    def _get_path(self, name: str) -> Path:
        """Get the file path for a chart."""
        safe_name = name.replace(" ", "_").replace("/", "_")
        return self.charts_dir / f"{safe_name}{CHART_FILE_SUFFIX}"

    # Convenience methods for chart editing

    async def add_line(
        self,
        name: str,
        line_name: str = DEFAULT_LINE_NAME,
        parent: str | None = None,
    ) -> str:
        """
        Add a line with the default events.

        Args:
            name: Chart name
            line_name: Name of the new line
            parent: Path of the parent line (None for a root line)

        Returns:
            Path of the new line
        """
        chart = await self.require(name)
        line = Line.new(line_name)

        if parent is None:
            chart.lines.append(line)
            return str(len(chart.lines) - 1)

        siblings = resolve_line(chart, parent).children
        siblings.append(line)
        return f"{str(parent).strip('/')}/{len(siblings) - 1}"

    async def add_note(
        self,
        name: str,
        line: str,
        kind: str,
        beat: str,
        x: float = 0.0,
        above: bool = True,
        speed: float = 1.0,
        hold_beat: str | None = None,
    ) -> int:
        """
        Add a note to a line.

        Returns:
            Index of the new note in the line
        """
        chart = await self.require(name)
        target = resolve_line(chart, line)

        note_kind = NoteKind(kind)
        hold = Beat.parse(hold_beat) if hold_beat is not None else None
        note = Note(note_kind, above, Beat.parse(beat), x, speed, hold_beat=hold)

        target.notes.append(note)
        return len(target.notes) - 1

    async def add_event(
        self,
        name: str,
        line: str,
        kind: str,
        start_beat: str,
        end_beat: str,
        start: float,
        end: float | None = None,
        easing: AnyEasing = Easing.LINEAR,
    ) -> LineEvent:
        """
        Add an event to a line.

        A missing end value gives a constant event.
        """
        chart = await self.require(name)
        target = resolve_line(chart, line)

        event_kind = LineEventKind(kind)
        start_at = Beat.parse(start_beat)
        end_at = Beat.parse(end_beat)
        if end_at < start_at:
            raise ValueError(f"Event ends before it starts: {end_beat} < {start_beat}")

        if end is None:
            event = LineEvent.constant(event_kind, start_at, end_at, start)
        else:
            event = LineEvent.transition(event_kind, start_at, end_at, start, end, easing)

        target.events.append(event)
        return event

    async def add_bpm_point(self, name: str, beat: str, bpm: float) -> BpmList:
        """Insert a tempo change."""
        chart = await self.require(name)
        chart.bpm_list.insert(BpmPoint(Beat.parse(beat), bpm))
        return chart.bpm_list

    async def add_curve_note_track(
        self,
        name: str,
        line: str,
        from_index: int,
        to_index: int,
        kind: str = NoteKind.DRAG.value,
        density: int = DEFAULT_CURVE_DENSITY,
        curve: AnyEasing = Easing.LINEAR,
    ) -> CurveNoteTrack:
        """Connect two notes of a line with generated notes."""
        chart = await self.require(name)
        target = resolve_line(chart, line)

        for index in (from_index, to_index):
            if not 0 <= index < len(target.notes):
                raise ValueError(ErrorMessages.NOTE_NOT_FOUND.format(index=index))

        track = CurveNoteTrack(
            from_index,
            to_index,
            CurveNoteTrackOptions(kind=NoteKind(kind), density=density, curve=curve),
        )
        target.curve_note_tracks.append(track)
        return track
