"""
Chart Compiler - compiles an authoring Chart to a PrimitiveChart.

The pipeline:
    Chart (tree of lines)
    → merge_children_line       (flatten the hierarchy)
    → evaluate_curve_note_tracks (expand curve shorthand into notes)
    → apply_note_level_events   (give notes with events their own line)
    → merge_children_line       (flatten the lines created above)
    → remove_unit_lines         (optional, on by default)
    → reuse_lines               (optional)
    → PrimitiveChart

Every pass returns a new chart; the input is never modified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_phichain.compiler.steps import (
    apply_note_level_events,
    evaluate_curve_note_tracks,
    merge_children_line,
    remove_unit_lines,
    reuse_lines,
)
from chuk_mcp_phichain.models.chart import Chart, PrimitiveChart

logger = logging.getLogger(__name__)


class CompileOptions(BaseModel):
    """Optional compile passes."""

    remove_unit_lines: bool = Field(True, description="Drop lines with no notes that are never visible")
    reuse_lines: bool = Field(False, description="Pack lines with disjoint lifetimes into shared lines")

    model_config = {"frozen": True}


@dataclass
class CompileResult:
    """Result of compiling a chart."""

    primitive: PrimitiveChart
    flattened: Chart
    lines_before: int
    lines_after: int
    notes_before: int
    notes_after: int
    events_before: int
    events_after: int

    def summary(self) -> dict[str, Any]:
        """Statistics for reporting."""
        return {
            "lines": {"before": self.lines_before, "after": self.lines_after},
            "notes": {"before": self.notes_before, "after": self.notes_after},
            "events": {"before": self.events_before, "after": self.events_after},
        }


class ChartCompiler:
    """
    Compiles authoring charts to primitive charts.

    The compiler holds only options, so one instance can compile any
    number of charts.
    """

    def __init__(self, options: CompileOptions | None = None):
        """
        Initialize the compiler.

        Args:
            options: Optional passes to run (defaults to CompileOptions())
        """
        self.options = options or CompileOptions()

    def flatten(self, chart: Chart) -> Chart:
        """Run every pass and return the flat authoring chart."""
        chart = merge_children_line(chart)
        chart = evaluate_curve_note_tracks(chart)
        chart = apply_note_level_events(chart)
        chart = merge_children_line(chart)
        if self.options.remove_unit_lines:
            chart = remove_unit_lines(chart)
        if self.options.reuse_lines:
            chart = reuse_lines(chart)
        return chart

    def compile(self, chart: Chart) -> CompileResult:
        """
        Compile a chart.

        Args:
            chart: The authoring chart

        Returns:
            CompileResult with the primitive chart and statistics

        Raises:
            EventSequenceError: If a pass meets overlapping or mixed events
        """
        flattened = self.flatten(chart)
        primitive = PrimitiveChart.from_chart(flattened)
        logger.info(
            "Compiled chart: %d lines -> %d, %d notes, %d events",
            chart.line_count,
            len(primitive.lines),
            primitive.note_count,
            primitive.event_count,
        )
        return CompileResult(
            primitive=primitive,
            flattened=flattened,
            lines_before=chart.line_count,
            lines_after=len(primitive.lines),
            notes_before=chart.note_count,
            notes_after=primitive.note_count,
            events_before=chart.event_count,
            events_after=primitive.event_count,
        )


def compile_only(chart: Chart, options: CompileOptions | None = None) -> Chart:
    """Run the passes without converting to a primitive chart."""
    return ChartCompiler(options).flatten(chart)


def compile_chart(chart: Chart, options: CompileOptions | None = None) -> PrimitiveChart:
    """
    Convenience function to compile a chart.

    Args:
        chart: The authoring chart
        options: Optional passes to run

    Returns:
        The primitive chart
    """
    return ChartCompiler(options).compile(chart).primitive
