"""
Compilation tools - MCP tools for compiling and analysing charts.

Tools for compiling charts to primitive charts, inspecting line
lifetimes and line state, validating and compacting events.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_phichain.charts import ChartManager, resolve_line, validate_chart
from chuk_mcp_phichain.compiler import ChartCompiler, CompileOptions, compile_only, evaluate_state, find_lifetime
from chuk_mcp_phichain.compiler.fitting import fit_events
from chuk_mcp_phichain.compiler.sequence import group_by_kind
from chuk_mcp_phichain.constants import DEFAULT_EASING_FITTING_EPSILON, ErrorMessages, SuccessMessages
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.errors import PhichainError
from chuk_mcp_phichain.models.event import LineEventKind
from chuk_mcp_phichain.settings import ConversionSettings

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_compilation_tools(
    mcp: ChukMCPServer,
    manager: ChartManager,
    settings: ConversionSettings,
    output_dir: Path,
) -> dict[str, Any]:
    """
    Register compilation and analysis tools with the MCP server.

    Args:
        mcp: The MCP server instance
        manager: The chart manager
        settings: Default compile options
        output_dir: Directory for output files

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_compile(
        chart: str,
        output_name: str | None = None,
        remove_unit_lines: bool | None = None,
        reuse_lines: bool | None = None,
    ) -> str:
        """
        Compile a chart to a primitive chart file.

        Flattens the line tree, expands curve note tracks, moves notes with
        their own events onto separate lines and optionally removes unused
        lines or packs lines that are never alive at the same time.

        Args:
            chart: Chart name
            output_name: Optional output filename (without extension)
            remove_unit_lines: Drop lines that are never visible and have no notes
            reuse_lines: Pack lines with disjoint lifetimes into shared lines

        Returns:
            JSON string with compilation statistics and file path

        Example:
            phichain_compile(chart="my-chart", reuse_lines=True)
        """
        try:
            source = await manager.get(chart)
            if source is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.CHART_NOT_FOUND.format(name=chart)}
                )

            overrides = {
                key: value
                for key, value in (("remove_unit_lines", remove_unit_lines), ("reuse_lines", reuse_lines))
                if value is not None
            }
            options = settings.compile.model_copy(update=overrides)
            result = ChartCompiler(options).compile(source)

            output_path = output_dir / f"{output_name or chart}.primitive.json"
            output_dir.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(result.primitive.to_json(indent=None))

            return json.dumps(
                {
                    "status": "success",
                    "path": str(output_path),
                    "compilation": result.summary(),
                    "message": SuccessMessages.CHART_COMPILED.format(name=chart, path=output_path),
                }
            )
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to compile chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_compile"] = phichain_compile

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_line_lifetimes(chart: str) -> str:
        """
        Show when each compiled line is alive.

        The chart is flattened first (unit lines are kept), then each line
        gets the beat ranges where it is visible or still has notes.

        Args:
            chart: Chart name

        Returns:
            JSON string with one entry per flat line

        Example:
            phichain_line_lifetimes(chart="my-chart")
        """
        try:
            source = await manager.get(chart)
            if source is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.CHART_NOT_FOUND.format(name=chart)}
                )

            flat = compile_only(source, CompileOptions(remove_unit_lines=False))
            lines = []
            for i, line in enumerate(flat.lines):
                lifetime = find_lifetime(line)
                lines.append(
                    {
                        "index": i,
                        "name": line.name,
                        "unit": lifetime.is_unit(),
                        "ranges": lifetime.to_list(),
                    }
                )

            return json.dumps(
                {
                    "status": "success",
                    "lines": lines,
                    "unit_lines": sum(1 for line in lines if line["unit"]),
                }
            )
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to compute line lifetimes")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_line_lifetimes"] = phichain_line_lifetimes

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_validate(chart: str) -> str:
        """
        Validate a chart.

        Checks for overlapping events, broken hold notes, curve note tracks
        pointing at missing notes and tempo map problems.

        Args:
            chart: Chart name

        Returns:
            JSON string with validation results

        Example:
            phichain_validate(chart="my-chart")
        """
        try:
            source = await manager.get(chart)
            if source is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.CHART_NOT_FOUND.format(name=chart)}
                )

            result = validate_chart(source)
            return json.dumps(
                {
                    "status": "success",
                    "valid": result.is_valid,
                    "errors": [i.to_dict() for i in result.errors],
                    "warnings": [i.to_dict() for i in result.warnings],
                    "issues": [i.to_dict() for i in result.issues],
                }
            )
        except Exception as e:
            logger.exception("Failed to validate chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_validate"] = phichain_validate

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_evaluate_line(chart: str, line: str, beat: str) -> str:
        """
        Sample a line's own events at a beat.

        Parents are not taken into account; use phichain_compile to see
        composed positions.

        Args:
            chart: Chart name
            line: Line path
            beat: Beat to sample at ('4', '2+1/2')

        Returns:
            JSON string with x, y, rotation, opacity, speed and visibility

        Example:
            phichain_evaluate_line(chart="my-chart", line="0", beat="3/2")
        """
        try:
            source = await manager.require(chart)
            target = resolve_line(source, line)
            state = evaluate_state(target.events, Beat.parse(beat))
            return json.dumps(
                {
                    "status": "success",
                    "line": line,
                    "beat": beat,
                    "state": asdict(state),
                    "visible": state.is_visible(),
                }
            )
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to evaluate line")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_evaluate_line"] = phichain_evaluate_line

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_fit_events(
        chart: str,
        line: str,
        epsilon: float = DEFAULT_EASING_FITTING_EPSILON,
        kinds: list[str] | None = None,
    ) -> str:
        """
        Compact runs of short linear events into eased events.

        Args:
            chart: Chart name
            line: Line path
            epsilon: Maximum deviation accepted per sampled value
            kinds: Event kinds to fit (default: all but 'speed')

        Returns:
            JSON string with event counts before and after

        Example:
            phichain_fit_events(chart="my-chart", line="0", kinds=["x", "y"])
        """
        try:
            if epsilon <= 0:
                raise ValueError(f"epsilon must be positive, got {epsilon}")

            source = await manager.require(chart)
            target = resolve_line(source, line)
            selected = (
                {LineEventKind(k) for k in kinds}
                if kinds is not None
                else {k for k in LineEventKind if k != LineEventKind.SPEED}
            )

            before = len(target.events)
            events = []
            for kind, group in group_by_kind(target.events).items():
                events.extend(fit_events(group, epsilon) if kind in selected else group)
            target.events = events

            return json.dumps(
                {
                    "status": "success",
                    "line": line,
                    "events": {"before": before, "after": len(events)},
                }
            )
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to fit events")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_fit_events"] = phichain_fit_events

    return tools
