"""
Chart tools - MCP tools for chart lifecycle.

Tools for creating, importing, saving and querying authoring charts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_phichain.charts import ChartManager
from chuk_mcp_phichain.constants import ErrorMessages, SuccessMessages
from chuk_mcp_phichain.errors import PhichainError
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.settings import ConversionSettings

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def chart_summary(name: str, chart: Chart) -> dict[str, Any]:
    """Counts and tempo of a chart, for tool responses."""
    return {
        "name": name,
        "offset": chart.offset,
        "bpm_list": chart.bpm_list.to_list(),
        "root_lines": len(chart.lines),
        "lines": chart.line_count,
        "notes": chart.note_count,
        "events": chart.event_count,
    }


def register_chart_tools(
    mcp: ChukMCPServer,
    manager: ChartManager,
    settings: ConversionSettings,
) -> dict[str, Any]:
    """
    Register chart lifecycle tools with the MCP server.

    Args:
        mcp: The MCP server instance
        manager: The chart manager
        settings: Options used when importing charts

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_create_chart(
        name: str,
        bpm: float = 120.0,
        offset: float = 0.0,
        line_count: int = 1,
    ) -> str:
        """
        Create a new chart.

        Creates an empty chart with a single tempo and a number of default
        lines (centred, fully opaque, speed 10).

        Args:
            name: Unique name for the chart
            bpm: Initial tempo in beats per minute
            offset: Audio offset in milliseconds
            line_count: Number of default lines to start with

        Returns:
            JSON string with chart summary

        Example:
            phichain_create_chart(name="my-chart", bpm=174)
        """
        try:
            chart = await manager.create(name=name, bpm=bpm, offset=offset, line_count=line_count)
            return json.dumps(
                {
                    "status": "success",
                    "chart": chart_summary(name, chart),
                    "message": SuccessMessages.CHART_CREATED.format(name=name),
                }
            )
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to create chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_create_chart"] = phichain_create_chart

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_get_chart(name: str, full: bool = False) -> str:
        """
        Get chart details.

        Args:
            name: Chart name
            full: Include the whole chart document instead of a summary

        Returns:
            JSON string with chart summary or document

        Example:
            phichain_get_chart(name="my-chart", full=True)
        """
        try:
            chart = await manager.get(name)
            if chart is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.CHART_NOT_FOUND.format(name=name)}
                )

            response: dict[str, Any] = {"status": "success", "chart": chart_summary(name, chart)}
            if full:
                response["document"] = chart.to_dict()
            return json.dumps(response)
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to get chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_get_chart"] = phichain_get_chart

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_list_charts() -> str:
        """
        List all saved charts.

        Returns:
            JSON string with list of chart summaries

        Example:
            phichain_list_charts()
        """
        try:
            charts = await manager.list_charts()
            return json.dumps(
                {
                    "status": "success",
                    "charts": [
                        {
                            "name": meta.name,
                            "format": meta.format,
                            "bpm": meta.bpm,
                            "lines": meta.line_count,
                            "modified": meta.modified.isoformat(),
                        }
                        for meta in charts
                    ],
                    "count": len(charts),
                }
            )
        except Exception as e:
            logger.exception("Failed to list charts")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_list_charts"] = phichain_list_charts

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_save_chart(name: str) -> str:
        """
        Save a chart to disk.

        Args:
            name: Chart name

        Returns:
            JSON string with saved file path

        Example:
            phichain_save_chart(name="my-chart")
        """
        try:
            path = await manager.save(name)
            return json.dumps({"status": "success", "path": str(path)})
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to save chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_save_chart"] = phichain_save_chart

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_delete_chart(name: str) -> str:
        """
        Delete a chart from memory and disk.

        Args:
            name: Chart name

        Returns:
            JSON string with deletion status

        Example:
            phichain_delete_chart(name="old-chart")
        """
        try:
            deleted = await manager.delete(name)
            if not deleted:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.CHART_NOT_FOUND.format(name=name)}
                )
            return json.dumps({"status": "success", "message": f"Deleted chart '{name}'."})
        except Exception as e:
            logger.exception("Failed to delete chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_delete_chart"] = phichain_delete_chart

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_import_chart(name: str, path: str, source: str) -> str:
        """
        Import a chart file of any supported format.

        Official and RPE charts are converted with the server's settings
        (easing fitting, fake note removal, ...). Phichain charts of older
        formats are migrated.

        Args:
            name: Name for the imported chart
            path: Path to the JSON file
            source: Source format ('phichain', 'primitive', 'official', 'rpe')

        Returns:
            JSON string with chart summary

        Example:
            phichain_import_chart(name="imported", path="charts/song.json", source="official")
        """
        try:
            with open(Path(path), encoding="utf-8") as f:
                data = json.load(f)

            chart = await manager.import_chart(name, data, source, settings)
            return json.dumps({"status": "success", "chart": chart_summary(name, chart)})
        except (PhichainError, ValueError, OSError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to import chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_import_chart"] = phichain_import_chart

    return tools
