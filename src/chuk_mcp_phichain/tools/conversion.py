"""
Conversion tools - MCP tools for moving charts between formats.

Tools for converting chart files, exporting stored charts, upgrading old
phichain charts and listing the supported formats.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_phichain.charts import ChartManager
from chuk_mcp_phichain.constants import CURRENT_FORMAT, ErrorMessages, FormatName, SuccessMessages
from chuk_mcp_phichain.converter import convert_file, write_chart
from chuk_mcp_phichain.errors import PhichainError
from chuk_mcp_phichain.formats import list_formats
from chuk_mcp_phichain.migration import get_format, migrate
from chuk_mcp_phichain.settings import ConversionSettings

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)

_SUFFIXES = {
    FormatName.PHICHAIN: ".chart.json",
    FormatName.PRIMITIVE: ".primitive.json",
    FormatName.OFFICIAL: ".official.json",
    FormatName.RPE: ".rpe.json",
}


def register_conversion_tools(
    mcp: ChukMCPServer,
    manager: ChartManager,
    settings: ConversionSettings,
    output_dir: Path,
) -> dict[str, Any]:
    """
    Register format conversion tools with the MCP server.

    Args:
        mcp: The MCP server instance
        manager: The chart manager
        settings: Conversion options
        output_dir: Directory for output files

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_convert(
        input_path: str,
        source: str,
        target: str,
        output_name: str | None = None,
    ) -> str:
        """
        Convert a chart file from one format to another.

        Args:
            input_path: Path to the source JSON file
            source: Source format ('phichain', 'primitive', 'official', 'rpe')
            target: Target format
            output_name: Optional output filename (without extension)

        Returns:
            JSON string with the output file path

        Example:
            phichain_convert(input_path="song.json", source="official", target="rpe")
        """
        try:
            target_format = FormatName(target)
            stem = output_name or Path(input_path).name.split(".")[0]
            output_path = output_dir / f"{stem}{_SUFFIXES[target_format]}"

            convert_file(input_path, output_path, source, target_format, settings)

            return json.dumps(
                {
                    "status": "success",
                    "path": str(output_path),
                    "message": SuccessMessages.CHART_CONVERTED.format(
                        source=input_path, input=source, path=output_path, output=target
                    ),
                }
            )
        except (PhichainError, ValueError, OSError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to convert chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_convert"] = phichain_convert

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_export_chart(chart: str, target: str, output_name: str | None = None) -> str:
        """
        Export a stored chart to another format.

        Args:
            chart: Chart name
            target: Target format ('primitive', 'official', 'rpe', 'phichain')
            output_name: Optional output filename (without extension)

        Returns:
            JSON string with the output file path

        Example:
            phichain_export_chart(chart="my-chart", target="official")
        """
        try:
            source = await manager.get(chart)
            if source is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.CHART_NOT_FOUND.format(name=chart)}
                )

            target_format = FormatName(target)
            document = write_chart(source, target_format, settings)

            output_path = output_dir / f"{output_name or chart}{_SUFFIXES[target_format]}"
            output_dir.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False)

            return json.dumps({"status": "success", "path": str(output_path), "format": target_format.value})
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to export chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_export_chart"] = phichain_export_chart

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_migrate(input_path: str, output_path: str | None = None) -> str:
        """
        Upgrade a phichain chart file to the current format.

        Args:
            input_path: Path to the chart file
            output_path: Where to write the result (default: overwrite the input)

        Returns:
            JSON string with the old and new format versions

        Example:
            phichain_migrate(input_path="charts/old.chart.json")
        """
        try:
            with open(input_path, encoding="utf-8") as f:
                data = json.load(f)

            version = get_format(data)
            migrated = migrate(data)

            destination = Path(output_path or input_path)
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, "w", encoding="utf-8") as f:
                json.dump(migrated, f, ensure_ascii=False, indent=2)

            return json.dumps(
                {
                    "status": "success",
                    "path": str(destination),
                    "from_format": version,
                    "to_format": CURRENT_FORMAT,
                }
            )
        except (PhichainError, ValueError, OSError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to migrate chart")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_migrate"] = phichain_migrate

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_list_formats() -> str:
        """
        List the supported chart formats.

        Returns:
            JSON string with each format and the options it accepts

        Example:
            phichain_list_formats()
        """
        try:
            return json.dumps({"status": "success", "formats": list_formats()})
        except Exception as e:
            logger.exception("Failed to list formats")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_list_formats"] = phichain_list_formats

    return tools
