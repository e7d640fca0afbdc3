#!/usr/bin/env python3
"""
Async Phichain MCP Server using chuk-mcp-server

This server provides MCP tools for authoring, compiling and converting
Phigros-style rhythm game charts. Charts are trees of judgment lines that
carry notes and keyframed events; the compiler flattens them into
primitive charts and the converters read and write official and
Re:PhiEdit JSON.

The server provides tools for:
- Creating, importing and saving charts
- Adding lines, notes, events, tempo changes and curve note tracks
- Compiling charts and inspecting line lifetimes
- Converting between chart formats and migrating old charts
"""

import logging
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_phichain.charts import ChartManager
from chuk_mcp_phichain.settings import DEFAULT_SETTINGS_FILE, load_settings
from chuk_mcp_phichain.tools import (
    register_chart_tools,
    register_compilation_tools,
    register_conversion_tools,
    register_structure_tools,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-phichain")

# Paths - use standard project structure
BASE_PATH = Path.cwd()
CHARTS_DIR = BASE_PATH / "charts"
OUTPUT_DIR = BASE_PATH / "output"
SETTINGS_FILE = BASE_PATH / DEFAULT_SETTINGS_FILE

# Create managers
settings = load_settings(SETTINGS_FILE)
chart_manager = ChartManager(CHARTS_DIR)

# Register all tools
chart_tools = register_chart_tools(mcp, chart_manager, settings)
structure_tools = register_structure_tools(mcp, chart_manager)
compilation_tools = register_compilation_tools(mcp, chart_manager, settings, OUTPUT_DIR)
conversion_tools = register_conversion_tools(mcp, chart_manager, settings, OUTPUT_DIR)

TOOL_GROUPS: dict[str, list[str]] = {
    "chart": list(chart_tools),
    "structure": list(structure_tools),
    "compilation": list(compilation_tools),
    "conversion": list(conversion_tools),
}

# Export tools for direct access
phichain_create_chart = chart_tools["phichain_create_chart"]
phichain_get_chart = chart_tools["phichain_get_chart"]
phichain_list_charts = chart_tools["phichain_list_charts"]
phichain_save_chart = chart_tools["phichain_save_chart"]
phichain_delete_chart = chart_tools["phichain_delete_chart"]
phichain_import_chart = chart_tools["phichain_import_chart"]

phichain_add_line = structure_tools["phichain_add_line"]
phichain_add_note = structure_tools["phichain_add_note"]
phichain_add_event = structure_tools["phichain_add_event"]
phichain_add_bpm_point = structure_tools["phichain_add_bpm_point"]
phichain_add_curve_note_track = structure_tools["phichain_add_curve_note_track"]

phichain_compile = compilation_tools["phichain_compile"]
phichain_line_lifetimes = compilation_tools["phichain_line_lifetimes"]
phichain_validate = compilation_tools["phichain_validate"]
phichain_evaluate_line = compilation_tools["phichain_evaluate_line"]
phichain_fit_events = compilation_tools["phichain_fit_events"]

phichain_convert = conversion_tools["phichain_convert"]
phichain_export_chart = conversion_tools["phichain_export_chart"]
phichain_migrate = conversion_tools["phichain_migrate"]
phichain_list_formats = conversion_tools["phichain_list_formats"]

summary = ", ".join(f"{len(tools)} {group}" for group, tools in TOOL_GROUPS.items())
logger.info(f"Phichain chart server ready ({summary} tools)")
logger.info(f"  Charts dir: {CHARTS_DIR}")
logger.info(f"  Output dir: {OUTPUT_DIR}")
if SETTINGS_FILE.exists():
    logger.info(f"  Settings: {SETTINGS_FILE}")
else:
    logger.info(f"  Settings: defaults (no {DEFAULT_SETTINGS_FILE} found)")
