"""
MCP tool implementations.

Tools are organized by domain:
- charts - Chart lifecycle
- structure - Lines, notes, events, tempo and curve note tracks
- compilation - Compiling, lifetimes, validation, event fitting
- conversion - Format conversion and migration
"""

from chuk_mcp_phichain.tools.charts import register_chart_tools
from chuk_mcp_phichain.tools.compilation import register_compilation_tools
from chuk_mcp_phichain.tools.conversion import register_conversion_tools
from chuk_mcp_phichain.tools.structure import register_structure_tools

__all__ = [
    "register_chart_tools",
    "register_compilation_tools",
    "register_conversion_tools",
    "register_structure_tools",
]
