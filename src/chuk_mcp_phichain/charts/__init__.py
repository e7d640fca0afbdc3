"""
Chart management - the charter's working set.

This module provides:
- ChartManager: Lifecycle management for authoring charts
- ChartValidator: Structure checks before compiling or exporting
"""

from chuk_mcp_phichain.charts.manager import ChartManager, ChartMetadata, parse_line_path, resolve_line
from chuk_mcp_phichain.charts.validator import (
    ChartValidator,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    validate_chart,
)

__all__ = [
    "ChartManager",
    "ChartMetadata",
    "parse_line_path",
    "resolve_line",
    "ChartValidator",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "validate_chart",
]
