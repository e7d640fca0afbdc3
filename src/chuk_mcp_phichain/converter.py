"""
Converter - turns a document of one chart format into another.

Every conversion goes through an authoring Chart:

    parse(source) → to_chart(input options) → from_chart(output options)
    → apply_common_output_options → dump

Usage:
    from chuk_mcp_phichain.converter import convert_document

    rpe = convert_document(official_json, "official", "rpe")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from chuk_mcp_phichain.constants import FormatName
from chuk_mcp_phichain.formats import get_format
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.settings import ConversionSettings

logger = logging.getLogger(__name__)


def read_chart(data: Any, source: FormatName | str, settings: ConversionSettings | None = None) -> Chart:
    """Parse a document and convert it to an authoring chart."""
    settings = settings or ConversionSettings()
    fmt = get_format(source)
    return fmt.parse(data).to_chart(settings.input_options(fmt.name))


def write_chart(chart: Chart, target: FormatName | str, settings: ConversionSettings | None = None) -> Any:
    """Convert an authoring chart to a JSON-ready document."""
    settings = settings or ConversionSettings()
    fmt = get_format(target)
    document = fmt.from_chart(chart, settings.output_options(fmt.name))
    return document.apply_common_output_options(settings.common_output).dump()


def convert_document(
    data: Any,
    source: FormatName | str,
    target: FormatName | str,
    settings: ConversionSettings | None = None,
) -> Any:
    """
    Convert decoded JSON from one format to another.

    Args:
        data: The decoded source document
        source: Source format name
        target: Target format name
        settings: Conversion options (defaults to ConversionSettings())

    Returns:
        The decoded target document

    Raises:
        ValueError: If a format name is unknown
        PhichainError: If the document cannot be read or written
    """
    chart = read_chart(data, source, settings)
    logger.info(
        "Converting %s -> %s: %d lines, %d notes",
        FormatName(source).value,
        FormatName(target).value,
        chart.line_count,
        chart.note_count,
    )
    return write_chart(chart, target, settings)


def convert_file(
    input_path: Path | str,
    output_path: Path | str,
    source: FormatName | str,
    target: FormatName | str,
    settings: ConversionSettings | None = None,
) -> Path:
    """
    Convert a chart file and write the result as JSON.

    Returns:
        Path to the written file
    """
    input_path = Path(input_path)
    output_path = Path(output_path)

    with open(input_path, encoding="utf-8") as f:
        data = json.load(f)

    result = convert_document(data, source, target, settings)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(result, f, ensure_ascii=False)

    return output_path
