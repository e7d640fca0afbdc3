"""
Chart formats and the converter registry.

Formats:
    phichain  - authoring chart (migrated on read)
    primitive - compiled flat chart
    official  - Phigros official JSON
    rpe       - Re:PhiEdit JSON

Usage:
    from chuk_mcp_phichain.formats import get_format

    source = get_format("official").parse(data)
    chart = source.to_chart()
"""

from __future__ import annotations

from chuk_mcp_phichain.constants import ErrorMessages, FormatName
from chuk_mcp_phichain.formats.base import ChartFormat, CommonOutputOptions, validate_document
from chuk_mcp_phichain.formats.official import OfficialFormat
from chuk_mcp_phichain.formats.phichain import PhichainFormat
from chuk_mcp_phichain.formats.primitive import PrimitiveFormat
from chuk_mcp_phichain.formats.rpe import RpeFormat

FORMATS: dict[FormatName, type[ChartFormat]] = {
    FormatName.PHICHAIN: PhichainFormat,
    FormatName.PRIMITIVE: PrimitiveFormat,
    FormatName.OFFICIAL: OfficialFormat,
    FormatName.RPE: RpeFormat,
}


def get_format(name: FormatName | str) -> type[ChartFormat]:
    """
    Look up a format by name.

    Raises:
        ValueError: If the name is not a known format
    """
    try:
        return FORMATS[FormatName(name)]
    except ValueError:
        choices = ", ".join(f.value for f in FormatName)
        raise ValueError(ErrorMessages.UNKNOWN_FORMAT.format(format=name, choices=choices)) from None


def list_formats() -> list[dict[str, object]]:
    """Describe every registered format."""
    return [
        {
            "name": name.value,
            "description": fmt.description,
            "input_options": fmt.input_options.__name__ if fmt.input_options else None,
            "output_options": fmt.output_options.__name__ if fmt.output_options else None,
        }
        for name, fmt in FORMATS.items()
    ]


__all__ = [
    "ChartFormat",
    "CommonOutputOptions",
    "validate_document",
    "FORMATS",
    "get_format",
    "list_formats",
    "PhichainFormat",
    "PrimitiveFormat",
    "OfficialFormat",
    "RpeFormat",
]
