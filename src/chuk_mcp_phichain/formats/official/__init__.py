"""
Phigros official chart format.

This module provides:
- OfficialChart: pydantic schema of the official JSON
- official_to_chart / chart_to_official: the converters
- OfficialFormat: the ChartFormat wrapper used by the converter registry
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from chuk_mcp_phichain.constants import FormatName
from chuk_mcp_phichain.formats.base import ChartFormat, validate_document
from chuk_mcp_phichain.formats.official.exporter import chart_to_official, compute_floor_positions
from chuk_mcp_phichain.formats.official.importer import (
    merge_constant_events,
    official_to_chart,
    tidy_events,
)
from chuk_mcp_phichain.formats.official.options import OfficialInputOptions, OfficialOutputOptions
from chuk_mcp_phichain.formats.official.schema import (
    OfficialChart,
    OfficialLine,
    OfficialMoveEvent,
    OfficialNote,
    OfficialNoteKind,
    OfficialNumericEvent,
    OfficialSpeedEvent,
)
from chuk_mcp_phichain.models.chart import Chart


class OfficialFormat(ChartFormat):
    """Official Phigros JSON (formatVersion 1 or 3 in, 3 out)."""

    name = FormatName.OFFICIAL
    description = "Phigros official chart JSON"
    input_options = OfficialInputOptions
    output_options = OfficialOutputOptions

    document: OfficialChart

    @classmethod
    def parse(cls, data: Any) -> OfficialFormat:
        return cls(validate_document(OfficialChart, data))

    def dump(self) -> dict[str, Any]:
        return self.document.model_dump(mode="json", by_alias=True)

    def to_chart(self, options: BaseModel | None = None) -> Chart:
        return official_to_chart(self.document, self._options(OfficialInputOptions, options))

    @classmethod
    def from_chart(cls, chart: Chart, options: BaseModel | None = None) -> OfficialFormat:
        return cls(chart_to_official(chart, cls._options(OfficialOutputOptions, options)))


__all__ = [
    "OfficialFormat",
    "OfficialChart",
    "OfficialLine",
    "OfficialNote",
    "OfficialNoteKind",
    "OfficialMoveEvent",
    "OfficialNumericEvent",
    "OfficialSpeedEvent",
    "OfficialInputOptions",
    "OfficialOutputOptions",
    "official_to_chart",
    "chart_to_official",
    "compute_floor_positions",
    "merge_constant_events",
    "tidy_events",
]
