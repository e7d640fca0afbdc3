"""
Re:PhiEdit (RPE) chart format.

This module provides:
- RpeChart: pydantic schema of the RPE JSON
- rpe_to_chart / chart_to_rpe: the converters
- RpeFormat: the ChartFormat wrapper used by the converter registry
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from chuk_mcp_phichain.constants import FormatName
from chuk_mcp_phichain.formats.base import ChartFormat, CommonOutputOptions, validate_document
from chuk_mcp_phichain.formats.rpe.exporter import apply_rounding, chart_to_rpe, easing_to_rpe
from chuk_mcp_phichain.formats.rpe.importer import easing_from_rpe, merge_layers, rpe_to_chart
from chuk_mcp_phichain.formats.rpe.options import RpeInputOptions
from chuk_mcp_phichain.formats.rpe.schema import (
    RPE_EASING,
    RpeBpmPoint,
    RpeChart,
    RpeCommonEvent,
    RpeEventLayer,
    RpeJudgeLine,
    RpeMeta,
    RpeNote,
    RpeNoteKind,
    RpeSpeedEvent,
)
from chuk_mcp_phichain.models.chart import Chart


class RpeFormat(ChartFormat):
    """Re:PhiEdit JSON."""

    name = FormatName.RPE
    description = "Re:PhiEdit chart JSON"
    input_options = RpeInputOptions

    document: RpeChart

    @classmethod
    def parse(cls, data: Any) -> RpeFormat:
        return cls(validate_document(RpeChart, data))

    def dump(self) -> dict[str, Any]:
        return self.document.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_chart(self, options: BaseModel | None = None) -> Chart:
        return rpe_to_chart(self.document, self._options(RpeInputOptions, options))

    @classmethod
    def from_chart(cls, chart: Chart, options: BaseModel | None = None) -> RpeFormat:
        return cls(chart_to_rpe(chart))

    def apply_common_output_options(self, options: CommonOutputOptions) -> RpeFormat:
        return RpeFormat(apply_rounding(self.document, options))


__all__ = [
    "RpeFormat",
    "RpeChart",
    "RpeBpmPoint",
    "RpeMeta",
    "RpeJudgeLine",
    "RpeEventLayer",
    "RpeCommonEvent",
    "RpeSpeedEvent",
    "RpeNote",
    "RpeNoteKind",
    "RpeInputOptions",
    "RPE_EASING",
    "rpe_to_chart",
    "chart_to_rpe",
    "apply_rounding",
    "easing_from_rpe",
    "easing_to_rpe",
    "merge_layers",
]
