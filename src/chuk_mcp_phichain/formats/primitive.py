"""
Primitive format - the flat, compiled chart.

Writing a primitive document compiles the chart; reading one lifts it back
into an authoring chart with unnamed, childless lines.
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel

from chuk_mcp_phichain.compiler.pipeline import CompileOptions, compile_chart
from chuk_mcp_phichain.constants import FormatName
from chuk_mcp_phichain.formats.base import ChartFormat
from chuk_mcp_phichain.models.chart import Chart, PrimitiveChart


class PrimitiveFormat(ChartFormat):
    """Flat playback chart JSON."""

    name = FormatName.PRIMITIVE
    description = "Compiled primitive chart (flat lines, explicit transitions)"
    output_options = CompileOptions

    document: PrimitiveChart

    @classmethod
    def parse(cls, data: Any) -> PrimitiveFormat:
        return cls(PrimitiveChart.from_dict(data))

    def dump(self) -> dict[str, Any]:
        return self.document.to_dict()

    def to_chart(self, options: BaseModel | None = None) -> Chart:
        return self.document.into_chart()

    @classmethod
    def from_chart(cls, chart: Chart, options: BaseModel | None = None) -> PrimitiveFormat:
        return cls(compile_chart(chart, cls._options(CompileOptions, options)))

    def into_primitive(self) -> PrimitiveChart:
        return copy.deepcopy(self.document)

    @classmethod
    def from_primitive(cls, primitive: PrimitiveChart) -> PrimitiveFormat:
        return cls(copy.deepcopy(primitive))
