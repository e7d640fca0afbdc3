"""
Phichain format - the authoring chart as stored on disk.

Documents of any older format are migrated on parse.
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel

from chuk_mcp_phichain.constants import FormatName
from chuk_mcp_phichain.formats.base import ChartFormat
from chuk_mcp_phichain.migration import migrate
from chuk_mcp_phichain.models.chart import Chart


class PhichainFormat(ChartFormat):
    """Authoring chart JSON (tree of lines)."""

    name = FormatName.PHICHAIN
    description = "Phichain authoring chart (lines, children, curve note tracks)"

    document: Chart

    @classmethod
    def parse(cls, data: Any) -> PhichainFormat:
        return cls(Chart.from_dict(migrate(data)))

    def dump(self) -> dict[str, Any]:
        return self.document.to_dict()

    def to_chart(self, options: BaseModel | None = None) -> Chart:
        return copy.deepcopy(self.document)

    @classmethod
    def from_chart(cls, chart: Chart, options: BaseModel | None = None) -> PhichainFormat:
        return cls(copy.deepcopy(chart))
