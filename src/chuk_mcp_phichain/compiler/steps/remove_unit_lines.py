"""Remove lines that have no notes and are never visible."""

from __future__ import annotations

import copy
import logging
from dataclasses import replace

from chuk_mcp_phichain.compiler.lifetime import find_lifetime
from chuk_mcp_phichain.models.chart import Chart

logger = logging.getLogger(__name__)


def remove_unit_lines(chart: Chart) -> Chart:
    """
    Drop every unit line of a flattened chart.

    A unit line has an empty lifetime: no notes and never visible.
    """
    chart = copy.deepcopy(chart)
    lines = [line for line in chart.lines if not find_lifetime(line).is_unit()]
    logger.info("Removed %d unit lines", len(chart.lines) - len(lines))
    return replace(chart, lines=lines)
