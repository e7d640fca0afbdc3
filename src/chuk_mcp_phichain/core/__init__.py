"""
Core chart primitives.

The exact building blocks everything else composes on:
- Beat: Exact musical time (whole + fraction)
- BpmPoint / BpmList: Tempo map between beats and seconds
- Easing: Named shape functions, plus custom bezier, steps and elastic
"""

from chuk_mcp_phichain.core.beat import Beat, attach, beat_range
from chuk_mcp_phichain.core.bpm_list import BpmList, BpmPoint
from chuk_mcp_phichain.core.easing import (
    FITTING_EASINGS,
    AnyEasing,
    CustomEasing,
    Easing,
    ElasticEasing,
    StepsEasing,
    easing_from_json,
    tween,
)

__all__ = [
    # Beat
    "Beat",
    "attach",
    "beat_range",
    # Tempo
    "BpmPoint",
    "BpmList",
    # Easing
    "Easing",
    "CustomEasing",
    "StepsEasing",
    "ElasticEasing",
    "AnyEasing",
    "FITTING_EASINGS",
    "easing_from_json",
    "tween",
]
