"""
Compilation - turns authoring charts into primitive charts.

The building blocks:
    sequence  - evaluating event sequences
    helpers   - filling, cutting, clamping and merging sequences
    fitting   - compacting linear runs into eased events
    curve     - curve note tracks and synthesized Y tracks
    lifetime  - when a line is visible or has notes
    steps     - the compile passes
    pipeline  - ChartCompiler running the passes in order
"""

from chuk_mcp_phichain.compiler.fitting import FitResult, fit_easing, fit_events
from chuk_mcp_phichain.compiler.lifetime import LineLifetime, find_lifetime, merge_lifetimes
from chuk_mcp_phichain.compiler.ranges import BeatRange, find_ranges, merge_ranges
from chuk_mcp_phichain.compiler.sequence import evaluate, evaluate_exclusive, split_points
from chuk_mcp_phichain.compiler.state import LineState, evaluate_state


def __getattr__(name: str):
    """Lazy imports for the pipeline to avoid import cycles with the passes."""
    if name in ("ChartCompiler", "CompileOptions", "CompileResult", "compile_chart", "compile_only"):
        from chuk_mcp_phichain.compiler import pipeline

        return getattr(pipeline, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Pipeline (lazy loaded)
    "ChartCompiler",
    "CompileOptions",
    "CompileResult",
    "compile_chart",
    "compile_only",
    # Sequences
    "evaluate",
    "evaluate_exclusive",
    "split_points",
    "LineState",
    "evaluate_state",
    # Fitting
    "FitResult",
    "fit_easing",
    "fit_events",
    # Lifetime
    "BeatRange",
    "find_ranges",
    "merge_ranges",
    "LineLifetime",
    "find_lifetime",
    "merge_lifetimes",
]
