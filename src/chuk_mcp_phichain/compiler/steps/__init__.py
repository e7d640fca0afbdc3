"""
Compile passes. Each pass maps a Chart to a new Chart and never modifies
its input.
"""

from chuk_mcp_phichain.compiler.steps.curve_note_tracks import evaluate_curve_note_tracks
from chuk_mcp_phichain.compiler.steps.merge_children_line import merge_children_line
from chuk_mcp_phichain.compiler.steps.note_level_events import apply_note_level_events
from chuk_mcp_phichain.compiler.steps.remove_unit_lines import remove_unit_lines
from chuk_mcp_phichain.compiler.steps.reuse_lines import reuse_lines

__all__ = [
    "merge_children_line",
    "evaluate_curve_note_tracks",
    "apply_note_level_events",
    "remove_unit_lines",
    "reuse_lines",
]
