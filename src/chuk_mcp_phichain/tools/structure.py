"""
Structure tools - MCP tools for editing chart contents.

Tools for adding lines, notes, events, tempo changes and curve note
tracks. Lines are addressed by index path ("0", "0/2").
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_phichain.charts import ChartManager
from chuk_mcp_phichain.constants import DEFAULT_CURVE_DENSITY, DEFAULT_LINE_NAME, SuccessMessages
from chuk_mcp_phichain.core.easing import easing_from_json
from chuk_mcp_phichain.errors import PhichainError

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_structure_tools(mcp: ChukMCPServer, manager: ChartManager) -> dict[str, Any]:
    """
    Register chart editing tools with the MCP server.

    Args:
        mcp: The MCP server instance
        manager: The chart manager

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_add_line(
        chart: str,
        name: str = DEFAULT_LINE_NAME,
        parent: str | None = None,
    ) -> str:
        """
        Add a judgment line.

        The new line starts centred, fully opaque and with speed 10.
        A line with a parent moves and rotates with it.

        Args:
            chart: Chart name
            name: Line name
            parent: Path of the parent line, e.g. '0' (omit for a root line)

        Returns:
            JSON string with the path of the new line

        Example:
            phichain_add_line(chart="my-chart", name="left", parent="0")
        """
        try:
            path = await manager.add_line(chart, line_name=name, parent=parent)
            return json.dumps(
                {
                    "status": "success",
                    "line": path,
                    "message": SuccessMessages.LINE_ADDED.format(line=name, index=path),
                }
            )
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to add line")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_add_line"] = phichain_add_line

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_add_note(
        chart: str,
        line: str,
        kind: str,
        beat: str,
        x: float = 0.0,
        above: bool = True,
        speed: float = 1.0,
        hold_beat: str | None = None,
    ) -> str:
        """
        Add a note to a line.

        Args:
            chart: Chart name
            line: Line path (e.g. '0' or '0/1')
            kind: 'tap', 'drag', 'hold' or 'flick'
            beat: Beat of the note ('4', '3/4', '2+1/2')
            x: Position along the line in canvas units (-675 to 675)
            above: Whether the note falls from above the line
            speed: Multiplier of the line speed
            hold_beat: Length of a hold note in beats (required for holds)

        Returns:
            JSON string with the note index

        Example:
            phichain_add_note(chart="my-chart", line="0", kind="hold", beat="2", hold_beat="1/2")
        """
        try:
            index = await manager.add_note(
                chart, line, kind, beat, x=x, above=above, speed=speed, hold_beat=hold_beat
            )
            return json.dumps({"status": "success", "line": line, "note": index})
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to add note")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_add_note"] = phichain_add_note

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_add_event(
        chart: str,
        line: str,
        kind: str,
        start_beat: str,
        end_beat: str,
        start: float,
        end: float | None = None,
        easing: str | dict[str, Any] = "linear",
    ) -> str:
        """
        Add an event to a line.

        Without an end value the event is a constant.

        Args:
            chart: Chart name
            line: Line path
            kind: 'x', 'y', 'rotation', 'opacity' or 'speed'
            start_beat: Beat the event starts at
            end_beat: Beat the event ends at
            start: Value at the start
            end: Value at the end (omit for a constant)
            easing: Easing name like 'ease_out_sine', or {"custom": [x1, y1, x2, y2]}

        Returns:
            JSON string with the added event

        Example:
            phichain_add_event(chart="my-chart", line="0", kind="x",
                               start_beat="0", end_beat="4", start=-300, end=300,
                               easing="ease_in_out_quad")
        """
        try:
            event = await manager.add_event(
                chart,
                line,
                kind,
                start_beat,
                end_beat,
                start,
                end,
                easing=easing_from_json(easing),
            )
            return json.dumps({"status": "success", "line": line, "event": event.to_dict()})
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to add event")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_add_event"] = phichain_add_event

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_add_bpm_point(chart: str, beat: str, bpm: float) -> str:
        """
        Add a tempo change.

        Args:
            chart: Chart name
            beat: Beat where the new tempo starts
            bpm: Beats per minute

        Returns:
            JSON string with the updated tempo map

        Example:
            phichain_add_bpm_point(chart="my-chart", beat="32", bpm=180)
        """
        try:
            bpm_list = await manager.add_bpm_point(chart, beat, bpm)
            return json.dumps({"status": "success", "bpm_list": bpm_list.to_list()})
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to add bpm point")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_add_bpm_point"] = phichain_add_bpm_point

    @mcp.tool  # type: ignore[arg-type]
    async def phichain_add_curve_note_track(
        chart: str,
        line: str,
        from_note: int,
        to_note: int,
        kind: str = "drag",
        density: int = DEFAULT_CURVE_DENSITY,
        curve: str | dict[str, Any] = "linear",
    ) -> str:
        """
        Connect two notes with a curve of generated notes.

        Notes are generated when the chart is compiled or exported.

        Args:
            chart: Chart name
            line: Line path
            from_note: Index of the first note on the line
            to_note: Index of the last note on the line
            kind: Kind of generated notes (not 'hold')
            density: Notes per beat
            curve: Easing that shapes the curve

        Returns:
            JSON string with the curve note track

        Example:
            phichain_add_curve_note_track(chart="my-chart", line="0", from_note=0, to_note=1,
                                          curve="ease_in_sine")
        """
        try:
            track = await manager.add_curve_note_track(
                chart,
                line,
                from_note,
                to_note,
                kind=kind,
                density=density,
                curve=easing_from_json(curve),
            )
            return json.dumps({"status": "success", "line": line, "curve_note_track": track.to_dict()})
        except (PhichainError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to add curve note track")
            return json.dumps({"status": "error", "message": str(e)})

    tools["phichain_add_curve_note_track"] = phichain_add_curve_note_track

    return tools
