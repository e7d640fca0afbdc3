"""
Phigros official chart schema.

Times are in 1/32 beat units of the line's bpm. Positions are normalized
to 0..1 of the canvas (formatVersion 3); formatVersion 1 packs X and Y
into a single number per move event.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field


class OfficialNoteKind(IntEnum):
    """Official note type codes."""

    TAP = 1
    DRAG = 2
    HOLD = 3
    FLICK = 4


class OfficialNote(BaseModel):
    """A note of an official line."""

    kind: OfficialNoteKind = Field(..., alias="type")
    time: float = Field(..., description="Start time in 1/32 beats")
    hold_time: float = Field(0.0, alias="holdTime")
    position_x: float = Field(..., alias="positionX", description="Position along the line, 1 = 1/18 canvas")
    speed: float = Field(1.0)
    floor_position: float = Field(0.0, alias="floorPosition")

    model_config = {"populate_by_name": True}


class OfficialNumericEvent(BaseModel):
    """Rotation or disappear (opacity) event."""

    start_time: float = Field(..., alias="startTime")
    end_time: float = Field(..., alias="endTime")
    start: float
    end: float

    model_config = {"populate_by_name": True}


class OfficialMoveEvent(BaseModel):
    """
    Move event.

    formatVersion 3 stores X in start/end and Y in start2/end2.
    formatVersion 1 has no start2/end2.
    """

    start_time: float = Field(..., alias="startTime")
    end_time: float = Field(..., alias="endTime")
    start: float
    end: float
    start2: float = 0.0
    end2: float = 0.0

    model_config = {"populate_by_name": True}


class OfficialSpeedEvent(BaseModel):
    """Speed event; floorPosition is the distance travelled before it starts."""

    start_time: float = Field(..., alias="startTime")
    end_time: float = Field(..., alias="endTime")
    value: float
    floor_position: float = Field(0.0, alias="floorPosition")

    model_config = {"populate_by_name": True}


class OfficialLine(BaseModel):
    """A judge line."""

    bpm: float = Field(..., gt=0)
    move_events: list[OfficialMoveEvent] = Field(default_factory=list, alias="judgeLineMoveEvents")
    rotate_events: list[OfficialNumericEvent] = Field(default_factory=list, alias="judgeLineRotateEvents")
    opacity_events: list[OfficialNumericEvent] = Field(
        default_factory=list, alias="judgeLineDisappearEvents"
    )
    speed_events: list[OfficialSpeedEvent] = Field(default_factory=list, alias="speedEvents")
    notes_above: list[OfficialNote] = Field(default_factory=list, alias="notesAbove")
    notes_below: list[OfficialNote] = Field(default_factory=list, alias="notesBelow")

    model_config = {"populate_by_name": True}


class OfficialChart(BaseModel):
    """An official chart document."""

    format_version: int = Field(..., alias="formatVersion")
    offset: float = Field(0.0, description="Offset in seconds")
    lines: list[OfficialLine] = Field(default_factory=list, alias="judgeLineList")

    model_config = {"populate_by_name": True}
