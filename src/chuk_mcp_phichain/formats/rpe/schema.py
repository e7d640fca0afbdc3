"""
Re:PhiEdit (RPE) chart schema.

Beats are [whole, numerator, denominator] triples. Lines form a tree
through `father` indices (-1 for root lines) and carry their events in
additive event layers.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from chuk_mcp_phichain.core.easing import Easing

# RPE easingType index -> easing. Index 0 is unused by RPE and read as linear.
RPE_EASING: tuple[Easing, ...] = (
    Easing.LINEAR,
    Easing.LINEAR,
    Easing.EASE_OUT_SINE,
    Easing.EASE_IN_SINE,
    Easing.EASE_OUT_QUAD,
    Easing.EASE_IN_QUAD,
    Easing.EASE_IN_OUT_SINE,
    Easing.EASE_IN_OUT_QUAD,
    Easing.EASE_OUT_CUBIC,
    Easing.EASE_IN_CUBIC,
    Easing.EASE_OUT_QUART,
    Easing.EASE_IN_QUART,
    Easing.EASE_IN_OUT_CUBIC,
    Easing.EASE_IN_OUT_QUART,
    Easing.EASE_OUT_QUINT,
    Easing.EASE_IN_QUINT,
    Easing.EASE_OUT_EXPO,
    Easing.EASE_IN_EXPO,
    Easing.EASE_OUT_CIRC,
    Easing.EASE_IN_CIRC,
    Easing.EASE_OUT_BACK,
    Easing.EASE_IN_BACK,
    Easing.EASE_IN_OUT_CIRC,
    Easing.EASE_IN_OUT_BACK,
    Easing.EASE_OUT_ELASTIC,
    Easing.EASE_IN_ELASTIC,
    Easing.EASE_OUT_BOUNCE,
    Easing.EASE_IN_BOUNCE,
    Easing.EASE_IN_OUT_BOUNCE,
    Easing.EASE_IN_OUT_ELASTIC,
)

RpeBeat = tuple[int, int, int]


class RpeNoteKind(IntEnum):
    """RPE note type codes."""

    TAP = 1
    HOLD = 2
    FLICK = 3
    DRAG = 4


class RpeBpmPoint(BaseModel):
    bpm: float = Field(..., gt=0)
    start_time: RpeBeat = Field(..., alias="startTime")

    model_config = {"populate_by_name": True}


class RpeMeta(BaseModel):
    """Chart metadata. Only the offset (ms) is used."""

    rpe_version: int = Field(150, alias="RPEVersion")
    background: str = ""
    charter: str = ""
    composer: str = ""
    id: str = ""
    level: str = ""
    name: str = ""
    offset: int = Field(0, description="Offset in milliseconds")
    song: str = ""

    model_config = {"populate_by_name": True}


class RpeCommonEvent(BaseModel):
    """Move, rotate or alpha event."""

    bezier: int = 0
    bezier_points: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0, 0.0], alias="bezierPoints")
    easing_type: int = Field(1, alias="easingType")
    start: float
    end: float
    start_time: RpeBeat = Field(..., alias="startTime")
    end_time: RpeBeat = Field(..., alias="endTime")

    model_config = {"populate_by_name": True}


class RpeAlphaEvent(RpeCommonEvent):
    """Alpha events hold integer opacities."""

    start: int  # type: ignore[assignment]
    end: int  # type: ignore[assignment]

    @field_validator("start", "end", mode="before")
    @classmethod
    def round_alpha(cls, v: Any) -> Any:
        if isinstance(v, float):
            return round(v)
        return v


class RpeSpeedEvent(BaseModel):
    """Speed events are always linear."""

    start: float
    end: float
    start_time: RpeBeat = Field(..., alias="startTime")
    end_time: RpeBeat = Field(..., alias="endTime")

    model_config = {"populate_by_name": True}


class RpeEventLayer(BaseModel):
    """One additive layer of events."""

    alpha_events: list[RpeAlphaEvent] = Field(default_factory=list, alias="alphaEvents")
    move_x_events: list[RpeCommonEvent] = Field(default_factory=list, alias="moveXEvents")
    move_y_events: list[RpeCommonEvent] = Field(default_factory=list, alias="moveYEvents")
    rotate_events: list[RpeCommonEvent] = Field(default_factory=list, alias="rotateEvents")
    speed_events: list[RpeSpeedEvent] = Field(default_factory=list, alias="speedEvents")

    model_config = {"populate_by_name": True}

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class RpeNote(BaseModel):
    above: int = Field(1, description="1 above the line, anything else below")
    start_time: RpeBeat = Field(..., alias="startTime")
    end_time: RpeBeat = Field(..., alias="endTime")
    position_x: float = Field(0.0, alias="positionX")
    speed: float = 1.0
    kind: RpeNoteKind = Field(..., alias="type")
    size: float = 1.0
    alpha: int = 255
    visible_time: float = Field(999999.0, alias="visibleTime")
    y_offset: float = Field(0.0, alias="yOffset")
    is_fake: int = Field(0, alias="isFake")

    model_config = {"populate_by_name": True}


class RpeJudgeLine(BaseModel):
    name: str = Field("Untitled", alias="Name")
    texture: str = Field("line.png", alias="Texture")
    father: int = -1
    rotate_with_father: bool = Field(True, alias="rotateWithFather")
    event_layers: list[RpeEventLayer | None] = Field(default_factory=list, alias="eventLayers")
    notes: list[RpeNote] = Field(default_factory=list)
    attach_ui: str | None = Field(None, alias="attachUI")

    model_config = {"populate_by_name": True}

    @field_validator("notes", mode="before")
    @classmethod
    def null_notes(cls, v: Any) -> Any:
        return [] if v is None else v


class RpeChart(BaseModel):
    bpm_list: list[RpeBpmPoint] = Field(..., alias="BPMList")
    meta: RpeMeta = Field(default_factory=RpeMeta, alias="META")
    judge_line_list: list[RpeJudgeLine] = Field(default_factory=list, alias="judgeLineList")

    model_config = {"populate_by_name": True}
