"""Options for reading and writing official charts."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator

from chuk_mcp_phichain.constants import DEFAULT_EASING_FITTING_EPSILON
from chuk_mcp_phichain.core.beat import Beat


def _parse_beat(value: Any) -> Beat:
    if isinstance(value, Beat):
        return value
    if isinstance(value, str):
        return Beat.parse(value)
    if isinstance(value, list):
        return Beat.from_list(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Beat.from_float(float(value))
    raise ValueError(f"Invalid beat: {value!r}")


class OfficialInputOptions(BaseModel):
    """How official charts are imported."""

    easing_fitting: bool = Field(True, description="Compact runs of linear events into eased events")
    easing_fitting_epsilon: float = Field(
        DEFAULT_EASING_FITTING_EPSILON, gt=0, description="Maximum deviation accepted while fitting"
    )
    constant_event_shrink_to: Beat = Field(
        default_factory=lambda: Beat.of(0, 1, 4),
        description="Constant events longer than this are shortened to it",
    )

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("constant_event_shrink_to", mode="before")
    @classmethod
    def validate_shrink_to(cls, v: Any) -> Beat:
        beat = _parse_beat(v)
        if beat <= Beat.ZERO:
            raise ValueError("constant_event_shrink_to must be positive")
        return beat

    @field_serializer("constant_event_shrink_to")
    def serialize_shrink_to(self, beat: Beat) -> str:
        return str(beat)


class OfficialOutputOptions(BaseModel):
    """How official charts are exported."""

    minimum_beat: Beat = Field(
        default_factory=lambda: Beat.of(0, 1, 32),
        description="Slice length used when cutting eased move events",
    )

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("minimum_beat", mode="before")
    @classmethod
    def validate_minimum_beat(cls, v: Any) -> Beat:
        beat = _parse_beat(v)
        if beat <= Beat.ZERO:
            raise ValueError("minimum_beat must be positive")
        return beat

    @field_serializer("minimum_beat")
    def serialize_minimum_beat(self, beat: Beat) -> str:
        return str(beat)
