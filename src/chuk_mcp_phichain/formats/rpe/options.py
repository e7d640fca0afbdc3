"""Options for reading RPE charts."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RpeInputOptions(BaseModel):
    """How RPE charts are imported."""

    remove_fake_notes: bool = Field(False, description="Drop notes marked isFake instead of keeping them as real notes")
    remove_ui_controls: bool = Field(False, description="Drop lines with a non-empty attachUI")

    model_config = {"frozen": True}
