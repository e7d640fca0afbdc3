"""
Conversion settings - every option model in one YAML file.

A settings file looks like:

    official_input:
      easing_fitting: true
      easing_fitting_epsilon: 0.1
      constant_event_shrink_to: 1/4
    official_output:
      minimum_beat: 1/32
    rpe_input:
      remove_fake_notes: false
    common_output:
      round: 2
    compile:
      reuse_lines: true

Sections and fields that are left out keep their defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from chuk_mcp_phichain.compiler.pipeline import CompileOptions
from chuk_mcp_phichain.constants import FormatName
from chuk_mcp_phichain.formats.base import CommonOutputOptions, validate_document
from chuk_mcp_phichain.formats.official.options import OfficialInputOptions, OfficialOutputOptions
from chuk_mcp_phichain.formats.rpe.options import RpeInputOptions

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "phichain.yaml"


class ConversionSettings(BaseModel):
    """All options used when converting or compiling charts."""

    official_input: OfficialInputOptions = Field(default_factory=OfficialInputOptions)
    official_output: OfficialOutputOptions = Field(default_factory=OfficialOutputOptions)
    rpe_input: RpeInputOptions = Field(default_factory=RpeInputOptions)
    common_output: CommonOutputOptions = Field(default_factory=CommonOutputOptions)
    compile: CompileOptions = Field(default_factory=CompileOptions)

    model_config = {"frozen": True}

    def input_options(self, source: FormatName | str) -> BaseModel | None:
        """Options for reading a document of the given format."""
        source = FormatName(source)
        if source == FormatName.OFFICIAL:
            return self.official_input
        if source == FormatName.RPE:
            return self.rpe_input
        return None

    def output_options(self, target: FormatName | str) -> BaseModel | None:
        """Options for writing a document of the given format."""
        target = FormatName(target)
        if target == FormatName.OFFICIAL:
            return self.official_output
        if target == FormatName.PRIMITIVE:
            return self.compile
        return None

    def to_yaml_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any] | None) -> ConversionSettings:
        return validate_document(cls, data or {})


def load_settings(path: Path | str | None) -> ConversionSettings:
    """
    Load settings from a YAML file.

    Args:
        path: Settings file; None or a missing file gives the defaults

    Returns:
        The validated settings

    Raises:
        ChartFormatError: If a field has an invalid value
    """
    if path is None:
        return ConversionSettings()

    path = Path(path)
    if not path.exists():
        logger.debug("No settings file at %s, using defaults", path)
        return ConversionSettings()

    with open(path) as f:
        data = yaml.safe_load(f)

    settings = ConversionSettings.from_yaml_dict(data)
    logger.info("Loaded settings from %s", path)
    return settings


def dump_settings(settings: ConversionSettings, path: Path | str) -> Path:
    """Write settings to a YAML file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(settings.to_yaml_dict(), f, default_flow_style=False, sort_keys=False)
    return path
