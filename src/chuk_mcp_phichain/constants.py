"""
Constants and enums for the chart system.

No magic strings - use enums and Literal types for constrained values.
"""

from enum import Enum
from typing import Literal

# Canvas the chart coordinates live on. Origin is the centre of the canvas.
CANVAS_WIDTH = 1350.0
CANVAS_HEIGHT = 900.0

# Resolution used when sampling or slicing event tracks (beats)
MINIMUM_BEAT_DENOMINATOR = 32

# Tolerances
EVENT_VALUE_EPSILON = 1e-4
DEFAULT_EASING_FITTING_EPSILON = 1e-1

# Line defaults
DEFAULT_LINE_NAME = "Unnamed Line"
DEFAULT_OPACITY = 255.0
DEFAULT_SPEED = 10.0
DEFAULT_BPM = 120.0

# A speed of 1 moves a note 120 canvas units per second
SPEED_UNIT_PER_SECOND = 120.0

# Curve note track defaults
DEFAULT_CURVE_DENSITY = 16


class FormatName(str, Enum):
    """Chart formats the converter understands."""

    PHICHAIN = "phichain"  # Authoring chart (tree of lines)
    PRIMITIVE = "primitive"  # Flat playback chart
    OFFICIAL = "official"  # Phigros official JSON
    RPE = "rpe"  # Re:PhiEdit JSON


# Chart files in a chart store
CHART_FILE_SUFFIX = ".chart.json"

# Boundary mode when evaluating a single event at a beat
BoundaryMode = Literal["inclusive", "exclusive"]


class ErrorMessages:
    """Standardized error messages."""

    CHART_NOT_FOUND = "Chart '{name}' not found."
    LINE_NOT_FOUND = "Line index {index} out of range."
    NOTE_NOT_FOUND = "Note index {index} out of range."
    UNKNOWN_FORMAT = "Unknown chart format: '{format}'. Expected one of: {choices}."
    EMPTY_BPM_LIST = "A bpm list needs at least one point."
    INVALID_BPM = "Invalid bpm: {bpm}. Must be positive."
    BPM_NOT_AT_ZERO = "The first bpm point must be at beat 0, got {beat}."
    DUPLICATE_BPM_POINT = "Two bpm points at beat {beat}."
    INVALID_BEAT = "Invalid beat: '{beat}'. Expected forms like '1', '3/4' or '1+1/4'."


class SuccessMessages:
    """Standardized success messages."""

    CHART_CREATED = "Created chart '{name}'."
    CHART_COMPILED = "Compiled chart '{name}' to {path}."
    CHART_CONVERTED = "Converted '{source}' ({input}) to {path} ({output})."
    LINE_ADDED = "Added line '{line}' at index {index}."


# Schema versions
CURRENT_FORMAT = 5  # Authoring chart
PRIMITIVE_FORMAT = 1  # Flat playback chart
