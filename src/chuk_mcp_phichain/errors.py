"""
Exception hierarchy for the chart system.

Every error raised by the core derives from PhichainError so tools and the
CLI can report failures without catching unrelated exceptions.
"""

from __future__ import annotations

from typing import Any


class PhichainError(Exception):
    """Base class for chart errors."""


class ChartFormatError(PhichainError, ValueError):
    """A document does not have the expected structure."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{message} (at {path})" if path else message)


class EmptyBpmListError(PhichainError, ValueError):
    """A tempo map was built without any point."""


class EventSequenceError(PhichainError):
    """An event sequence violates a structural requirement."""


class OverlapError(EventSequenceError):
    """Two events of a sequence overlap."""

    def __init__(self, beat: Any):
        self.beat = beat
        super().__init__(f"the event sequence has overlap at {beat}")


class DifferentKindError(EventSequenceError):
    """Events of a sequence do not share a single kind."""

    def __init__(self) -> None:
        super().__init__("events in the event sequence do not share a single kind")


class MigrationError(PhichainError):
    """A migration step could not transform a document."""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"{step}: {message}")


class UnsupportedFormatError(MigrationError):
    """A document declares a format no migration can handle."""

    def __init__(self, version: int):
        self.version = version
        super().__init__("migrate", f"Unsupported chart format {version}")


class OfficialInputError(PhichainError, ValueError):
    """An official chart cannot be imported."""


class NoLineError(OfficialInputError):
    """An official chart has no judge line."""

    def __init__(self) -> None:
        super().__init__("expected at least one line")


class UnsupportedFormatVersionError(OfficialInputError):
    """An official chart declares a formatVersion other than 1 or 3."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"unsupported formatVersion, expected 1 or 3, got {version}")


class OfficialOutputError(PhichainError):
    """A line's events cannot be exported to the official format."""

    def __init__(self, line_name: str, kind: Any, cause: EventSequenceError):
        self.line_name = line_name
        self.kind = kind
        self.cause = cause
        kind_name = getattr(kind, "value", kind)
        super().__init__(f"event sequence error in line '{line_name}' for event kind {kind_name}: {cause}")
