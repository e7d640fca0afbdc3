"""
Chart Validator - checks an authoring chart before compiling or exporting.

Validates:
- Events of one kind on a line do not overlap
- Events do not end before they start
- Hold notes have a positive length
- Curve note tracks point at existing notes
- The tempo map starts at beat 0 and has no duplicate beats
- Lines have events to be drawn with
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from chuk_mcp_phichain.compiler.helpers import check_overlap
from chuk_mcp_phichain.compiler.sequence import group_by_kind
from chuk_mcp_phichain.core.beat import Beat
from chuk_mcp_phichain.errors import OverlapError
from chuk_mcp_phichain.models.chart import Chart
from chuk_mcp_phichain.models.event import LineEventKind
from chuk_mcp_phichain.models.line import Line
from chuk_mcp_phichain.models.note import NoteKind


class ValidationSeverity(str, Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Compilation or export fails
    WARNING = "warning"  # Works, but probably not what was meant
    INFO = "info"  # Informational only


@dataclass
class ValidationIssue:
    """A single validation issue."""

    severity: ValidationSeverity
    code: str
    message: str
    location: str | None = None

    def __str__(self) -> str:
        prefix = f"[{self.severity.value.upper()}]"
        location = f" at {self.location}" if self.location else ""
        return f"{prefix} {self.code}: {self.message}{location}"

    def to_dict(self) -> dict[str, str | None]:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "location": self.location,
        }


class ValidationResult:
    """Result of validating a chart."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add_error(self, code: str, message: str, location: str | None = None) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.ERROR, code, message, location))

    def add_warning(self, code: str, message: str, location: str | None = None) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.WARNING, code, message, location))

    def add_info(self, code: str, message: str, location: str | None = None) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.INFO, code, message, location))

    @property
    def is_valid(self) -> bool:
        """Return True if no errors (warnings/info are OK)."""
        return not any(i.severity == ValidationSeverity.ERROR for i in self.issues)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def codes(self) -> list[str]:
        return [i.code for i in self.issues]

    def __bool__(self) -> bool:
        return self.is_valid

    def __str__(self) -> str:
        if not self.issues:
            return "Validation passed: no issues found"
        return "\n".join(str(issue) for issue in self.issues)


class ChartValidator:
    """Validates chart structure."""

    def validate(self, chart: Chart) -> ValidationResult:
        """
        Validate a chart.

        Args:
            chart: The chart to validate

        Returns:
            ValidationResult with any issues found
        """
        result = ValidationResult()

        self._validate_bpm_list(chart, result)

        if not chart.lines:
            result.add_warning("NO_LINES", "Chart has no lines", "lines")

        for i, line in enumerate(chart.lines):
            self._validate_line(line, str(i), result)

        return result

    def _validate_bpm_list(self, chart: Chart, result: ValidationResult) -> None:
        """Check the tempo map."""
        points = list(chart.bpm_list)
        if len(points) > 1:
            result.add_info(
                "BPM_CHANGES",
                f"Chart has {len(points) - 1} bpm change(s); official export flattens them",
                "bpm_list",
            )

    def _validate_line(self, line: Line, path: str, result: ValidationResult) -> None:
        """Check one line and, recursively, its children."""
        location = f"lines/{path}"

        if not line.events:
            result.add_warning("NO_EVENTS", f"Line '{line.name}' has no events", location)
        elif not any(e.kind == LineEventKind.OPACITY for e in line.events) and line.notes:
            result.add_info(
                "NO_OPACITY_EVENTS",
                f"Line '{line.name}' has no opacity events and is never drawn",
                location,
            )

        for i, event in enumerate(line.events):
            if event.end_beat < event.start_beat:
                result.add_error(
                    "INVALID_EVENT_RANGE",
                    f"Event ends at {event.end_beat} before it starts at {event.start_beat}",
                    f"{location}/events/{i}",
                )

        for kind, events in group_by_kind(line.events).items():
            try:
                check_overlap(events)
            except OverlapError as e:
                result.add_error(
                    "EVENT_OVERLAP",
                    f"{kind.value} events overlap at beat {e.beat}",
                    f"{location}/events",
                )

        for i, note in enumerate(line.notes):
            if note.kind == NoteKind.HOLD and note.hold_beat is not None and note.hold_beat <= Beat.ZERO:
                result.add_error(
                    "INVALID_HOLD",
                    f"Hold note has non-positive length {note.hold_beat}",
                    f"{location}/notes/{i}",
                )
            if note.beat < Beat.ZERO:
                result.add_warning(
                    "NEGATIVE_NOTE_BEAT",
                    f"Note is placed before the chart starts, at {note.beat}",
                    f"{location}/notes/{i}",
                )

        for i, track in enumerate(line.curve_note_tracks):
            missing = [idx for idx in (track.from_index, track.to_index) if not 0 <= idx < len(line.notes)]
            if missing:
                result.add_error(
                    "INVALID_CURVE_TRACK",
                    f"Curve note track refers to missing notes {missing}",
                    f"{location}/curve_note_tracks/{i}",
                )
            elif track.from_index == track.to_index:
                result.add_warning(
                    "EMPTY_CURVE_TRACK",
                    "Curve note track starts and ends on the same note",
                    f"{location}/curve_note_tracks/{i}",
                )

        for i, child in enumerate(line.children):
            self._validate_line(child, f"{path}/{i}", result)


def validate_chart(chart: Chart) -> ValidationResult:
    """
    Convenience function to validate a chart.

    Args:
        chart: The chart to validate

    Returns:
        ValidationResult
    """
    return ChartValidator().validate(chart)
