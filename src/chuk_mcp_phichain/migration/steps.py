"""
Schema migration steps.

Each step takes a chart document of format N and returns a new document of
format N + 1. Steps work on plain JSON data and never modify their input.

    0 -> 1  lines become {"notes", "events"} objects
    1 -> 2  lines get a name
    2 -> 3  snake_case enums, events hold a transition value
    3 -> 4  lines get children
    4 -> 5  lines get curve note tracks
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable
from typing import Any

from chuk_mcp_phichain.constants import DEFAULT_LINE_NAME
from chuk_mcp_phichain.errors import MigrationError

Document = dict[str, Any]
MigrationStep = Callable[[Document], Document]

_PASCAL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    """EaseInOutSine -> ease_in_out_sine"""
    return _PASCAL_BOUNDARY.sub("_", name).lower()


def _lines(chart: Document, step: str) -> list[Any]:
    lines = chart.get("lines")
    if not isinstance(lines, list):
        raise MigrationError(step, "`lines` is not an array")
    return lines


def _line_objects(chart: Document, step: str) -> list[dict[str, Any]]:
    lines = _lines(chart, step)
    for i, line in enumerate(lines):
        if not isinstance(line, dict):
            raise MigrationError(step, f"lines[{i}] is not an object")
    return lines


def _array(line: dict[str, Any], key: str, step: str, where: str) -> list[Any]:
    value = line.get(key)
    if not isinstance(value, list):
        raise MigrationError(step, f"{where}.{key} is not an array")
    return value


def migrate_0_to_1(old: Document) -> Document:
    """Lines stored as [notes, events] pairs become objects."""
    step = "0 -> 1"
    chart = copy.deepcopy(old)
    lines = _lines(chart, step)
    for i, line in enumerate(lines):
        if not isinstance(line, list):
            raise MigrationError(step, f"lines[{i}] is not an array")
        if len(line) != 2:
            raise MigrationError(step, f"lines[{i}] should have 2 elements")
        lines[i] = {"notes": line[0], "events": line[1]}
    chart["format"] = 1
    return chart


def migrate_1_to_2(old: Document) -> Document:
    """Every line is named 'Unnamed Line'."""
    chart = copy.deepcopy(old)
    for line in _line_objects(chart, "1 -> 2"):
        line["name"] = DEFAULT_LINE_NAME
    chart["format"] = 2
    return chart


def _migrate_easing(easing: Any, step: str, where: str) -> Any:
    if isinstance(easing, str):
        return snake_case(easing)
    if isinstance(easing, dict):
        # {"Custom": [x1, y1, x2, y2]} -> {"custom": [...]}
        return {snake_case(key): value for key, value in easing.items()}
    raise MigrationError(step, f"{where}.easing: expected an object or a string, got {easing!r}")


def _migrate_note_kind(kind: Any, step: str, where: str) -> Any:
    if isinstance(kind, str):
        return snake_case(kind)
    if isinstance(kind, dict) and isinstance(kind.get("Hold"), dict):
        return {"hold": {"hold_beat": kind["Hold"].get("hold_beat")}}
    raise MigrationError(step, f"{where}.kind: expected an object or a string, got {kind!r}")


def migrate_2_to_3(old: Document) -> Document:
    """
    Enum variants become snake_case and every event becomes a transition.

    {"kind": "X", "start": 0, "end": 1, "easing": "EaseInSine", ...}
    becomes
    {"kind": "x", "value": {"transition": {"start": 0, "end": 1, "easing": "ease_in_sine"}}, ...}
    """
    step = "2 -> 3"
    chart = copy.deepcopy(old)
    for i, line in enumerate(_line_objects(chart, step)):
        for j, event in enumerate(_array(line, "events", step, f"lines[{i}]")):
            where = f"lines[{i}].events[{j}]"
            if not isinstance(event, dict):
                raise MigrationError(step, f"{where} is not an object")
            if not isinstance(event.get("kind"), str):
                raise MigrationError(step, f"{where}.kind is not a string")
            event["kind"] = snake_case(event["kind"])
            event["value"] = {
                "transition": {
                    "start": event.pop("start", None),
                    "end": event.pop("end", None),
                    "easing": _migrate_easing(event.pop("easing", None), step, where),
                }
            }
        for j, note in enumerate(_array(line, "notes", step, f"lines[{i}]")):
            where = f"lines[{i}].notes[{j}]"
            if not isinstance(note, dict):
                raise MigrationError(step, f"{where} is not an object")
            note["kind"] = _migrate_note_kind(note.get("kind"), step, where)
    chart["format"] = 3
    return chart


def migrate_3_to_4(old: Document) -> Document:
    """Lines get an empty children array."""
    chart = copy.deepcopy(old)
    for line in _line_objects(chart, "3 -> 4"):
        line["children"] = []
    chart["format"] = 4
    return chart


def migrate_4_to_5(old: Document) -> Document:
    """Lines get an empty curve_note_tracks array."""
    chart = copy.deepcopy(old)
    for line in _line_objects(chart, "4 -> 5"):
        line["curve_note_tracks"] = []
    chart["format"] = 5
    return chart


# Source format -> step producing the next format
MIGRATIONS: dict[int, MigrationStep] = {
    0: migrate_0_to_1,
    1: migrate_1_to_2,
    2: migrate_2_to_3,
    3: migrate_3_to_4,
    4: migrate_4_to_5,
}
