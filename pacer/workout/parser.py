"""Workout file parser (JSON)."""

from __future__ import annotations

import json
from pathlib import Path

from pacer.workout.model import (
    PaceSpec,
    PaceUnit,
    RepeatSpec,
    RunSpec,
    StepSpec,
    WorkoutSpec,
)

MAX_REPEAT_TIMES = 0xFF
INT16_MIN = -0x8000
INT16_MAX = 0x7FFF


class WorkoutParseError(ValueError):
    """Raised when a workout file is invalid."""


def load_workout(path: str | Path) -> WorkoutSpec:
    file_path = Path(path)
    if file_path.suffix.lower() != ".json":
        raise WorkoutParseError(
            f"Unsupported workout format '{file_path.suffix}'. Use .json"
        )
    return loads_workout(file_path.read_text(encoding="utf-8"))


def loads_workout(text: str) -> WorkoutSpec:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise WorkoutParseError(f"Invalid JSON: {exc}") from exc
    return parse_workout(data)


def parse_workout(data: object) -> WorkoutSpec:
    if not isinstance(data, dict):
        raise WorkoutParseError("Workout JSON must be an object")

    name = _require_str(data, "name", "Workout")
    description = _require_str(data, "description", "Workout")
    steps = _parse_steps(data.get("steps"), "steps")
    if not steps:
        raise WorkoutParseError("Workout must contain at least one step")

    return WorkoutSpec(name=name, description=description, steps=steps)


def _parse_steps(raw: object, path: str) -> tuple[StepSpec, ...]:
    if not isinstance(raw, list):
        raise WorkoutParseError(f"{path}: must be an array")
    return tuple(_parse_step(item, f"{path}[{i}]") for i, item in enumerate(raw))


def _parse_step(raw: object, path: str) -> StepSpec:
    if not isinstance(raw, dict):
        raise WorkoutParseError(f"{path}: must be an object")

    step_type = raw.get("type")
    if step_type == "repeat":
        times = _require_int(raw, "times", path, 0, MAX_REPEAT_TIMES)
        steps = _parse_steps(raw.get("steps"), f"{path}.steps")
        return RepeatSpec(times=times, steps=steps)
    if step_type == "run":
        return RunSpec(
            name=_require_str(raw, "name", path),
            duration=_require_str(raw, "duration", path),
            pace=_parse_pace(raw.get("pace"), f"{path}.pace"),
            angle=_require_int(raw, "angle", path, INT16_MIN, INT16_MAX),
        )
    raise WorkoutParseError(
        f"{path}: unknown step type {step_type!r}, expected 'repeat' or 'run'"
    )


def _parse_pace(raw: object, path: str) -> PaceSpec:
    if not isinstance(raw, dict):
        raise WorkoutParseError(f"{path}: must be an object")
    unit_obj = raw.get("unit")
    try:
        unit = PaceUnit(unit_obj)
    except ValueError as exc:
        allowed = ", ".join(repr(u.value) for u in PaceUnit)
        raise WorkoutParseError(
            f"{path}: unknown unit {unit_obj!r}, expected one of {allowed}"
        ) from exc
    return PaceSpec(unit=unit, value=_require_str(raw, "value", path))


def _require_str(raw: dict, field_name: str, path: str) -> str:
    value = raw.get(field_name)
    if not isinstance(value, str):
        raise WorkoutParseError(f"{path}: field '{field_name}' must be a string")
    return value


def _require_int(raw: dict, field_name: str, path: str, low: int, high: int) -> int:
    value = raw.get(field_name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise WorkoutParseError(f"{path}: field '{field_name}' must be an integer")
    if value < low or value > high:
        raise WorkoutParseError(
            f"{path}: field '{field_name}' must be between {low} and {high}"
        )
    return value
