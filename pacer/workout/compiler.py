"""Expand a nested workout description into a flat, resolved plan."""

from __future__ import annotations

from pacer.workout.model import (
    RepeatSpec,
    RunSpec,
    StepSpec,
    WorkoutPlan,
    WorkoutSpec,
    WorkoutStep,
)
from pacer.workout.pace import ParseError, parse_duration, parse_pace


def _compile_run(spec: RunSpec, path: str) -> WorkoutStep:
    try:
        pace = parse_pace(spec.pace)
        duration = parse_duration(spec.duration)
    except ParseError as exc:
        raise ParseError(f"{path} ({spec.name}): {exc}") from exc

    return WorkoutStep(
        name=spec.name,
        duration=duration,
        # Truncated per step; plan totals sum these truncated values.
        distance=pace * duration // 1000,
        pace=pace,
        angle=spec.angle,
    )


def compile_step(spec: StepSpec, path: str = "step") -> list[WorkoutStep]:
    """Resolve one step tree into the ordered list of concrete steps.

    Children of a repeat are resolved once and the resulting sequence is
    repeated ``times`` times.
    """
    if isinstance(spec, RunSpec):
        return [_compile_run(spec, path)]
    if isinstance(spec, RepeatSpec):
        expanded: list[WorkoutStep] = []
        for i, child in enumerate(spec.steps):
            expanded.extend(compile_step(child, f"{path}.steps[{i}]"))
        return expanded * spec.times
    raise TypeError(f"Unsupported workout step: {spec!r}")


def compile_workout(spec: WorkoutSpec) -> WorkoutPlan:
    steps: list[WorkoutStep] = []
    for i, step in enumerate(spec.steps):
        steps.extend(compile_step(step, f"steps[{i}]"))

    return WorkoutPlan(
        name=spec.name,
        description=spec.description,
        steps=tuple(steps),
        duration=sum(step.duration for step in steps),
        distance=sum(step.distance for step in steps),
    )
