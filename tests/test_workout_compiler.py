from __future__ import annotations

import pytest

from pacer.workout.compiler import compile_step, compile_workout
from pacer.workout.model import (
    PaceSpec,
    PaceUnit,
    RepeatSpec,
    RunSpec,
    WorkoutSpec,
    WorkoutStep,
)
from pacer.workout.pace import ParseError

EIGHT_MIN_MILE = PaceSpec(PaceUnit.MIN_PER_MILE, "8:00")


def _run(
    name: str, duration: str, pace: PaceSpec = EIGHT_MIN_MILE, angle: int = 0
) -> RunSpec:
    return RunSpec(name=name, duration=duration, pace=pace, angle=angle)


def test_compile_run_derives_distance() -> None:
    steps = compile_step(_run("Easy", "1:00", angle=15))

    # 1207 * 60 // 1000
    assert steps == [
        WorkoutStep(name="Easy", duration=60, distance=72, pace=1207, angle=15)
    ]


def test_compile_repeat_expands_identical_steps() -> None:
    spec = WorkoutSpec(
        name="Repeats",
        description="3 x 1 min",
        steps=(RepeatSpec(times=3, steps=(_run("Interval", "1:00"),)),),
    )

    plan = compile_workout(spec)

    assert len(plan.steps) == 3
    assert plan.steps[0] == plan.steps[1] == plan.steps[2]
    assert plan.duration == 180
    assert plan.distance == 3 * plan.steps[0].distance == 216


def test_plan_distance_sums_truncated_step_distances() -> None:
    # Each step is 66.385 units, truncated to 66 before summing.
    spec = WorkoutSpec(
        name="Truncation",
        description="",
        steps=(RepeatSpec(times=3, steps=(_run("Short", "0:55"),)),),
    )

    plan = compile_workout(spec)

    assert plan.steps[0].distance == 66
    assert plan.distance == 198


def test_compile_nested_repeats_preserve_order() -> None:
    spec = RepeatSpec(
        times=2,
        steps=(
            _run("A", "2:00"),
            RepeatSpec(times=2, steps=(_run("B", "0:30"),)),
        ),
    )

    names = [step.name for step in compile_step(spec)]

    assert names == ["A", "B", "B", "A", "B", "B"]


def test_compile_repeat_zero_times_is_empty() -> None:
    assert compile_step(RepeatSpec(times=0, steps=(_run("A", "1:00"),))) == []


def test_compile_workout_mixed_units() -> None:
    spec = WorkoutSpec(
        name="Mixed",
        description="warmup then tempo",
        steps=(
            _run("Warmup", "5:00", PaceSpec(PaceUnit.KPH, "8")),
            _run("Tempo", "10:00", PaceSpec(PaceUnit.MIN_PER_KM, "5:00"), angle=10),
        ),
    )

    plan = compile_workout(spec)

    assert plan.name == "Mixed"
    assert plan.description == "warmup then tempo"
    assert [step.pace for step in plan.steps] == [800, 1200]
    assert [step.distance for step in plan.steps] == [240, 720]
    assert plan.duration == 900
    assert plan.distance == 960


def test_compile_error_names_offending_step() -> None:
    spec = WorkoutSpec(
        name="Broken",
        description="",
        steps=(
            _run("Fine", "1:00"),
            RepeatSpec(times=2, steps=(_run("Bad", "x:00"),)),
        ),
    )

    with pytest.raises(ParseError, match=r"steps\[1\]\.steps\[0\] \(Bad\)"):
        compile_workout(spec)


def test_compile_step_rejects_unknown_node() -> None:
    with pytest.raises(TypeError):
        compile_step("run")  # type: ignore[arg-type]
