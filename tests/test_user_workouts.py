from __future__ import annotations

import json
from pathlib import Path

from pacer.workout.user_workouts import list_workouts, load_workout_plan


def _write_workout(
    path: Path, duration: str = "1:00", pace: dict | None = None
) -> None:
    payload = {
        "name": "Threshold",
        "description": "4 x 1 min",
        "steps": [
            {
                "type": "repeat",
                "times": 4,
                "steps": [
                    {
                        "type": "run",
                        "name": "Hard",
                        "duration": duration,
                        "pace": pace or {"unit": "min/mi", "value": "8:00"},
                        "angle": 0,
                    }
                ],
            }
        ],
    }
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_load_workout_plan(tmp_path: Path) -> None:
    workout_file = tmp_path / "threshold.json"
    _write_workout(workout_file)

    plan = load_workout_plan(workout_file)

    assert plan.name == "Threshold"
    assert len(plan.steps) == 4
    assert plan.duration == 240
    assert plan.distance == 288


def test_list_workouts_reports_broken_files_without_stopping(tmp_path: Path) -> None:
    _write_workout(tmp_path / "a_good.json")
    (tmp_path / "b_broken.json").write_text("{", encoding="utf-8")
    _write_workout(tmp_path / "c_bad_duration.json", duration="1:xx")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    entries = list_workouts(base_dir=tmp_path)

    assert [entry.key for entry in entries] == ["a_good", "b_broken", "c_bad_duration"]
    assert entries[0].plan is not None
    assert entries[0].name == "Threshold"
    assert entries[0].error is None

    assert entries[1].plan is None
    assert "Invalid JSON" in (entries[1].error or "")
    assert entries[1].name == "b_broken"

    assert entries[2].plan is None
    assert "steps[0].steps[0]" in (entries[2].error or "")


def test_list_workouts_missing_directory(tmp_path: Path) -> None:
    assert list_workouts(base_dir=tmp_path / "missing") == []


def test_list_workouts_keeps_going_past_oversized_speed(tmp_path: Path) -> None:
    huge = {"unit": "mph", "value": "1e999999"}
    _write_workout(tmp_path / "a_huge.json", pace=huge)
    _write_workout(tmp_path / "b_good.json")

    entries = list_workouts(base_dir=tmp_path)

    assert [entry.key for entry in entries] == ["a_huge", "b_good"]
    assert entries[0].plan is None
    assert "'1e999999'" in (entries[0].error or "")
    assert entries[1].plan is not None
