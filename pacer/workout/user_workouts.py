"""User-defined workout files stored locally."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pacer.workout.compiler import compile_workout
from pacer.workout.model import WorkoutPlan
from pacer.workout.pace import ParseError
from pacer.workout.parser import WorkoutParseError, load_workout

logger = logging.getLogger(__name__)


def default_workouts_dir() -> Path:
    return Path.home() / ".pacer" / "workouts"


@dataclass(frozen=True)
class WorkoutEntry:
    key: str
    path: Path
    plan: WorkoutPlan | None = None
    error: str | None = None

    @property
    def name(self) -> str:
        return self.plan.name if self.plan is not None else self.key


def load_workout_plan(path: str | Path) -> WorkoutPlan:
    return compile_workout(load_workout(path))


def list_workouts(base_dir: Path | None = None) -> list[WorkoutEntry]:
    """Compile every ``*.json`` workout in ``base_dir``.

    A file that fails to read, parse or compile is reported on its own entry
    and does not stop the listing.
    """
    root = base_dir or default_workouts_dir()
    if not root.exists():
        return []
    out: list[WorkoutEntry] = []
    for file in sorted(root.glob("*.json")):
        try:
            plan = load_workout_plan(file)
        except (OSError, UnicodeDecodeError, WorkoutParseError, ParseError) as exc:
            logger.warning("Skipping workout %s: %s", file.name, exc)
            out.append(WorkoutEntry(key=file.stem, path=file, error=str(exc)))
            continue
        out.append(WorkoutEntry(key=file.stem, path=file, plan=plan))
    return out
