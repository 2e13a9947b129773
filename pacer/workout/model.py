"""Workout domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class PaceUnit(str, Enum):
    MPH = "mph"
    KPH = "kph"
    MIN_PER_MILE = "min/mi"
    MIN_PER_KM = "min/km"


@dataclass(frozen=True)
class PaceSpec:
    unit: PaceUnit
    value: str


@dataclass(frozen=True)
class RunSpec:
    name: str
    duration: str
    pace: PaceSpec
    angle: int


@dataclass(frozen=True)
class RepeatSpec:
    times: int
    steps: tuple[StepSpec, ...]


StepSpec = Union[RepeatSpec, RunSpec]


@dataclass(frozen=True)
class WorkoutSpec:
    name: str
    description: str
    steps: tuple[StepSpec, ...]


@dataclass(frozen=True)
class WorkoutStep:
    name: str
    duration: int
    # Same fixed-point scale as pace * seconds / 1000
    distance: int
    # km/h at 0.01 precision
    pace: int
    angle: int


@dataclass(frozen=True)
class WorkoutPlan:
    name: str
    description: str
    steps: tuple[WorkoutStep, ...]
    duration: int
    distance: int
