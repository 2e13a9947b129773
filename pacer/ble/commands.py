"""Fitness Machine Control Point commands for treadmills (0x2AD9)."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from pacer.ble.constants import (
    OP_REQUEST_CONTROL,
    OP_RESET,
    OP_SET_TARGET_INCLINATION,
    OP_SET_TARGET_SPEED,
    OP_SET_TARGETED_DISTANCE,
    OP_SET_TARGETED_TRAINING_TIME,
    OP_START_RESUME,
    OP_STOP_PAUSE,
)

UINT16_MAX = 0xFFFF
UINT24_MAX = 0xFFFFFF
INT16_MIN = -0x8000
INT16_MAX = 0x7FFF


class CommandValueError(ValueError):
    """Raised when a command parameter does not fit its wire field."""


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CommandValueError(f"{name} must be an integer, got {value!r}")
    if value < low or value > high:
        raise CommandValueError(f"{name}={value} out of range [{low}, {high}]")


@dataclass(frozen=True)
class RequestControl:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class SetTargetSpeed:
    """Target speed in 0.01 km/h."""

    speed: int

    def __post_init__(self) -> None:
        _check_range("speed", self.speed, 0, UINT16_MAX)


@dataclass(frozen=True)
class SetTargetInclination:
    """Target inclination in 0.1 %."""

    inclination: int

    def __post_init__(self) -> None:
        _check_range("inclination", self.inclination, INT16_MIN, INT16_MAX)


@dataclass(frozen=True)
class StartOrResume:
    pass


@dataclass(frozen=True)
class StopOrPause:
    pass


@dataclass(frozen=True)
class SetTargetedDistance:
    """Targeted distance in metres, a uint24 on the wire."""

    distance: int

    def __post_init__(self) -> None:
        _check_range("distance", self.distance, 0, UINT24_MAX)


@dataclass(frozen=True)
class SetTargetedTrainingTime:
    """Targeted training time in seconds."""

    seconds: int

    def __post_init__(self) -> None:
        _check_range("seconds", self.seconds, 0, UINT16_MAX)


Command = Union[
    RequestControl,
    Reset,
    SetTargetSpeed,
    SetTargetInclination,
    StartOrResume,
    StopOrPause,
    SetTargetedDistance,
    SetTargetedTrainingTime,
]


def encode_command(command: Command) -> bytes:
    """Serialize a control point command to the bytes written to 0x2AD9."""
    if isinstance(command, RequestControl):
        return bytes([OP_REQUEST_CONTROL])
    if isinstance(command, Reset):
        return bytes([OP_RESET])
    if isinstance(command, SetTargetSpeed):
        return bytes([OP_SET_TARGET_SPEED]) + struct.pack("<H", command.speed)
    if isinstance(command, SetTargetInclination):
        return bytes([OP_SET_TARGET_INCLINATION]) + struct.pack(
            "<h", command.inclination
        )
    if isinstance(command, StartOrResume):
        return bytes([OP_START_RESUME])
    if isinstance(command, StopOrPause):
        return bytes([OP_STOP_PAUSE])
    if isinstance(command, SetTargetedDistance):
        return bytes([OP_SET_TARGETED_DISTANCE]) + struct.pack(
            "<I", command.distance
        )[:3]
    if isinstance(command, SetTargetedTrainingTime):
        return bytes([OP_SET_TARGETED_TRAINING_TIME]) + struct.pack(
            "<H", command.seconds
        )
    raise TypeError(f"Unsupported control point command: {command!r}")
