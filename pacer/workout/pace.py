"""Duration and pace parsing for workout steps.

Speeds are fixed-point integers in hundredths of km/h, the same unit the
treadmill control point uses for Set Target Speed.
"""

from __future__ import annotations

import math
from decimal import Decimal

from pacer.workout.model import PaceSpec, PaceUnit

KM_PER_MILE = 1.60934
SECONDS_PER_HOUR = 3600
UINT16_MAX = 0xFFFF


class ParseError(ValueError):
    """Raised when a duration or pace value in a workout step is malformed."""


def _parse_component(part: str, text: str) -> int:
    if not part.isascii() or not part.isdigit():
        raise ParseError(f"invalid duration {text!r}: {part!r} is not a number")
    return int(part)


def parse_duration(text: str) -> int:
    """Parse ``MM:SS`` into seconds.

    A missing seconds component defaults to zero, so ``"5"`` is five
    minutes. Components after the second are ignored.
    """
    parts = text.split(":")
    minutes = _parse_component(parts[0], text)
    seconds = _parse_component(parts[1], text) if len(parts) > 1 else 0
    total = minutes * 60 + seconds
    if total > UINT16_MAX:
        raise ParseError(f"invalid duration {text!r}: {total}s exceeds {UINT16_MAX}s")
    return total


def _pace_seconds(spec: PaceSpec) -> int:
    seconds = parse_duration(spec.value)
    if seconds == 0:
        raise ParseError(f"invalid pace {spec.value!r} {spec.unit.value}: zero time")
    return seconds


def _parse_decimal_speed(spec: PaceSpec) -> Decimal:
    text = spec.value
    integral, point, fraction = text.partition(".")
    parts = (integral, fraction) if point else (integral,)
    if not all(part.isascii() and part.isdigit() for part in parts):
        raise ParseError(
            f"invalid pace {text!r} {spec.unit.value}: "
            "must be a non-negative decimal number"
        )
    return Decimal(text)


def _scale_speed(spec: PaceSpec, factor: Decimal) -> int:
    try:
        return math.floor(_parse_decimal_speed(spec) * factor * 100)
    except ArithmeticError as exc:
        raise ParseError(
            f"invalid pace {spec.value!r} {spec.unit.value}: out of range"
        ) from exc


def parse_pace(spec: PaceSpec) -> int:
    """Convert a pace specification to speed in hundredths of km/h."""
    if spec.unit is PaceUnit.MIN_PER_MILE:
        seconds = _pace_seconds(spec)
        speed = math.floor(SECONDS_PER_HOUR / seconds * KM_PER_MILE * 100)
    elif spec.unit is PaceUnit.MIN_PER_KM:
        seconds = _pace_seconds(spec)
        speed = math.floor(SECONDS_PER_HOUR / seconds * 100)
    elif spec.unit is PaceUnit.KPH:
        speed = _scale_speed(spec, Decimal(1))
    elif spec.unit is PaceUnit.MPH:
        speed = _scale_speed(spec, Decimal(str(KM_PER_MILE)))
    else:
        raise TypeError(f"Unsupported pace unit: {spec.unit!r}")

    if speed > UINT16_MAX:
        raise ParseError(
            f"invalid pace {spec.value!r} {spec.unit.value}: "
            f"{speed} exceeds {UINT16_MAX} hundredths of km/h"
        )
    return speed
