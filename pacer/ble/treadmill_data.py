"""Decoder for the FTMS Treadmill Data characteristic (0x2ACD)."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Callable, Optional

from pacer.ble.constants import parse_treadmill_flags

MIN_PAYLOAD_SIZE = 4


class NotEnoughData(ValueError):
    """Raised when a Treadmill Data payload is shorter than its flags declare."""


@dataclass(frozen=True)
class TreadmillData:
    speed: int
    average_speed: Optional[int] = None
    total_distance: Optional[int] = None
    inclination: Optional[int] = None
    ramp_angle: Optional[int] = None
    positive_elevation: Optional[int] = None
    negative_elevation: Optional[int] = None
    instantaneous_pace: Optional[int] = None
    average_pace: Optional[int] = None
    total_energy: Optional[int] = None
    energy_per_hour: Optional[int] = None
    energy_per_minute: Optional[int] = None
    heart_rate: Optional[int] = None
    metabolic_equivalent: Optional[int] = None
    elapsed_time: Optional[int] = None
    remaining_time: Optional[int] = None
    force_on_belt: Optional[int] = None
    power_output: Optional[int] = None

    @property
    def speed_kmh(self) -> float:
        return self.speed / 100.0

    @property
    def average_speed_kmh(self) -> Optional[float]:
        if self.average_speed is None:
            return None
        return self.average_speed / 100.0

    @property
    def inclination_percent(self) -> Optional[float]:
        if self.inclination is None:
            return None
        return self.inclination / 10.0

    @property
    def ramp_angle_degrees(self) -> Optional[float]:
        if self.ramp_angle is None:
            return None
        return self.ramp_angle / 10.0


Decoder = Callable[[bytes], tuple[int, ...]]


def _unpack(fmt: str) -> Decoder:
    def _decode(chunk: bytes) -> tuple[int, ...]:
        return struct.unpack(fmt, chunk)

    return _decode


def _decode_uint24(chunk: bytes) -> tuple[int, ...]:
    # Low three bytes of a little-endian u32 whose high byte is zero.
    return struct.unpack("<I", chunk + b"\x00")


@dataclass(frozen=True)
class _FieldGroup:
    flag: str
    fields: tuple[str, ...]
    size: int
    decode: Decoder


# Wire order of the optional groups. Do not reorder.
_FIELD_GROUPS: tuple[_FieldGroup, ...] = (
    _FieldGroup("average_speed", ("average_speed",), 2, _unpack("<H")),
    _FieldGroup("total_distance", ("total_distance",), 3, _decode_uint24),
    _FieldGroup(
        "inclination_and_ramp_angle", ("inclination", "ramp_angle"), 4, _unpack("<hh")
    ),
    _FieldGroup(
        "elevation_gain",
        ("positive_elevation", "negative_elevation"),
        4,
        _unpack("<HH"),
    ),
    _FieldGroup("instantaneous_pace", ("instantaneous_pace",), 2, _unpack("<H")),
    _FieldGroup("average_pace", ("average_pace",), 2, _unpack("<H")),
    _FieldGroup(
        "energy",
        ("total_energy", "energy_per_hour", "energy_per_minute"),
        5,
        _unpack("<HHB"),
    ),
    _FieldGroup("heart_rate", ("heart_rate",), 1, _unpack("<B")),
    _FieldGroup("metabolic_equivalent", ("metabolic_equivalent",), 1, _unpack("<B")),
    _FieldGroup("elapsed_time", ("elapsed_time",), 2, _unpack("<H")),
    _FieldGroup("remaining_time", ("remaining_time",), 2, _unpack("<H")),
    _FieldGroup(
        "force_on_belt_and_power_output",
        ("force_on_belt", "power_output"),
        4,
        _unpack("<hh"),
    ),
)


def _require_bytes(data: bytes, cursor: int, size: int, group: str) -> None:
    if cursor + size > len(data):
        raise NotEnoughData(
            f"Invalid Treadmill Data payload: expected {size} bytes for "
            f"{group} at offset {cursor}, got {len(data) - cursor}"
        )


def decode_treadmill_data(payload: bytes | bytearray) -> TreadmillData:
    """Parse an FTMS Treadmill Data characteristic payload (0x2ACD).

    Instantaneous speed is always read at offset 2. Each optional group is
    present only when its flag bit is set and is consumed in wire order.
    The whole payload is rejected with ``NotEnoughData`` if any declared
    group is truncated; trailing bytes after the last group are ignored.
    """
    data = bytes(payload)
    if len(data) < MIN_PAYLOAD_SIZE:
        raise NotEnoughData(
            f"Treadmill Data payload too short: {len(data)} bytes, "
            f"need at least {MIN_PAYLOAD_SIZE}"
        )

    raw_flags, speed = struct.unpack_from("<HH", data, 0)
    flags = parse_treadmill_flags(raw_flags)
    cursor = MIN_PAYLOAD_SIZE
    values: dict[str, int] = {}

    for group in _FIELD_GROUPS:
        if not getattr(flags, group.flag):
            continue
        _require_bytes(data, cursor, group.size, group.flag)
        chunk = data[cursor : cursor + group.size]
        values.update(zip(group.fields, group.decode(chunk)))
        cursor += group.size

    return TreadmillData(speed=speed, **values)
