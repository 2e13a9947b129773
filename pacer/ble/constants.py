"""FTMS constants and flag helpers for BLE Fitness Machine Service treadmills."""

from __future__ import annotations

from dataclasses import dataclass

FTMS_SERVICE_UUID = "00001826-0000-1000-8000-00805f9b34fb"
TREADMILL_DATA_CHAR_UUID = "00002acd-0000-1000-8000-00805f9b34fb"
FITNESS_MACHINE_CONTROL_POINT_CHAR_UUID = "00002ad9-0000-1000-8000-00805f9b34fb"

# Fitness Machine Control Point opcodes (FTMS)
OP_REQUEST_CONTROL = 0x00
OP_RESET = 0x01
OP_SET_TARGET_SPEED = 0x02
OP_SET_TARGET_INCLINATION = 0x03
OP_START_RESUME = 0x07
OP_STOP_PAUSE = 0x08
OP_SET_TARGETED_DISTANCE = 0x0C
OP_SET_TARGETED_TRAINING_TIME = 0x0D

# Treadmill Data flags (little-endian u16 at offset 0)
FLAG_MORE_DATA = 1 << 0
FLAG_AVERAGE_SPEED_PRESENT = 1 << 1
FLAG_TOTAL_DISTANCE_PRESENT = 1 << 2
FLAG_INCLINATION_AND_RAMP_ANGLE_PRESENT = 1 << 3
FLAG_ELEVATION_GAIN_PRESENT = 1 << 4
FLAG_INSTANTANEOUS_PACE_PRESENT = 1 << 5
FLAG_AVERAGE_PACE_PRESENT = 1 << 6
FLAG_EXPENDED_ENERGY_PRESENT = 1 << 7
FLAG_HEART_RATE_PRESENT = 1 << 8
FLAG_METABOLIC_EQUIVALENT_PRESENT = 1 << 9
FLAG_ELAPSED_TIME_PRESENT = 1 << 10
FLAG_REMAINING_TIME_PRESENT = 1 << 11
FLAG_FORCE_ON_BELT_AND_POWER_OUTPUT_PRESENT = 1 << 12


@dataclass(frozen=True)
class TreadmillDataFlags:
    more_data: bool
    average_speed: bool
    total_distance: bool
    inclination_and_ramp_angle: bool
    elevation_gain: bool
    instantaneous_pace: bool
    average_pace: bool
    energy: bool
    heart_rate: bool
    metabolic_equivalent: bool
    elapsed_time: bool
    remaining_time: bool
    force_on_belt_and_power_output: bool


def parse_treadmill_flags(raw_flags: int) -> TreadmillDataFlags:
    """Decode FTMS Treadmill Data flags into a typed structure."""
    return TreadmillDataFlags(
        more_data=bool(raw_flags & FLAG_MORE_DATA),
        average_speed=bool(raw_flags & FLAG_AVERAGE_SPEED_PRESENT),
        total_distance=bool(raw_flags & FLAG_TOTAL_DISTANCE_PRESENT),
        inclination_and_ramp_angle=bool(
            raw_flags & FLAG_INCLINATION_AND_RAMP_ANGLE_PRESENT
        ),
        elevation_gain=bool(raw_flags & FLAG_ELEVATION_GAIN_PRESENT),
        instantaneous_pace=bool(raw_flags & FLAG_INSTANTANEOUS_PACE_PRESENT),
        average_pace=bool(raw_flags & FLAG_AVERAGE_PACE_PRESENT),
        energy=bool(raw_flags & FLAG_EXPENDED_ENERGY_PRESENT),
        heart_rate=bool(raw_flags & FLAG_HEART_RATE_PRESENT),
        metabolic_equivalent=bool(raw_flags & FLAG_METABOLIC_EQUIVALENT_PRESENT),
        elapsed_time=bool(raw_flags & FLAG_ELAPSED_TIME_PRESENT),
        remaining_time=bool(raw_flags & FLAG_REMAINING_TIME_PRESENT),
        force_on_belt_and_power_output=bool(
            raw_flags & FLAG_FORCE_ON_BELT_AND_POWER_OUTPUT_PRESENT
        ),
    )
