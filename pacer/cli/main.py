"""Terminal CLI entrypoint for pacer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pacer.ble.commands import SetTargetSpeed
from pacer.ble.ftms_client import CONTROL_DELAY_SEC, TreadmillClient
from pacer.core.engine import TreadmillEngine
from pacer.workout.model import WorkoutPlan
from pacer.workout.pace import ParseError
from pacer.workout.parser import WorkoutParseError
from pacer.workout.user_workouts import (
    default_workouts_dir,
    list_workouts,
    load_workout_plan,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="FTMS treadmill telemetry and workouts")
    parser.add_argument("--scan", action="store_true", help="Scan BLE devices")
    parser.add_argument(
        "--connect",
        nargs="?",
        const="auto",
        default=None,
        help="Connect to first FTMS treadmill or the provided BLE address/name",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=None,
        help="Take control and start the belt at this speed in km/h",
    )
    parser.add_argument(
        "--control-delay",
        type=float,
        default=CONTROL_DELAY_SEC,
        help="Seconds to wait after requesting control before starting the belt",
    )
    parser.add_argument(
        "--workout",
        type=Path,
        default=None,
        help="Compile a workout JSON file and print the resolved steps",
    )
    parser.add_argument(
        "--workouts-dir",
        type=Path,
        nargs="?",
        const=default_workouts_dir(),
        default=None,
        help=f"List compiled workouts in a directory (default {default_workouts_dir()})",
    )
    parser.add_argument(
        "--debug-ftms",
        action="store_true",
        help="Log raw FTMS payload/flags parsing for each notification",
    )
    parser.add_argument(
        "--debug-sim",
        action="store_true",
        help="Simulate a treadmill (no BLE required) for debug/testing",
    )
    return parser


def _format_duration(seconds: int) -> str:
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def print_plan(plan: WorkoutPlan) -> None:
    print(f"{plan.name}: {plan.description}")
    print(
        f"  {len(plan.steps)} steps, duration {_format_duration(plan.duration)}, "
        f"distance {plan.distance}"
    )
    for i, step in enumerate(plan.steps, start=1):
        print(
            f"  {i:>3}. {step.name:<20} {_format_duration(step.duration):>6} "
            f"{step.pace / 100.0:6.2f} km/h  angle={step.angle:<4} "
            f"distance={step.distance}"
        )


def run_workout(path: Path) -> int:
    try:
        plan = load_workout_plan(path)
    except (OSError, UnicodeDecodeError, WorkoutParseError, ParseError) as exc:
        print(f"Error: {path}: {exc}", file=sys.stderr)
        return 1
    print_plan(plan)
    return 0


def run_list_workouts(base_dir: Path) -> int:
    entries = list_workouts(base_dir)
    if not entries:
        print(f"No workouts found in {base_dir}")
        return 0

    for entry in entries:
        if entry.plan is None:
            print(f"{entry.key:<24} [invalid] {entry.error}")
            continue
        print(
            f"{entry.key:<24} {entry.plan.name} "
            f"({_format_duration(entry.plan.duration)}, "
            f"{len(entry.plan.steps)} steps, distance {entry.plan.distance})"
        )
    return 0


async def run_scan(simulate: bool = False) -> int:
    client = TreadmillClient(simulate=simulate)
    devices = await client.scan(timeout=5.0)

    if not devices:
        print("No BLE devices found")
        return 0

    for device in devices:
        ftms_flag = "FTMS" if device.has_ftms else "-"
        print(f"{device.name:<24} {device.address} RSSI={device.rssi:>4} [{ftms_flag}]")
    return 0


async def run_connect(
    connect_target: str,
    speed: int | None,
    simulate: bool,
    control_delay: float,
) -> int:
    engine = TreadmillEngine(simulate=simulate, control_delay=control_delay)
    try:
        await engine.run(target=connect_target, speed=speed)
    except RuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug_ftms else logging.INFO,
        format="%(message)s",
    )

    if args.workout is not None:
        return run_workout(args.workout)
    if args.workouts_dir is not None:
        return run_list_workouts(args.workouts_dir)

    if args.scan:
        return asyncio.run(run_scan(args.debug_sim))

    speed: int | None = None
    if args.speed is not None:
        try:
            speed = SetTargetSpeed(int(round(args.speed * 100))).speed
        except (ValueError, OverflowError) as exc:
            parser.error(f"--speed: {exc}")

    connect_target = args.connect
    if speed is not None and connect_target is None:
        connect_target = "auto"

    if connect_target is None:
        parser.print_help()
        return 1

    try:
        return asyncio.run(
            run_connect(connect_target, speed, args.debug_sim, args.control_delay)
        )
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
