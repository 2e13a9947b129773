from __future__ import annotations

import asyncio

import pytest

from pacer.ble.ftms_client import TreadmillClient
from pacer.ble.treadmill_data import TreadmillData
from pacer.core.engine import TreadmillEngine, format_metrics_line


def test_format_metrics_line_without_frame() -> None:
    assert format_metrics_line(None).startswith("Speed: N/A")


def test_format_metrics_line() -> None:
    frame = TreadmillData(
        speed=1050,
        total_distance=1234,
        inclination=15,
        elapsed_time=125,
        heart_rate=140,
    )

    line = format_metrics_line(frame)

    assert line == (
        "Speed: 10.50 km/h | Distance: 1234 m | Incline: 1.5 % | "
        "Elapsed: 2:05 | HR: 140 bpm"
    )


def test_engine_streams_and_stops_belt(capsys: pytest.CaptureFixture[str]) -> None:
    async def _run() -> TreadmillEngine:
        client = TreadmillClient(simulate=True, control_delay=0.0, sim_interval=0.02)
        engine = TreadmillEngine(client=client, print_interval=0.05)
        task = asyncio.create_task(engine.run(target="auto", speed=900))
        await asyncio.sleep(0.3)
        engine.stop()
        await asyncio.wait_for(task, timeout=1.0)
        return engine

    engine = asyncio.run(_run())

    assert engine.state.connected_device is not None
    assert engine.state.frames_received > 0
    assert engine.state.last_frame is not None
    assert engine.state.last_frame.speed == 900
    out = capsys.readouterr().out
    assert "Belt started at 9.00 km/h" in out
    assert "Speed: 9.00 km/h" in out
