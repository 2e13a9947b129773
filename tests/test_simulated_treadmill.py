from __future__ import annotations

import asyncio

import pytest

from pacer.ble.commands import SetTargetInclination
from pacer.ble.ftms_client import SimulatedTreadmill, TreadmillClient
from pacer.ble.treadmill_data import TreadmillData, decode_treadmill_data


def _client() -> TreadmillClient:
    return TreadmillClient(simulate=True, control_delay=0.0, sim_interval=0.02)


def test_simulated_scan_and_connect() -> None:
    async def _run() -> None:
        client = _client()
        devices = await client.scan()
        assert len(devices) == 1
        assert devices[0].has_ftms

        session = await client.connect(target="auto")
        assert "Pacer Sim Treadmill" in session.label
        assert session.is_connected
        assert session.control_granted is False

        await client.disconnect(session)
        assert not session.is_connected

    asyncio.run(_run())


def test_simulated_start_session_sends_ordered_commands() -> None:
    async def _run() -> None:
        client = _client()
        session = await client.connect()
        samples: list[TreadmillData] = []
        await client.subscribe_treadmill_data(session, samples.append)
        assert session.subscribed

        await client.start_session(session, 1000)
        await asyncio.sleep(0.15)

        sim = session.client
        assert isinstance(sim, SimulatedTreadmill)
        assert sim.writes == [b"\x00", b"\x07", b"\x02\xe8\x03"]
        assert session.control_granted
        assert samples
        assert samples[-1].speed == 1000
        assert samples[-1].total_distance is not None
        assert samples[-1].elapsed_time is not None

        await client.stop_session(session)
        assert sim.writes[-1] == b"\x08"
        assert sim.running is False

        await client.disconnect(session)

    asyncio.run(_run())


def test_simulated_commands_ignored_without_control() -> None:
    async def _run() -> None:
        client = _client()
        session = await client.connect()

        message = await client.send_command(session, SetTargetInclination(25))
        assert message == b"\x03\x19\x00"

        sim = session.client
        assert sim.inclination == 0
        await client.disconnect(session)

    asyncio.run(_run())


def test_malformed_notification_is_dropped() -> None:
    async def _run() -> None:
        client = _client()
        session = await client.connect()
        samples: list[TreadmillData] = []
        await client.subscribe_treadmill_data(session, samples.append)
        # Stop the notify loop so only the manual notifications arrive.
        sim = session.client
        handler = sim._callback
        await client.disconnect(session)
        samples.clear()

        handler(None, bytearray(b"\x04\x00\x10"))
        handler(None, bytearray(b"\x00\x00\x64\x00"))

        assert [sample.speed for sample in samples] == [100]

    asyncio.run(_run())


def test_async_callback_is_scheduled() -> None:
    async def _run() -> None:
        client = _client()
        session = await client.connect()
        received = asyncio.Event()

        async def on_frame(_frame: TreadmillData) -> None:
            received.set()

        await client.subscribe_treadmill_data(session, on_frame)
        await asyncio.wait_for(received.wait(), timeout=1.0)
        await client.disconnect(session)

    asyncio.run(_run())


def test_commands_require_connection() -> None:
    async def _run() -> None:
        client = _client()
        session = await client.connect()
        await client.disconnect(session)

        with pytest.raises(RuntimeError, match="Not connected"):
            await client.start_session(session, 800)
        with pytest.raises(RuntimeError, match="Not connected"):
            await client.subscribe_treadmill_data(session, lambda _f: None)

    asyncio.run(_run())


def test_simulated_payload_round_trips_through_decoder() -> None:
    sim = SimulatedTreadmill()
    sim.control_granted = True
    sim.running = True
    sim.target_speed = 720  # 7.2 km/h = 2 m/s
    sim.tick(10.0)

    data = decode_treadmill_data(sim.build_payload())

    assert data.speed == 720
    assert data.total_distance == 20
    assert data.elapsed_time == 10
    assert data.inclination == 0
