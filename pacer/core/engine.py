"""Async runtime engine for BLE FTMS treadmill streaming in terminal."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from pacer.ble.ftms_client import CONTROL_DELAY_SEC, TreadmillClient
from pacer.ble.treadmill_data import TreadmillData
from pacer.core.state import EngineState

logger = logging.getLogger(__name__)


def format_metrics_line(frame: TreadmillData | None) -> str:
    if frame is None:
        return "Speed: N/A | Distance: N/A | Incline: N/A | Elapsed: N/A"

    distance = f"{frame.total_distance} m" if frame.total_distance is not None else "N/A"
    incline = (
        f"{frame.inclination_percent:.1f} %"
        if frame.inclination_percent is not None
        else "N/A"
    )
    if frame.elapsed_time is not None:
        minutes, seconds = divmod(frame.elapsed_time, 60)
        elapsed = f"{minutes}:{seconds:02d}"
    else:
        elapsed = "N/A"
    line = (
        f"Speed: {frame.speed_kmh:.2f} km/h | Distance: {distance} | "
        f"Incline: {incline} | Elapsed: {elapsed}"
    )
    if frame.heart_rate is not None:
        line += f" | HR: {frame.heart_rate} bpm"
    return line


class TreadmillEngine:
    def __init__(
        self,
        client: TreadmillClient | None = None,
        simulate: bool = False,
        control_delay: float = CONTROL_DELAY_SEC,
        print_interval: float = 1.0,
    ) -> None:
        self._client = client or TreadmillClient(
            simulate=simulate,
            control_delay=control_delay,
        )
        self.state = EngineState()
        self._stop_event = asyncio.Event()
        self._print_interval = print_interval

    async def run(self, target: str | None = None, speed: int | None = None) -> None:
        """Stream telemetry until ``stop`` is called.

        ``speed`` is in 0.01 km/h; when given the belt is started at that
        speed and stopped again on the way out.
        """
        session = await self._client.connect(target=target)
        self.state.connected_device = session.label
        print(f"Connected to {session.label}")

        try:
            await self._client.subscribe_treadmill_data(session, self._on_frame)

            if speed is not None:
                await self._client.start_session(session, speed)
                print(f"Belt started at {speed / 100.0:.2f} km/h")

            while not self._stop_event.is_set():
                print(format_metrics_line(self.state.last_frame))
                await asyncio.sleep(self._print_interval)
        finally:
            if session.control_granted and session.is_connected:
                try:
                    await self._client.stop_session(session)
                except Exception as exc:
                    logger.warning("Failed to stop belt before disconnect: %s", exc)
            await self._client.disconnect(session)

    def stop(self) -> None:
        self._stop_event.set()

    def _on_frame(self, frame: TreadmillData) -> None:
        self.state.last_frame = frame
        self.state.last_update = datetime.now(tz=timezone.utc)
        self.state.frames_received += 1
