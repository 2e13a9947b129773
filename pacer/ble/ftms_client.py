"""Async FTMS BLE client for treadmills such as the Horizon 7.0AT."""

from __future__ import annotations

import asyncio
import contextlib
import importlib
import logging
import struct
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Optional

from pacer.ble.commands import (
    Command,
    RequestControl,
    Reset,
    SetTargetSpeed,
    StartOrResume,
    StopOrPause,
    encode_command,
)
from pacer.ble.constants import (
    FITNESS_MACHINE_CONTROL_POINT_CHAR_UUID,
    FLAG_ELAPSED_TIME_PRESENT,
    FLAG_INCLINATION_AND_RAMP_ANGLE_PRESENT,
    FLAG_TOTAL_DISTANCE_PRESENT,
    FTMS_SERVICE_UUID,
    OP_REQUEST_CONTROL,
    OP_RESET,
    OP_SET_TARGET_INCLINATION,
    OP_SET_TARGET_SPEED,
    OP_START_RESUME,
    OP_STOP_PAUSE,
    TREADMILL_DATA_CHAR_UUID,
    parse_treadmill_flags,
)
from pacer.ble.treadmill_data import (
    NotEnoughData,
    TreadmillData,
    decode_treadmill_data,
)

_bleak: Any
try:
    _bleak = importlib.import_module("bleak")
except ImportError:  # pragma: no cover - runtime dependency guard
    _bleak = None

logger = logging.getLogger(__name__)

TelemetryCallback = Callable[[TreadmillData], Awaitable[None] | None]

DEFAULT_NAME_HINT = "HORIZON"
CONTROL_DELAY_SEC = 5.0
SIM_ADDRESS = "SIM:TM:00:00:00:01"
SIM_NAME = "Pacer Sim Treadmill"


@dataclass(frozen=True)
class ScannedDevice:
    name: str
    address: str
    rssi: int
    has_ftms: bool


@dataclass
class TreadmillSession:
    """Connection state for one treadmill, owned by the caller."""

    label: str
    client: Any
    control_granted: bool = False
    subscribed: bool = False

    @property
    def is_connected(self) -> bool:
        return bool(self.client is not None and self.client.is_connected)


def _ensure_bleak_available() -> None:
    if _bleak is None:
        raise RuntimeError("bleak is not installed. Run: pip install bleak")


def _describe_flags(payload: bytes) -> str:
    raw_flags = struct.unpack_from("<H", payload, 0)[0] if len(payload) >= 2 else 0
    flags = parse_treadmill_flags(raw_flags)
    names = ",".join(name for name, enabled in asdict(flags).items() if enabled)
    return f"0x{raw_flags:04X} [{names or '-'}]"


class SimulatedTreadmill:
    """In-process stand-in for a connected BleakClient.

    Accepts control point writes and emits real Treadmill Data payloads, so
    everything downstream of the BLE stack runs unchanged.
    """

    def __init__(self, interval: float = 1.0) -> None:
        self.is_connected = True
        self.control_granted = False
        self.running = False
        self.target_speed = 0
        self.inclination = 0
        self.elapsed_time = 0.0
        self.distance_m = 0.0
        self.writes: list[bytes] = []
        self._interval = interval
        self._callback: Optional[Callable[[object, bytearray], None]] = None
        self._task: Optional[asyncio.Task[None]] = None

    async def start_notify(
        self, char_uuid: str, callback: Callable[[object, bytearray], None]
    ) -> None:
        if char_uuid != TREADMILL_DATA_CHAR_UUID:
            raise RuntimeError(f"Characteristic {char_uuid} does not notify")
        self._callback = callback
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._notify_loop())

    async def write_gatt_char(
        self, char_uuid: str, data: bytes, response: bool = False
    ) -> None:
        if char_uuid != FITNESS_MACHINE_CONTROL_POINT_CHAR_UUID:
            raise RuntimeError(f"Characteristic {char_uuid} is not writable")
        payload = bytes(data)
        self.writes.append(payload)
        opcode = payload[0]

        if opcode == OP_REQUEST_CONTROL:
            self.control_granted = True
        elif not self.control_granted:
            logger.debug("[SIM] opcode 0x%02X ignored: control not granted", opcode)
        elif opcode == OP_RESET:
            self.control_granted = False
            self.running = False
            self.target_speed = 0
            self.inclination = 0
            self.elapsed_time = 0.0
            self.distance_m = 0.0
        elif opcode == OP_START_RESUME:
            self.running = True
        elif opcode == OP_STOP_PAUSE:
            self.running = False
        elif opcode == OP_SET_TARGET_SPEED:
            self.target_speed = struct.unpack_from("<H", payload, 1)[0]
        elif opcode == OP_SET_TARGET_INCLINATION:
            self.inclination = struct.unpack_from("<h", payload, 1)[0]
        else:
            logger.debug("[SIM] opcode 0x%02X accepted without effect", opcode)

    async def disconnect(self) -> None:
        self.is_connected = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    def build_payload(self) -> bytes:
        flags = (
            FLAG_TOTAL_DISTANCE_PRESENT
            | FLAG_INCLINATION_AND_RAMP_ANGLE_PRESENT
            | FLAG_ELAPSED_TIME_PRESENT
        )
        speed = self.target_speed if self.running else 0
        return (
            struct.pack("<HH", flags, speed)
            + struct.pack("<I", int(self.distance_m) & 0xFFFFFF)[:3]
            + struct.pack("<hh", self.inclination, 0)
            + struct.pack("<H", int(self.elapsed_time) & 0xFFFF)
        )

    def tick(self, seconds: float) -> None:
        if not self.running:
            return
        self.elapsed_time += seconds
        # 0.01 km/h -> m/s is a factor of 1/360.
        self.distance_m += self.target_speed * seconds / 360.0

    async def _notify_loop(self) -> None:
        while self.is_connected:
            self.tick(self._interval)
            if self._callback is not None:
                payload = bytearray(self.build_payload())
                self._callback(TREADMILL_DATA_CHAR_UUID, payload)
            await asyncio.sleep(self._interval)


class TreadmillClient:
    """Thin async BLE FTMS client with scan/connect/subscribe/control operations.

    The client holds configuration only. Everything tied to a connection
    lives on the ``TreadmillSession`` returned by ``connect``.
    """

    def __init__(
        self,
        simulate: bool = False,
        name_hint: str = DEFAULT_NAME_HINT,
        control_delay: float = CONTROL_DELAY_SEC,
        sim_interval: float = 1.0,
    ) -> None:
        self._simulate = simulate
        self._name_hint = name_hint
        self._control_delay = control_delay
        self._sim_interval = sim_interval

    async def scan(self, timeout: float = 5.0) -> list[ScannedDevice]:
        if self._simulate:
            return [
                ScannedDevice(
                    name=SIM_NAME,
                    address=SIM_ADDRESS,
                    rssi=-30,
                    has_ftms=True,
                )
            ]
        _ensure_bleak_available()
        discovered = await _bleak.BleakScanner.discover(
            timeout=timeout, return_adv=True
        )
        devices: list[ScannedDevice] = []
        for _, (device, adv_data) in discovered.items():
            uuids = {u.lower() for u in (adv_data.service_uuids or [])}
            devices.append(
                ScannedDevice(
                    name=device.name or "Unknown",
                    address=device.address,
                    rssi=adv_data.rssi,
                    has_ftms=FTMS_SERVICE_UUID in uuids,
                )
            )
        devices.sort(key=lambda d: d.rssi, reverse=True)
        return devices

    async def connect(
        self, target: Optional[str] = None, timeout: float = 25.0
    ) -> TreadmillSession:
        """Connect to a BLE address/name, or the first matching treadmill."""
        if self._simulate:
            logger.info("[SIM] connected to %s", SIM_NAME)
            return TreadmillSession(
                label=f"{SIM_NAME} ({SIM_ADDRESS})",
                client=SimulatedTreadmill(interval=self._sim_interval),
            )

        _ensure_bleak_available()
        device = await self._resolve_device(target=target, timeout=timeout)
        if device is None:
            raise RuntimeError("No FTMS treadmill found")

        client = _bleak.BleakClient(device)
        await client.connect(timeout=timeout)
        label = f"{device.name or 'Unknown'} ({device.address})"
        logger.info("[BLE] connected to %s", label)
        return TreadmillSession(label=label, client=client)

    async def disconnect(self, session: TreadmillSession) -> None:
        if session.client is None:
            return
        await session.client.disconnect()
        session.client = None
        session.control_granted = False
        session.subscribed = False
        logger.info("[BLE] disconnected from %s", session.label)

    async def subscribe_treadmill_data(
        self, session: TreadmillSession, callback: TelemetryCallback
    ) -> None:
        if not session.is_connected:
            raise RuntimeError("Not connected")

        def _handle_treadmill_data_notification(
            _sender: object, data: bytearray
        ) -> None:
            payload = bytes(data)
            try:
                frame = decode_treadmill_data(payload)
            except NotEnoughData as exc:
                logger.warning(
                    "[FTMS] dropped Treadmill Data notification: %s payload=%s",
                    exc,
                    payload.hex(" "),
                )
                return
            logger.debug(
                "[FTMS] flags=%s payload=%s parsed=%s",
                _describe_flags(payload),
                payload.hex(" "),
                frame,
            )
            maybe_coro = callback(frame)
            if asyncio.iscoroutine(maybe_coro):
                asyncio.create_task(maybe_coro)

        await session.client.start_notify(
            TREADMILL_DATA_CHAR_UUID, _handle_treadmill_data_notification
        )
        session.subscribed = True
        logger.debug("[FTMS] subscribed to Treadmill Data (0x2ACD)")

    async def send_command(self, session: TreadmillSession, command: Command) -> bytes:
        """Write one control point command without response."""
        if not session.is_connected:
            raise RuntimeError("Not connected")

        message = encode_command(command)
        await session.client.write_gatt_char(
            FITNESS_MACHINE_CONTROL_POINT_CHAR_UUID, message, response=False
        )
        logger.debug("[FTMS-CP] wrote %s payload=%s", command, message.hex(" "))

        if isinstance(command, RequestControl):
            session.control_granted = True
        elif isinstance(command, Reset):
            session.control_granted = False
        return message

    async def start_session(self, session: TreadmillSession, speed: int) -> None:
        """Take control, start the belt and set its speed (0.01 km/h)."""
        target = SetTargetSpeed(speed)
        if not session.control_granted:
            await self.send_command(session, RequestControl())
            await asyncio.sleep(self._control_delay)
        await self.send_command(session, StartOrResume())
        await self.send_command(session, target)
        logger.info("[FTMS-CP] started at %.2f km/h", speed / 100.0)

    async def stop_session(self, session: TreadmillSession) -> None:
        await self.send_command(session, StopOrPause())
        logger.info("[FTMS-CP] stopped")

    async def _resolve_device(
        self, target: Optional[str], timeout: float
    ) -> Optional[Any]:
        if target and target != "auto":
            return await _bleak.BleakScanner.find_device_by_filter(
                lambda d, _: (d.address.lower() == target.lower())
                or ((d.name or "").lower() == target.lower()),
                timeout=timeout,
            )

        hint = self._name_hint.lower()
        discovered = await _bleak.BleakScanner.discover(
            timeout=timeout, return_adv=True
        )
        for _, (device, adv_data) in discovered.items():
            uuids = {u.lower() for u in (adv_data.service_uuids or [])}
            if FTMS_SERVICE_UUID in uuids or hint in (device.name or "").lower():
                return device
        return None
