"""Shared runtime state for the terminal engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pacer.ble.treadmill_data import TreadmillData


@dataclass
class EngineState:
    connected_device: str | None = None
    last_frame: TreadmillData | None = None
    last_update: datetime | None = None
    frames_received: int = 0
