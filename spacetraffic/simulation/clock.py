"""Simulation clock: the single source of simulated time for a frame.

Every consumer in one frame reads the same ``ClockState`` snapshot, so the
Earth rotation angle and all satellite positions agree on the instant.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from spacetraffic.utils.constants import MAX_SPEED, MIN_SPEED, SPEED_PRESETS
from spacetraffic.utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockState:
    sim_time: datetime
    real_time: datetime
    speed: float
    paused: bool


class SimulationClock:
    """Advances simulated time by wall-clock delta times speed."""

    def __init__(
        self,
        sim_time: Optional[datetime] = None,
        speed: float = 1.0,
        paused: bool = False,
    ):
        now = datetime.now(timezone.utc)
        self._sim_time = ensure_utc(sim_time) if sim_time is not None else now
        self._real_time = now
        self._speed = 1.0
        self._paused = paused
        self._last_wall_time: Optional[float] = None
        self.set_speed(speed)

    @property
    def sim_time(self) -> datetime:
        return self._sim_time

    @property
    def real_time(self) -> datetime:
        return self._real_time

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def paused(self) -> bool:
        return self._paused

    def snapshot(self) -> ClockState:
        return ClockState(
            sim_time=self._sim_time,
            real_time=self._real_time,
            speed=self._speed,
            paused=self._paused,
        )

    def tick(self, delta_seconds: Optional[float] = None) -> ClockState:
        """Advance one frame.

        Without ``delta_seconds`` the wall-clock time since the previous
        tick is used. Real time is refreshed even while paused.
        """
        wall_now = time.perf_counter()
        if delta_seconds is None:
            delta_seconds = (
                0.0 if self._last_wall_time is None else wall_now - self._last_wall_time
            )
        self._last_wall_time = wall_now

        self._real_time = datetime.now(timezone.utc)
        if not self._paused:
            self._sim_time += timedelta(seconds=delta_seconds * self._speed)
        return self.snapshot()

    def set_speed(self, speed: float) -> None:
        """Set the time multiplier, clamped to [1, 10000]."""
        self._speed = float(max(MIN_SPEED, min(speed, MAX_SPEED)))

    def select_preset(self, speed: float) -> None:
        """Transport-control speed button: set a preset speed and resume."""
        if speed not in SPEED_PRESETS:
            raise ValueError(f"Unknown speed preset {speed}; expected one of {SPEED_PRESETS}")
        self.set_speed(speed)
        self.set_paused(False)

    def set_paused(self, paused: bool) -> None:
        self._paused = paused

    def toggle_pause(self) -> None:
        self._paused = not self._paused

    def reset_to_real_time(self) -> None:
        """Sim time back to now at 1x, running."""
        self._sim_time = datetime.now(timezone.utc)
        self.set_speed(1)
        self.set_paused(False)
        logger.info("Clock reset to real time")

    def jump_to_time(self, dt: datetime) -> None:
        self._sim_time = ensure_utc(dt)
