"""Per-frame snapshot of the scene state.

One ``FrameSampler.sample`` call corresponds to one rendered frame: it
reads a single ``ClockState`` and derives the Earth rotation angle and
every satellite's render position from that one instant.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import numpy as np

from spacetraffic.core.coordinate_transforms import eci_to_render_coords_batch
from spacetraffic.core.orbital_stats import build_telemetry, orbital_period
from spacetraffic.core.propagator import propagate_path, propagate_satellite
from spacetraffic.core.tle_parser import Category, Satellite
from spacetraffic.simulation.clock import ClockState
from spacetraffic.utils.constants import ORBIT_PATH_SEGMENTS
from spacetraffic.utils.time_utils import datetime_to_gmst

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameSnapshot:
    state: ClockState
    earth_rotation: float  # radians, GMST at sim time
    ids: tuple[str, ...]
    positions: np.ndarray  # (N, 3) render units, row i belongs to ids[i]
    category_counts: dict[str, int]
    selected: Optional[dict[str, Any]] = None
    orbit_path: np.ndarray = field(default_factory=lambda: np.empty((0, 3)))

    def position_of(self, sat_id: str) -> Optional[np.ndarray]:
        try:
            return self.positions[self.ids.index(sat_id)]
        except ValueError:
            return None


class FrameSampler:
    """Builds a ``FrameSnapshot`` from the catalog and the clock state."""

    def __init__(self, orbit_segments: int = ORBIT_PATH_SEGMENTS):
        self._orbit_segments = orbit_segments

    def sample(
        self,
        satellites: Iterable[Satellite],
        state: ClockState,
        selected_id: Optional[str] = None,
    ) -> FrameSnapshot:
        sim_time = state.sim_time
        ids: list[str] = []
        eci_rows: list[np.ndarray] = []
        counts: Counter[str] = Counter()
        selected_sat: Optional[Satellite] = None

        for sat in satellites:
            if sat.id == selected_id:
                selected_sat = sat
            if not sat.is_visible:
                continue
            result = propagate_satellite(sat, sim_time)
            if result is None:
                continue
            ids.append(sat.id)
            eci_rows.append(result.position)
            counts[sat.category.value] += 1

        positions = (
            eci_to_render_coords_batch(np.vstack(eci_rows))
            if eci_rows
            else np.empty((0, 3))
        )

        selected = None
        orbit_path = np.empty((0, 3))
        if selected_sat is not None:
            selected = build_telemetry(selected_sat, sim_time)
            path = propagate_path(
                selected_sat.tle1,
                selected_sat.tle2,
                sim_time,
                orbital_period(selected_sat.tle2),
                self._orbit_segments,
            )
            if path:
                orbit_path = eci_to_render_coords_batch(np.vstack(path))

        return FrameSnapshot(
            state=state,
            earth_rotation=datetime_to_gmst(sim_time),
            ids=tuple(ids),
            positions=positions,
            category_counts={c.value: counts.get(c.value, 0) for c in Category},
            selected=selected,
            orbit_path=orbit_path,
        )
