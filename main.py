"""Space Traffic Model - headless entry point.

Syncs the satellite catalog through the cache tiers, then drives the
simulation clock and logs a frame summary once per second.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

# Add project root to path for module imports
PROJECT_ROOT = Path(__file__).parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from spacetraffic.database.database import get_default_engine  # noqa: E402
from spacetraffic.services.catalog_aggregator import CatalogAggregator, SyncStatus  # noqa: E402
from spacetraffic.services.catalog_cache import LocalCatalogCache, LocalStore  # noqa: E402
from spacetraffic.services.catalog_fetcher import CatalogFetcher  # noqa: E402
from spacetraffic.simulation.clock import SimulationClock  # noqa: E402
from spacetraffic.simulation.frame import FrameSampler  # noqa: E402
from spacetraffic.utils.config import get_settings  # noqa: E402
from spacetraffic.utils.constants import RAD_TO_DEG  # noqa: E402


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quieter libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Headless orbital simulator")
    parser.add_argument("--duration", type=float, default=10.0, help="seconds to run the clock")
    parser.add_argument("--speed", type=float, default=1.0, help="simulation speed multiplier")
    parser.add_argument("--select", default=None, help="NORAD id or name to report telemetry for")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Application entry point."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info("Starting Space Traffic Model")

    store = LocalStore(get_default_engine())
    fetcher = CatalogFetcher(base_url=settings.celestrak_url, timeout=settings.fetch_timeout)
    aggregator = CatalogAggregator(fetcher, LocalCatalogCache(store))

    status = asyncio.run(aggregator.load())
    logger.info("%s - %d objects", status.display, len(aggregator.satellites))
    if status is SyncStatus.ERROR:
        logger.error("No satellite data available: %s", aggregator.error)
        return 1

    selected_id = None
    if args.select:
        matches = aggregator.search(args.select, limit=1)
        if matches:
            selected_id = matches[0].id
            logger.info("Tracking %s (%s)", matches[0].name, selected_id)
        else:
            logger.warning("No object matches %r", args.select)

    clock = SimulationClock(speed=args.speed)
    sampler = FrameSampler()
    deadline = time.monotonic() + args.duration
    clock.tick()
    while time.monotonic() < deadline:
        time.sleep(1.0)
        frame = sampler.sample(aggregator.satellites, clock.tick(), selected_id)
        logger.info(
            "%s | earth %.2f deg | rendered %d | %s",
            frame.state.sim_time.strftime("%Y-%m-%d %H:%M:%S"),
            frame.earth_rotation * RAD_TO_DEG,
            len(frame.ids),
            ", ".join(f"{k}={v}" for k, v in frame.category_counts.items()),
        )
        if frame.selected:
            logger.info(
                "  %s lat %s lon %s alt %s km v %s km/s",
                frame.selected["name"],
                frame.selected["lat"],
                frame.selected["lon"],
                frame.selected["alt"],
                frame.selected["velocity"],
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
