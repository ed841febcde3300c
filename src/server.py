"""Background runner for the ratings domain.

Starts the trending scheduler and the Protean Engine:
- TrendingScheduler: recomputes trending snapshots on a fixed interval
- Engine: consumes review and catalog events, invoking the stats handlers

Usage:
    python src/server.py                      # Scheduler + Engine
    python src/server.py --trending-only      # Scheduler only
    python src/server.py --interval 600       # Override the trending interval (seconds)
"""

import argparse
import time

import structlog
from protean.server.engine import Engine

logger = structlog.get_logger(__name__)


def _get_domain():
    """Import and initialize the ratings domain."""
    from ratings.domain import ratings

    ratings.init()
    return ratings


def run(trending_only: bool = False, interval: float | None = None) -> None:
    from ratings.trending.scheduler import TrendingScheduler

    domain = _get_domain()
    scheduler = TrendingScheduler(interval=interval, domain=domain)
    scheduler.start()

    try:
        if trending_only:
            while scheduler.is_running:
                time.sleep(1.0)
        else:
            Engine(domain).run()
    except KeyboardInterrupt:
        logger.info("Shutdown requested")
    finally:
        scheduler.stop()


def main():
    parser = argparse.ArgumentParser(description="Ratings background runner")
    parser.add_argument(
        "--trending-only",
        action="store_true",
        help="Run only the trending scheduler, without consuming events",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Trending refresh interval in seconds (default: from domain config)",
    )
    args = parser.parse_args()

    run(trending_only=args.trending_only, interval=args.interval)


if __name__ == "__main__":
    main()
