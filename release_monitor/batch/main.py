from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from release_monitor.aggregator.service import AggregationError, ReleaseAggregator
from release_monitor.common.logging_config import configure_logging
from release_monitor.config import ReleaseMonitorConfig, build_aggregator, load_release_monitor_config
from release_monitor.snapshot_store.models import Snapshot
from release_monitor.snapshot_store.repository import FileSnapshotRepository

logger = logging.getLogger(__name__)


def scrape(
    *,
    output: str,
    config: Optional[ReleaseMonitorConfig] = None,
    aggregator: Optional[ReleaseAggregator] = None,
) -> Snapshot:
    cfg = config or load_release_monitor_config()
    runner = aggregator or build_aggregator(cfg)
    logger.info("Starting release monitor scraping")
    snapshot = asyncio.run(runner.aggregate())
    FileSnapshotRepository(output).replace(snapshot)
    return snapshot


def main(argv: Optional[Sequence[str]] = None, *, aggregator: Optional[ReleaseAggregator] = None) -> int:
    config = load_release_monitor_config()
    parser = argparse.ArgumentParser(description="Scrape the latest releases into a snapshot file.")
    parser.add_argument("--output", default=config.snapshot_path)
    parser.add_argument("--log-level", default=config.log_level)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        snapshot = scrape(output=args.output, config=config, aggregator=aggregator)
    except AggregationError:
        logger.exception("Scraping failed")
        return 1
    except OSError:
        logger.exception("Failed to write snapshot to %s", args.output)
        return 1
    logger.info("Scraping completed: %d releases saved to %s", len(snapshot.releases), args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
