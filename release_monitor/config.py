from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from release_monitor.access_gate.service import AccessGate
from release_monitor.aggregator.service import AggregationObservability, ReleaseAggregator
from release_monitor.common.clock import Clock
from release_monitor.snapshot_store.repository import FileSnapshotRepository, MemorySnapshotRepository
from release_monitor.snapshot_store.service import SnapshotCacheService
from release_monitor.sources.providers import (
    APPLE_INDEX_URL,
    CHROME_CHANNELS_URL,
    EDGE_PRODUCTS_URL,
    WHALE_NOTICES_URL,
    AppleReleaseSource,
    ChromeReleaseSource,
    EdgeReleaseSource,
    ReleaseSource,
    WhaleReleaseSource,
)
from release_monitor.sources.transport import HttpTransport, Transport


@dataclass(frozen=True)
class ReleaseMonitorConfig:
    update_secret: Optional[str] = None
    snapshot_path: str = "data/releases.json"
    adapter_timeout_s: float = 10.0
    cors_allow_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    apple_index_url: str = APPLE_INDEX_URL
    chrome_channels_url: str = CHROME_CHANNELS_URL
    edge_products_url: str = EDGE_PRODUCTS_URL
    whale_notices_url: str = WHALE_NOTICES_URL


def _split_csv(value: Optional[str]) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or None


def load_release_monitor_config() -> ReleaseMonitorConfig:
    return ReleaseMonitorConfig(
        update_secret=os.getenv("UPDATE_SECRET") or None,
        snapshot_path=os.getenv("SNAPSHOT_PATH", ReleaseMonitorConfig.snapshot_path),
        adapter_timeout_s=float(os.getenv("ADAPTER_TIMEOUT_SECONDS", str(ReleaseMonitorConfig.adapter_timeout_s))),
        cors_allow_origins=_split_csv(os.getenv("CORS_ALLOW_ORIGINS")) or ReleaseMonitorConfig.cors_allow_origins,
        log_level=os.getenv("LOG_LEVEL", ReleaseMonitorConfig.log_level),
        apple_index_url=os.getenv("APPLE_INDEX_URL", ReleaseMonitorConfig.apple_index_url),
        chrome_channels_url=os.getenv("CHROME_CHANNELS_URL", ReleaseMonitorConfig.chrome_channels_url),
        edge_products_url=os.getenv("EDGE_PRODUCTS_URL", ReleaseMonitorConfig.edge_products_url),
        whale_notices_url=os.getenv("WHALE_NOTICES_URL", ReleaseMonitorConfig.whale_notices_url),
    )


def build_release_sources(
    cfg: ReleaseMonitorConfig,
    *,
    transport: Optional[Transport] = None,
    clock: Optional[Clock] = None,
) -> List[ReleaseSource]:
    http = transport or HttpTransport(timeout_s=cfg.adapter_timeout_s)
    return [
        AppleReleaseSource(transport=http, url=cfg.apple_index_url, clock=clock),
        ChromeReleaseSource(transport=http, url=cfg.chrome_channels_url),
        EdgeReleaseSource(transport=http, url=cfg.edge_products_url),
        WhaleReleaseSource(transport=http, url=cfg.whale_notices_url),
    ]


def build_aggregator(
    cfg: ReleaseMonitorConfig,
    *,
    transport: Optional[Transport] = None,
    clock: Optional[Clock] = None,
    observability: Optional[AggregationObservability] = None,
) -> ReleaseAggregator:
    return ReleaseAggregator(
        sources=build_release_sources(cfg, transport=transport, clock=clock),
        clock=clock,
        # Outer bound; the transport timeout fires first.
        source_timeout_s=cfg.adapter_timeout_s + 1.0,
        observability=observability,
    )


def build_snapshot_cache_service(
    *,
    config: Optional[ReleaseMonitorConfig] = None,
    aggregator: Optional[ReleaseAggregator] = None,
    memory: Optional[MemorySnapshotRepository] = None,
) -> SnapshotCacheService:
    cfg = config or load_release_monitor_config()
    durable = FileSnapshotRepository(cfg.snapshot_path) if cfg.snapshot_path else None
    return SnapshotCacheService(
        aggregator=aggregator or build_aggregator(cfg),
        memory=memory or MemorySnapshotRepository(),
        durable=durable,
    )


def build_access_gate(config: Optional[ReleaseMonitorConfig] = None) -> AccessGate:
    cfg = config or load_release_monitor_config()
    return AccessGate(cfg.update_secret)
