"""Two-tier snapshot cache: in-process slot backed by an optional snapshot file."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from release_monitor.aggregator.service import AggregationError
from release_monitor.common.enums import Freshness
from release_monitor.snapshot_store.errors import NoDataAvailable
from release_monitor.snapshot_store.models import CacheEntry, Snapshot
from release_monitor.snapshot_store.repository import FileSnapshotRepository, MemorySnapshotRepository

logger = logging.getLogger(__name__)


class Aggregator(Protocol):
    async def aggregate(self) -> Snapshot: ...


class SnapshotCacheService:
    def __init__(
        self,
        *,
        aggregator: Aggregator,
        memory: Optional[MemorySnapshotRepository] = None,
        durable: Optional[FileSnapshotRepository] = None,
    ) -> None:
        self._aggregator = aggregator
        self._memory = memory or MemorySnapshotRepository()
        self._durable = durable

    async def cached(self) -> Optional[Snapshot]:
        snapshot = self._memory.get()
        if snapshot is not None:
            return snapshot
        if self._durable is None:
            return None
        snapshot = await asyncio.to_thread(self._durable.get)
        if snapshot is not None:
            logger.info("Loaded persisted snapshot from %s", self._durable.path)
            self._memory.replace(snapshot)
        return snapshot

    async def get_snapshot(self, *, force_refresh: bool = False) -> CacheEntry:
        previous = await self.cached()
        if not force_refresh and previous is not None:
            return CacheEntry(snapshot=previous, freshness=Freshness.hit)

        try:
            snapshot = await self._aggregator.aggregate()
        except AggregationError as exc:
            return self._fallback(previous, exc)
        except Exception as exc:
            logger.exception("Unexpected aggregation failure")
            return self._fallback(previous, exc)

        await self._store(snapshot)
        freshness = Freshness.refreshed if force_refresh else Freshness.miss
        logger.info("Snapshot %s with %d releases", freshness.value, len(snapshot.releases))
        return CacheEntry(snapshot=snapshot, freshness=freshness)

    def _fallback(self, previous: Optional[Snapshot], exc: Exception) -> CacheEntry:
        if previous is None:
            logger.error("Scrape failed with no cached snapshot: %s", exc)
            raise NoDataAvailable("no snapshot available") from exc
        logger.warning("Scrape failed, serving stale snapshot from %s: %s", previous.last_update.isoformat(), exc)
        return CacheEntry(snapshot=previous, freshness=Freshness.stale)

    async def _store(self, snapshot: Snapshot) -> None:
        self._memory.replace(snapshot)
        if self._durable is None:
            return
        try:
            await asyncio.to_thread(self._durable.replace, snapshot)
        except OSError:
            logger.exception("Failed to persist snapshot to %s", self._durable.path)
