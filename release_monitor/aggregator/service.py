from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

from release_monitor.aggregator.models import AggregationEvent, SourceOutcome
from release_monitor.common.clock import Clock
from release_monitor.snapshot_store.models import Release, Snapshot
from release_monitor.sources.providers import ReleaseSource, SourceResult

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_TIMEOUT_S = 10.0
NO_DATA = "no_data"
TIMEOUT = "timeout"


class AggregationError(RuntimeError):
    pass


class AggregationObservability:
    def __init__(self) -> None:
        self._events: List[AggregationEvent] = []

    def record(self, event_type: str, **details: Any) -> None:
        self._events.append(
            AggregationEvent(
                event_type=event_type,
                details=details,
                recorded_at=datetime.now(tz=timezone.utc),
            )
        )

    def events(self) -> List[AggregationEvent]:
        return list(self._events)


def flatten(result: SourceResult) -> Tuple[Release, ...]:
    if result is None:
        return ()
    if isinstance(result, Release):
        return (result,)
    return tuple(result)


class ReleaseAggregator:
    def __init__(
        self,
        *,
        sources: Sequence[ReleaseSource],
        clock: Optional[Clock] = None,
        source_timeout_s: float = DEFAULT_SOURCE_TIMEOUT_S,
        observability: Optional[AggregationObservability] = None,
    ) -> None:
        self._sources = list(sources)
        self._clock = clock or Clock()
        self._source_timeout_s = source_timeout_s
        self._observability = observability

    @property
    def sources(self) -> List[ReleaseSource]:
        return list(self._sources)

    async def _run_source(self, source: ReleaseSource) -> SourceOutcome:
        started = time.monotonic()
        try:
            result = await asyncio.wait_for(source.fetch(), timeout=self._source_timeout_s)
        except asyncio.TimeoutError:
            logger.warning("%s source timed out after %.1fs", source.name, self._source_timeout_s)
            outcome = SourceOutcome(source=source.name, reason=TIMEOUT, elapsed_s=time.monotonic() - started)
        else:
            releases = flatten(result)
            outcome = SourceOutcome(
                source=source.name,
                releases=releases,
                reason=None if result is not None else NO_DATA,
                elapsed_s=time.monotonic() - started,
            )
        self._record(
            "source",
            source=outcome.source,
            ok=outcome.ok,
            releases=len(outcome.releases),
            reason=outcome.reason,
            elapsed_s=round(outcome.elapsed_s, 3),
        )
        return outcome

    async def collect(self) -> List[SourceOutcome]:
        try:
            outcomes = await asyncio.gather(*(self._run_source(source) for source in self._sources))
        except Exception as exc:
            raise AggregationError(f"source fan-out failed: {exc}") from exc
        return list(outcomes)

    async def aggregate(self) -> Snapshot:
        started = time.monotonic()
        outcomes = await self.collect()
        elapsed_s = time.monotonic() - started
        releases: List[Release] = []
        for outcome in outcomes:
            releases.extend(outcome.releases)
        try:
            snapshot = Snapshot(last_update=self._clock.now(), releases=tuple(releases))
        except Exception as exc:
            raise AggregationError(f"snapshot assembly failed: {exc}") from exc
        failed = [outcome.source for outcome in outcomes if not outcome.ok]
        logger.info(
            "Aggregated %d releases from %d sources in %.2fs (unavailable: %s)",
            len(snapshot.releases),
            len(outcomes),
            elapsed_s,
            ", ".join(failed) or "none",
        )
        self._record(
            "aggregate",
            releases=len(snapshot.releases),
            unavailable=failed,
            elapsed_s=round(elapsed_s, 3),
        )
        return snapshot

    def _record(self, event_type: str, **details: Any) -> None:
        if not self._observability:
            return
        self._observability.record(event_type, **details)
