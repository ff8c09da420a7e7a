import asyncio
import time

import pytest

from release_monitor.aggregator.service import AggregationError, AggregationObservability, ReleaseAggregator
from release_monitor.common.enums import Platform
from release_monitor.snapshot_store.models import Release
from release_monitor.sources.providers import ReleaseSource


def _release(platform: Platform, status: str = "Official", version: str = "v1") -> Release:
    return Release(
        platform=platform,
        version=version,
        status=status,
        date="2026-01-28",
        link=f"https://example.com/{platform.value.lower()}",
    )


class StubSource(ReleaseSource):
    def __init__(self, platform: Platform, result=None, *, delay: float = 0.0, error=None):
        self.platform = platform
        self._result = result
        self._delay = delay
        self._error = error
        self.calls = 0

    async def _fetch(self):
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._result


class RaisingSource(StubSource):
    async def fetch(self):
        raise RuntimeError("fan-out broken")


def _aggregate(aggregator):
    return asyncio.run(aggregator.aggregate())


def test_aggregate_flattens_singletons_and_sequences(clock):
    chrome = [_release(Platform.chrome, status) for status in ("Stable", "Beta", "Dev")]
    aggregator = ReleaseAggregator(
        sources=[
            StubSource(Platform.ios, _release(Platform.ios)),
            StubSource(Platform.chrome, chrome),
            StubSource(Platform.edge, []),
            StubSource(Platform.whale, _release(Platform.whale)),
        ],
        clock=clock,
    )
    snapshot = _aggregate(aggregator)

    assert snapshot.last_update == clock.now()
    assert [release.platform for release in snapshot.releases] == [
        Platform.ios,
        Platform.chrome,
        Platform.chrome,
        Platform.chrome,
        Platform.whale,
    ]
    assert [release.status for release in snapshot.for_platform(Platform.chrome)] == ["Stable", "Beta", "Dev"]


def test_failed_sources_are_omitted_without_poisoning_others(clock):
    observability = AggregationObservability()
    aggregator = ReleaseAggregator(
        sources=[
            StubSource(Platform.ios, None),
            StubSource(Platform.chrome, error=ValueError("malformed")),
            StubSource(Platform.whale, _release(Platform.whale)),
        ],
        clock=clock,
        observability=observability,
    )
    snapshot = _aggregate(aggregator)

    assert [release.platform for release in snapshot.releases] == [Platform.whale]
    source_events = [event for event in observability.events() if event.event_type == "source"]
    assert {event.details["source"]: event.details["ok"] for event in source_events} == {
        "iOS": False,
        "Chrome": False,
        "Whale": True,
    }
    summary = observability.events()[-1]
    assert summary.event_type == "aggregate"
    assert summary.details["unavailable"] == ["iOS", "Chrome"]


def test_all_sources_failing_yields_empty_snapshot(clock):
    aggregator = ReleaseAggregator(
        sources=[StubSource(Platform.ios, None), StubSource(Platform.edge, None)],
        clock=clock,
    )
    snapshot = _aggregate(aggregator)
    assert snapshot.releases == ()


def test_output_length_bounded_by_source_emission(clock):
    sources = [
        StubSource(Platform.ios, _release(Platform.ios)),
        StubSource(Platform.chrome, [_release(Platform.chrome, s) for s in ("Stable", "Beta", "Dev")]),
        StubSource(Platform.edge, [_release(Platform.edge, s) for s in ("Stable", "Beta", "Dev")]),
        StubSource(Platform.whale, _release(Platform.whale)),
    ]
    snapshot = _aggregate(ReleaseAggregator(sources=sources, clock=clock))
    assert len(snapshot.releases) <= 1 + 3 + 3 + 1


def test_sources_run_concurrently(clock):
    sources = [StubSource(platform, _release(platform), delay=0.2) for platform in Platform]
    aggregator = ReleaseAggregator(sources=sources, clock=clock)

    started = time.monotonic()
    snapshot = _aggregate(aggregator)
    elapsed = time.monotonic() - started

    assert len(snapshot.releases) == 4
    assert elapsed < 0.6


def test_slow_source_times_out_alone(clock):
    observability = AggregationObservability()
    aggregator = ReleaseAggregator(
        sources=[
            StubSource(Platform.ios, _release(Platform.ios), delay=5.0),
            StubSource(Platform.whale, _release(Platform.whale)),
        ],
        clock=clock,
        source_timeout_s=0.1,
        observability=observability,
    )
    started = time.monotonic()
    snapshot = _aggregate(aggregator)

    assert time.monotonic() - started < 2.0
    assert [release.platform for release in snapshot.releases] == [Platform.whale]
    ios_event = next(event for event in observability.events() if event.details.get("source") == "iOS")
    assert ios_event.details["reason"] == "timeout"
    assert ios_event.details["elapsed_s"] >= 0.09
    assert observability.events()[-1].details["elapsed_s"] < 2.0


def test_fan_out_failure_is_systemic(clock):
    aggregator = ReleaseAggregator(
        sources=[StubSource(Platform.whale, _release(Platform.whale)), RaisingSource(Platform.ios)],
        clock=clock,
    )
    with pytest.raises(AggregationError):
        _aggregate(aggregator)
