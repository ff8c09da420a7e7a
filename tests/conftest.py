from datetime import datetime, timezone

import pytest

from release_monitor.common.clock import FrozenClock
from release_monitor.common.enums import Platform
from release_monitor.snapshot_store.models import Release, Snapshot


FIXED_TIME = datetime(2026, 1, 28, 8, 17, tzinfo=timezone.utc)


class StubTransport:
    def __init__(self, *, text=None, payload=None, error=None):
        self._text = text
        self._payload = payload
        self._error = error
        self.calls = []

    async def get_text(self, url, *, params=None):
        self.calls.append((url, params))
        if self._error is not None:
            raise self._error
        return self._text

    async def get_json(self, url, *, params=None):
        self.calls.append((url, params))
        if self._error is not None:
            raise self._error
        return self._payload


class StubAggregator:
    def __init__(self, snapshots=None, error=None):
        self._snapshots = list(snapshots or [])
        self._error = error
        self.calls = 0

    def fail_with(self, error):
        self._error = error

    async def aggregate(self):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._snapshots.pop(0)


@pytest.fixture
def clock():
    return FrozenClock(FIXED_TIME)


@pytest.fixture
def make_transport():
    return StubTransport


@pytest.fixture
def make_aggregator():
    return StubAggregator


def build_snapshot(version: str = "v120", *, at: datetime = FIXED_TIME) -> Snapshot:
    return Snapshot(
        last_update=at,
        releases=(
            Release(
                platform=Platform.chrome,
                channel="Stable",
                version=version,
                status="Stable",
                date="2026-01-20",
                link="https://chromestatus.com/roadmap",
            ),
            Release(
                platform=Platform.whale,
                version="v4.35.351.13",
                status="Official",
                date="N/A",
                link="https://notice.naver.com/notices/whalehomepage/1",
            ),
        ),
    )


@pytest.fixture
def make_snapshot():
    return build_snapshot
