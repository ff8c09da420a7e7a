import json

import pytest
from pydantic import ValidationError

from release_monitor.common.enums import Platform
from release_monitor.snapshot_store.errors import SnapshotFileError
from release_monitor.snapshot_store.models import Release, Snapshot
from release_monitor.snapshot_store.repository import FileSnapshotRepository, MemorySnapshotRepository


def test_snapshot_file_uses_wire_shape(make_snapshot, tmp_path):
    path = tmp_path / "releases.json"
    FileSnapshotRepository(path).replace(make_snapshot())

    payload = json.loads(path.read_text())
    assert set(payload) == {"lastUpdate", "releases"}
    assert payload["lastUpdate"].startswith("2026-01-28T08:17:00")
    chrome, whale = payload["releases"]
    assert chrome == {
        "platform": "Chrome",
        "version": "v120",
        "status": "Stable",
        "date": "2026-01-20",
        "link": "https://chromestatus.com/roadmap",
        "channel": "Stable",
    }
    assert "channel" not in whale


def test_snapshot_file_is_overwritten_wholesale(make_snapshot, tmp_path):
    repo = FileSnapshotRepository(tmp_path / "releases.json")
    repo.replace(make_snapshot("v120"))
    repo.replace(make_snapshot("v121"))

    loaded = repo.read()
    assert [release.version for release in loaded.releases] == ["v121", "v4.35.351.13"]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["releases.json"]


def test_missing_or_corrupt_file_reads_as_absent(tmp_path):
    repo = FileSnapshotRepository(tmp_path / "releases.json")
    assert repo.get() is None

    (tmp_path / "releases.json").write_text("{not json")
    assert repo.get() is None
    with pytest.raises(SnapshotFileError):
        repo.read()


def test_file_written_by_batch_variant_is_readable(tmp_path):
    path = tmp_path / "releases.json"
    path.write_text(
        json.dumps(
            {
                "lastUpdate": "2024-05-01T12:00:00.000Z",
                "releases": [
                    {
                        "platform": "iOS",
                        "version": "iOS 17.5",
                        "status": "Official",
                        "date": "2024-05-01",
                        "link": "https://developer.apple.com/documentation/ios-ipados-release-notes/ios-17_5",
                    }
                ],
            }
        )
    )
    snapshot = FileSnapshotRepository(path).read()
    assert snapshot.releases[0].platform == Platform.ios
    assert snapshot.last_update.year == 2024


def test_memory_repository_holds_single_slot(make_snapshot):
    repo = MemorySnapshotRepository()
    assert repo.get() is None
    repo.replace(make_snapshot("v120"))
    repo.replace(make_snapshot("v121"))
    assert repo.get().releases[0].version == "v121"
    repo.clear()
    assert repo.get() is None


def test_release_rejects_empty_fields_and_bad_dates():
    with pytest.raises(ValidationError):
        Release(platform=Platform.edge, version="", status="Stable", date="2024-01-01", link="https://x")
    with pytest.raises(ValidationError):
        Release(platform=Platform.edge, version="v1", status="Stable", date="01/01/2024", link="https://x")
    release = Release(platform=Platform.edge, version="v1", status="Stable", date="N/A", link="https://x")
    assert release.date == "N/A"


def test_release_and_snapshot_are_immutable(make_snapshot):
    snapshot = make_snapshot()
    with pytest.raises(ValidationError):
        snapshot.releases[0].version = "v999"
    with pytest.raises(ValidationError):
        snapshot.last_update = None
    assert isinstance(snapshot, Snapshot)
