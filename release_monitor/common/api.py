from typing import Any, Dict

from release_monitor.snapshot_store.models import Snapshot


UNAUTHORIZED_MESSAGE = "Unauthorized: Invalid Update Token"
NO_DATA_MESSAGE = "Failed to fetch release data"


def snapshot_response(snapshot: Snapshot) -> Dict[str, Any]:
    return snapshot.model_dump(mode="json", by_alias=True, exclude_none=True)


def error_response(message: str) -> Dict[str, Any]:
    return {"error": message}
