from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from release_monitor.snapshot_store.errors import SnapshotFileError
from release_monitor.snapshot_store.models import Snapshot

logger = logging.getLogger(__name__)


class MemorySnapshotRepository:
    def __init__(self) -> None:
        self._snapshot: Optional[Snapshot] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[Snapshot]:
        with self._lock:
            return self._snapshot

    def replace(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None


class FileSnapshotRepository:
    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Snapshot:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SnapshotFileError(f"cannot read {self._path}: {exc}") from exc
        try:
            return Snapshot.model_validate_json(raw)
        except ValidationError as exc:
            raise SnapshotFileError(f"invalid snapshot file {self._path}: {exc}") from exc

    def get(self) -> Optional[Snapshot]:
        if not self._path.exists():
            return None
        try:
            return self.read()
        except SnapshotFileError as exc:
            logger.warning("Ignoring persisted snapshot: %s", exc)
            return None

    def replace(self, snapshot: Snapshot) -> None:
        payload = snapshot.model_dump_json(by_alias=True, exclude_none=True, indent=2)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.write("\n")
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.info("Snapshot saved to %s", self._path)
