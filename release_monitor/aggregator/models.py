from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from release_monitor.snapshot_store.models import Release


@dataclass(frozen=True)
class SourceOutcome:
    source: str
    releases: Tuple[Release, ...] = ()
    reason: Optional[str] = None
    elapsed_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.reason is None


@dataclass(frozen=True)
class AggregationEvent:
    event_type: str
    details: Dict[str, Any] = field(default_factory=dict)
    recorded_at: Optional[datetime] = None
