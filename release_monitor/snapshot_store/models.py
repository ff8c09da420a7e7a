from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from release_monitor.common.enums import Freshness, Platform

DATE_UNKNOWN = "N/A"
DATE_PATTERN = r"^(\d{4}-\d{2}-\d{2}|N/A)$"


class Release(BaseModel):
    model_config = ConfigDict(frozen=True)

    platform: Platform
    version: str = Field(min_length=1)
    status: str = Field(min_length=1)
    date: str = Field(pattern=DATE_PATTERN)
    link: str = Field(min_length=1)
    channel: Optional[str] = Field(default=None, min_length=1)


class Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    last_update: datetime = Field(alias="lastUpdate")
    releases: Tuple[Release, ...] = ()

    def for_platform(self, platform: Platform) -> Tuple[Release, ...]:
        return tuple(release for release in self.releases if release.platform == platform)


@dataclass(frozen=True)
class CacheEntry:
    snapshot: Snapshot
    freshness: Freshness
