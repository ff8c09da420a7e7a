from enum import Enum


class Platform(str, Enum):
    ios = "iOS"
    chrome = "Chrome"
    edge = "Edge"
    whale = "Whale"


class ReleaseStatus(str, Enum):
    official = "Official"
    beta = "Beta"
    rc = "RC"
    stable = "Stable"
    dev = "Dev"


class Freshness(str, Enum):
    hit = "HIT"
    miss = "MISS"
    refreshed = "REFRESHED"
    stale = "STALE"


class AccessDecision(str, Enum):
    read = "read"
    refresh = "refresh"
