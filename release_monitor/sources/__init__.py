from release_monitor.sources.errors import SourceError, TransientNetworkError, UpstreamPayloadError
from release_monitor.sources.providers import (
    AppleReleaseSource,
    ChromeReleaseSource,
    EdgeReleaseSource,
    ReleaseSource,
    SourceResult,
    WhaleReleaseSource,
)
from release_monitor.sources.transport import HttpTransport, Transport

__all__ = [
    "AppleReleaseSource",
    "ChromeReleaseSource",
    "EdgeReleaseSource",
    "HttpTransport",
    "ReleaseSource",
    "SourceError",
    "SourceResult",
    "TransientNetworkError",
    "Transport",
    "UpstreamPayloadError",
    "WhaleReleaseSource",
]
