from release_monitor.aggregator.models import SourceOutcome
from release_monitor.aggregator.service import AggregationError, AggregationObservability, ReleaseAggregator

__all__ = [
    "AggregationError",
    "AggregationObservability",
    "ReleaseAggregator",
    "SourceOutcome",
]
