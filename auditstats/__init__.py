"""auditstats: grouped statistics over Lighthouse audit results.

Primary API:
    Aggregator - Accumulate audit results by group and summarize them
    AggregateSummary - Per-group and pooled metric summaries
    AuditPipeline - Drive aggregation page by page with error isolation
    create_backend() - Build a statistics backend by name

Example:
    from auditstats import Aggregator

    agg = Aggregator()
    agg.add_to_aggregate(report["audits"], "www.example.com")
    summary = agg.summarize()
    summary.get_group("www.example.com")["timetofirstbyte"]["median"]
"""

from __future__ import annotations

from auditstats import cli, logging
from auditstats._version import __version__
from auditstats.aggregator import Aggregator
from auditstats.config import AuditSettings, AuditStatsConfig, StatsSettings, load_config
from auditstats.errors import AuditStatsError, MissingMetricError, ParseError
from auditstats.metrics import (
    METRIC_NAMES,
    SUMMARY_METRICS,
    ExtractionRule,
    normalize_metric_name,
    parse_leading_int,
)
from auditstats.pipeline import AuditPipeline, PublishedMessage
from auditstats.results import AggregateSummary
from auditstats.stats import (
    FrequencyStatsBackend,
    NumpyStatsBackend,
    StatsBackend,
    create_backend,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Aggregator",
    "AggregateSummary",
    # Catalog
    "METRIC_NAMES",
    "SUMMARY_METRICS",
    "ExtractionRule",
    "normalize_metric_name",
    "parse_leading_int",
    # Backends
    "StatsBackend",
    "FrequencyStatsBackend",
    "NumpyStatsBackend",
    "create_backend",
    # Pipeline
    "AuditPipeline",
    "PublishedMessage",
    # Config
    "AuditSettings",
    "AuditStatsConfig",
    "StatsSettings",
    "load_config",
    # Errors
    "AuditStatsError",
    "MissingMetricError",
    "ParseError",
    # Utilities
    "cli",
    "logging",
]
