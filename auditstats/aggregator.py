"""Incremental aggregation of audit results into grouped metric summaries.

The aggregator reads one integer sample per catalog metric from every audit
result and hands it to a statistics backend, which keeps one accumulator per
metric globally and one per (group, metric). Summaries are computed on demand.

Ingestion is all-or-nothing: every sample is extracted before any state is
touched, so a result with a missing or malformed metric leaves no partial
samples and does not create its group.

Summaries are per group: each group's record is computed only from that
group's samples. The pooled record over all groups is exposed separately as
``AggregateSummary.overall``.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Mapping, Optional, Tuple

from auditstats.logging import get_logger
from auditstats.metrics import extract_samples, normalize_metric_name
from auditstats.results import AggregateSummary, GroupSummary
from auditstats.stats import StatsBackend, create_backend

logger = get_logger(__name__)


class Aggregator:
    """Accumulates per-metric samples partitioned by group.

    Calls are serialized with an internal lock, so one instance may be shared
    by concurrent ingestion threads.

    Attributes:
        backend: Statistics backend owning the accumulator representation.
    """

    def __init__(self, backend: Optional[StatsBackend] = None) -> None:
        self.backend: StatsBackend = backend if backend is not None else create_backend()
        self._stats: Dict[str, Any] = {}
        self._groups: Dict[str, Dict[str, Any]] = {}
        self._sample_count = 0
        self._lock = threading.Lock()

    @property
    def groups(self) -> Tuple[str, ...]:
        """Known group keys in first-seen order."""
        with self._lock:
            return tuple(self._groups)

    @property
    def sample_count(self) -> int:
        """Number of audit results ingested successfully."""
        return self._sample_count

    def __len__(self) -> int:
        return self._sample_count

    def add_to_aggregate(self, data: Mapping[str, Any], group: str) -> None:
        """Ingest one audit result under ``group``.

        Args:
            data: Mapping of metric identifier to audit record.
            group: Group key; the group is created on first use.

        Raises:
            MissingMetricError: If ``data`` lacks a catalog metric.
            ParseError: If a metric value cannot be parsed to an integer.
        """
        samples = extract_samples(data)

        with self._lock:
            group_stats = self._groups.get(group)
            if group_stats is None:
                logger.debug(f"Creating aggregation group '{group}'")
                group_stats = self._groups[group] = {}
            for metric, value in samples.items():
                self.backend.push_group_stats(self._stats, group_stats, metric, value)
            self._sample_count += 1

        logger.debug(f"Aggregated {len(samples)} metrics for group '{group}'")

    def _summarize_stats(self, stats: Mapping[str, Any]) -> GroupSummary:
        output: GroupSummary = {}
        for metric, accumulator in stats.items():
            self.backend.set_stats_summary(
                output, normalize_metric_name(metric), accumulator
            )
        return output

    def summarize(self) -> Optional[AggregateSummary]:
        """Return grouped summaries, or ``None`` if nothing has been aggregated.

        Does not mutate accumulated state; repeated calls without intervening
        ingestion return equal results.
        """
        with self._lock:
            if not self._stats or not self._groups:
                return None
            groups = {
                group: self._summarize_stats(group_stats)
                for group, group_stats in self._groups.items()
            }
            overall = self._summarize_stats(self._stats)

        return AggregateSummary(groups=groups, overall=overall)
