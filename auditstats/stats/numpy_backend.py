"""Statistics backend that keeps raw samples and summarizes them with numpy."""

from __future__ import annotations

from typing import Any, Iterable, List, MutableMapping, Optional

import numpy as np

from auditstats.stats.backend import (
    DEFAULT_DECIMALS,
    DEFAULT_PERCENTILES,
    build_summary,
    validate_percentiles,
)


class NumpyStatsBackend:
    """Backend whose accumulators are plain lists of samples.

    Percentiles use numpy's linear interpolation, so they can fall between
    observed samples (unlike the frequency backend's nearest rank).
    """

    name = "numpy"

    def __init__(
        self,
        percentiles: Optional[Iterable[float]] = None,
        decimals: int = DEFAULT_DECIMALS,
    ) -> None:
        self.percentiles = validate_percentiles(
            DEFAULT_PERCENTILES if percentiles is None else percentiles
        )
        self.decimals = decimals

    def push_group_stats(
        self,
        global_stats: MutableMapping[str, Any],
        group_stats: MutableMapping[str, Any],
        metric: str,
        value: int,
    ) -> None:
        global_stats.setdefault(metric, []).append(value)
        group_stats.setdefault(metric, []).append(value)

    def set_stats_summary(
        self, output: MutableMapping[str, Any], name: str, accumulator: List[int]
    ) -> None:
        if not accumulator:
            return
        values = np.asarray(accumulator, dtype=np.int64)
        pct_values = (
            np.percentile(values, list(self.percentiles)) if self.percentiles else []
        )
        output[name] = build_summary(
            minimum=values.min(),
            maximum=values.max(),
            mean=values.mean(),
            median=np.median(values),
            stdev=values.std(),
            percentiles=dict(zip(self.percentiles, pct_values)),
            total_samples=values.size,
            decimals=self.decimals,
        )
