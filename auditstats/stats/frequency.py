"""Frequency-map statistics backend.

Samples are stored as value -> occurrence count, which keeps memory bounded by
the number of distinct values rather than the number of audited pages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, MutableMapping, Optional

from auditstats.stats.backend import (
    DEFAULT_DECIMALS,
    DEFAULT_PERCENTILES,
    build_summary,
    validate_percentiles,
)


@dataclass
class SampleDistribution:
    """Running frequency distribution of integer samples.

    Attributes:
        frequencies: Mapping of sample value to occurrence count.
        total_samples: Number of samples recorded.
        total_sum: Sum of all samples.
        sum_squares: Sum of squared samples.
    """

    frequencies: Dict[int, int] = field(default_factory=dict)
    total_samples: int = 0
    total_sum: int = 0
    sum_squares: int = 0

    def add(self, value: int) -> None:
        """Record one sample."""
        self.frequencies[value] = self.frequencies.get(value, 0) + 1
        self.total_samples += 1
        self.total_sum += value
        self.sum_squares += value * value

    @classmethod
    def from_values(cls, values: Iterable[int]) -> "SampleDistribution":
        dist = cls()
        for value in values:
            dist.add(value)
        return dist

    @property
    def min(self) -> int:
        return min(self.frequencies)

    @property
    def max(self) -> int:
        return max(self.frequencies)

    @property
    def mean(self) -> float:
        return self.total_sum / self.total_samples

    @property
    def stdev(self) -> float:
        """Population standard deviation."""
        mean = self.mean
        # Var(X) = E[X^2] - (E[X])^2, clamped against float rounding
        variance = (self.sum_squares / self.total_samples) - (mean * mean)
        return max(variance, 0.0) ** 0.5

    def get_percentile(self, percentile: float) -> int:
        """Return the nearest-rank percentile of the distribution.

        Args:
            percentile: Percentile to calculate (0-100).

        Raises:
            ValueError: If ``percentile`` is outside [0, 100] or no samples exist.
        """
        if not (0 <= percentile <= 100):
            raise ValueError("Percentile must be between 0 and 100")
        if not self.total_samples:
            raise ValueError("Cannot compute percentile of an empty distribution")

        target_count = (percentile / 100.0) * self.total_samples
        sorted_values = sorted(self.frequencies)
        cumulative_count = 0
        for value in sorted_values:
            cumulative_count += self.frequencies[value]
            if cumulative_count >= target_count:
                return value
        return sorted_values[-1]

    def expand_to_values(self) -> List[int]:
        """Expand the frequency map back into a sorted list of samples."""
        values: List[int] = []
        for value in sorted(self.frequencies):
            values.extend([value] * self.frequencies[value])
        return values


class FrequencyStatsBackend:
    """Backend that accumulates :class:`SampleDistribution` objects."""

    name = "frequency"

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
        for stats in (global_stats, group_stats):
            dist = stats.get(metric)
            if dist is None:
                dist = stats[metric] = SampleDistribution()
            dist.add(value)

    def set_stats_summary(
        self,
        output: MutableMapping[str, Any],
        name: str,
        accumulator: SampleDistribution,
    ) -> None:
        if not accumulator.total_samples:
            return
        output[name] = build_summary(
            minimum=accumulator.min,
            maximum=accumulator.max,
            mean=accumulator.mean,
            median=accumulator.get_percentile(50),
            stdev=accumulator.stdev,
            percentiles={p: accumulator.get_percentile(p) for p in self.percentiles},
            total_samples=accumulator.total_samples,
            decimals=self.decimals,
        )
