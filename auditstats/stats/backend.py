"""Statistics backend protocol and shared helpers.

A backend owns the representation of accumulated samples. The aggregator
treats accumulators as opaque and only calls the two protocol operations.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, MutableMapping, Protocol, Tuple, runtime_checkable

DEFAULT_PERCENTILES: Tuple[float, ...] = (10.0, 90.0, 99.0)
DEFAULT_DECIMALS = 2


@runtime_checkable
class StatsBackend(Protocol):
    """Accumulates integer samples and turns accumulators into summary records."""

    def push_group_stats(
        self,
        global_stats: MutableMapping[str, Any],
        group_stats: MutableMapping[str, Any],
        metric: str,
        value: int,
    ) -> None:
        """Record ``value`` under ``metric`` in both the global and group accumulators."""
        ...

    def set_stats_summary(
        self, output: MutableMapping[str, Any], name: str, accumulator: Any
    ) -> None:
        """Write the summary record for ``accumulator`` into ``output[name]``."""
        ...


def validate_percentiles(percentiles: Iterable[float]) -> Tuple[float, ...]:
    """Return percentiles as a sorted, de-duplicated tuple of floats.

    Raises:
        ValueError: If any percentile is outside [0, 100].
    """
    values = []
    for p in percentiles:
        p = float(p)
        if not (0 <= p <= 100):
            raise ValueError(f"Percentile must be between 0 and 100, got {p}")
        values.append(p)
    return tuple(sorted(set(values)))


def percentile_key(percentile: float) -> str:
    """Return the summary field name for a percentile (90.0 -> 'p90')."""
    return f"p{percentile:g}"


def build_summary(
    *,
    minimum: int,
    maximum: int,
    mean: float,
    median: float,
    stdev: float,
    percentiles: Dict[float, float],
    total_samples: int,
    decimals: int,
) -> Dict[str, Any]:
    """Assemble a summary record with the field layout shared by all backends."""
    summary: Dict[str, Any] = {
        "min": int(minimum),
        "max": int(maximum),
        "mean": round(float(mean), decimals),
        "median": round(float(median), decimals),
        "stdev": round(float(stdev), decimals),
    }
    for p, value in percentiles.items():
        summary[percentile_key(p)] = round(float(value), decimals)
    summary["total_samples"] = int(total_samples)
    return summary
