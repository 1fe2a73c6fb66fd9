"""Statistics backends for the aggregator.

``create_backend`` builds a backend by name; the default is the
frequency-map backend.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional

from .backend import DEFAULT_DECIMALS, DEFAULT_PERCENTILES, StatsBackend
from .frequency import FrequencyStatsBackend, SampleDistribution
from .numpy_backend import NumpyStatsBackend

_BACKENDS: Dict[str, Callable[..., StatsBackend]] = {
    FrequencyStatsBackend.name: FrequencyStatsBackend,
    NumpyStatsBackend.name: NumpyStatsBackend,
}

BACKEND_NAMES = tuple(_BACKENDS)


def create_backend(
    name: str = FrequencyStatsBackend.name,
    percentiles: Optional[Iterable[float]] = None,
    decimals: int = DEFAULT_DECIMALS,
) -> StatsBackend:
    """Build a statistics backend by name.

    Args:
        name: One of ``BACKEND_NAMES``.
        percentiles: Percentiles to report (defaults to ``DEFAULT_PERCENTILES``).
        decimals: Rounding for floating summary fields.

    Raises:
        ValueError: If ``name`` is not a known backend.
    """
    try:
        factory = _BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown stats backend '{name}'. Available: {', '.join(BACKEND_NAMES)}"
        ) from None
    return factory(percentiles=percentiles, decimals=decimals)


__all__ = [
    "BACKEND_NAMES",
    "DEFAULT_DECIMALS",
    "DEFAULT_PERCENTILES",
    "FrequencyStatsBackend",
    "NumpyStatsBackend",
    "SampleDistribution",
    "StatsBackend",
    "create_backend",
]
