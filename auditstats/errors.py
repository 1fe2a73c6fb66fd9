"""Exceptions raised while aggregating audit results."""

from __future__ import annotations

from typing import Any


class AuditStatsError(Exception):
    """Base class for auditstats errors."""


class MissingMetricError(AuditStatsError, KeyError):
    """An audit result lacks an entry for a catalog metric.

    Attributes:
        metric: Identifier of the missing metric.
    """

    def __init__(self, metric: str) -> None:
        super().__init__(metric)
        self.metric = metric

    def __str__(self) -> str:
        return f"Audit result has no entry for metric '{self.metric}'"


class ParseError(AuditStatsError, ValueError):
    """A metric value cannot be reduced to an integer sample.

    Attributes:
        metric: Identifier of the metric being extracted.
        value: The offending value.
    """

    def __init__(self, metric: str, value: Any) -> None:
        super().__init__(metric, value)
        self.metric = metric
        self.value = value

    def __str__(self) -> str:
        return f"Cannot parse integer sample for metric '{self.metric}' from {self.value!r}"
