"""Metric catalog and per-metric sample extraction.

The catalog is the fixed, ordered set of Lighthouse audit identifiers the
aggregator reads from every audit result. Each metric has an extraction rule:

- ``RAW_VALUE``: integer part of the audit's numeric ``rawValue``.
- ``DISPLAY_VALUE``: leading integer of the human-readable ``displayValue``
  (``critical-request-chains`` reports its count only there).

Summaries key metrics by their normalized name, i.e. the identifier with all
``-`` separators removed (``dom-size`` -> ``domsize``).
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from auditstats.errors import MissingMetricError, ParseError


class ExtractionRule(str, Enum):
    """How a metric's integer sample is read from its audit record."""

    RAW_VALUE = "rawValue"
    DISPLAY_VALUE = "displayValue"


METRIC_NAMES: Tuple[str, ...] = (
    "bootup-time",
    # byte-efficiency
    "total-byte-weight",
    "consistently-interactive",
    "critical-request-chains",
    # dobetterweb
    "dom-size",
    "link-blocking-first-paint",
    "script-blocking-first-paint",
    "estimated-input-latency",
    "first-interactive",
    "first-meaningful-paint",
    "mainthread-work-breakdown",
    "speed-index-metric",
    "time-to-first-byte",
)

_EXTRACTION_RULES: Dict[str, ExtractionRule] = {
    name: ExtractionRule.RAW_VALUE for name in METRIC_NAMES
}
_EXTRACTION_RULES["critical-request-chains"] = ExtractionRule.DISPLAY_VALUE

# Audit categories used to build the Lighthouse audit path (e.g. "dobetterweb/dom-size")
_AUDIT_CATEGORIES: Dict[str, str] = {
    "total-byte-weight": "byte-efficiency",
    "dom-size": "dobetterweb",
    "link-blocking-first-paint": "dobetterweb",
    "script-blocking-first-paint": "dobetterweb",
}

_SEPARATOR = "-"

# Samples must fit a signed 64-bit integer
SAMPLE_MIN = -(2**63)
SAMPLE_MAX = 2**63 - 1
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def normalize_metric_name(metric: str) -> str:
    """Return ``metric`` with every separator character removed."""
    return metric.replace(_SEPARATOR, "")


SUMMARY_METRICS: Tuple[str, ...] = tuple(normalize_metric_name(m) for m in METRIC_NAMES)


def extraction_rule(metric: str) -> ExtractionRule:
    """Return the extraction rule for a catalog metric.

    Raises:
        KeyError: If ``metric`` is not in the catalog.
    """
    try:
        return _EXTRACTION_RULES[metric]
    except KeyError:
        raise KeyError(f"Unknown metric '{metric}'") from None


def audit_path(metric: str) -> str:
    """Return the Lighthouse audit path for a catalog metric."""
    extraction_rule(metric)
    category = _AUDIT_CATEGORIES.get(metric)
    return f"{category}/{metric}" if category else metric


def parse_leading_int(metric: str, value: Any) -> int:
    """Parse an integer sample from ``value``.

    Strings yield their leading integer (``"42ms"`` -> 42, ``" 7 chains"`` -> 7).
    Finite numbers are truncated toward zero. Anything else, including strings
    without leading digits, booleans, None, NaN and infinities, is rejected,
    as is any result outside [SAMPLE_MIN, SAMPLE_MAX].

    Args:
        metric: Metric identifier, used for error reporting.
        value: Raw or display value taken from the audit record.

    Returns:
        The integer sample.

    Raises:
        ParseError: If no integer can be derived from ``value``.
    """
    if isinstance(value, bool) or value is None:
        raise ParseError(metric, value)
    if isinstance(value, int):
        sample = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ParseError(metric, value)
        sample = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match is None:
            raise ParseError(metric, value)
        sample = int(match.group(1))
    else:
        raise ParseError(metric, value)
    if not (SAMPLE_MIN <= sample <= SAMPLE_MAX):
        raise ParseError(metric, value)
    return sample


def extract_sample(data: Mapping[str, Any], metric: str) -> int:
    """Extract one integer sample for ``metric`` from an audit result.

    Args:
        data: Mapping of metric identifier to audit record.
        metric: Catalog metric identifier.

    Returns:
        Integer sample for the metric.

    Raises:
        MissingMetricError: If ``data`` has no entry for ``metric``.
        ParseError: If the entry's value cannot be parsed.
    """
    rule = extraction_rule(metric)
    try:
        record = data[metric]
    except KeyError:
        raise MissingMetricError(metric) from None
    if not isinstance(record, Mapping):
        raise ParseError(metric, record)
    return parse_leading_int(metric, record.get(rule.value))


def extract_samples(data: Mapping[str, Any]) -> Dict[str, int]:
    """Extract a sample for every catalog metric, in catalog order."""
    return {metric: extract_sample(data, metric) for metric in METRIC_NAMES}
