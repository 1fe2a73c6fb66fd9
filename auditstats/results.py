"""Grouped summary produced by :meth:`Aggregator.summarize`.

``AggregateSummary.groups`` maps each group key to a record keyed by
normalized metric name (``"domsize"``, ``"timetofirstbyte"``, ...). Each metric
entry holds the statistics computed by the stats backend. ``overall`` holds the
same record computed from samples pooled across all groups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

MetricSummary = Dict[str, Any]
GroupSummary = Dict[str, MetricSummary]


@dataclass
class AggregateSummary:
    """Per-group and pooled metric summaries.

    Attributes:
        groups: Group key -> normalized metric name -> statistics.
        overall: Normalized metric name -> statistics over all groups.
    """

    groups: Dict[str, GroupSummary] = field(default_factory=dict)
    overall: GroupSummary = field(default_factory=dict)

    def group_names(self) -> List[str]:
        """Return group keys in first-seen order."""
        return list(self.groups)

    def get_group(self, name: str) -> GroupSummary:
        """Return the summary for one group.

        Raises:
            KeyError: If ``name`` is not a known group.
        """
        if name not in self.groups:
            available = ", ".join(self.groups) if self.groups else "none"
            raise KeyError(f"Group '{name}' not found. Available: {available}")
        return self.groups[name]

    def filtered(self, metrics: Optional[Iterable[str]]) -> "AggregateSummary":
        """Return a copy restricted to the given normalized metric names."""
        if metrics is None:
            return AggregateSummary(
                groups={g: dict(s) for g, s in self.groups.items()},
                overall=dict(self.overall),
            )
        wanted = list(metrics)

        def _pick(summary: GroupSummary) -> GroupSummary:
            return {m: summary[m] for m in wanted if m in summary}

        return AggregateSummary(
            groups={g: _pick(s) for g, s in self.groups.items()},
            overall=_pick(self.overall),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "groups": {
                str(group): {m: dict(stats) for m, stats in summary.items()}
                for group, summary in self.groups.items()
            },
            "overall": {m: dict(stats) for m, stats in self.overall.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregateSummary":
        """Construct an AggregateSummary from ``to_dict()`` output."""
        groups = {
            str(group): {m: dict(stats) for m, stats in (summary or {}).items()}
            for group, summary in (data.get("groups") or {}).items()
        }
        overall = {m: dict(stats) for m, stats in (data.get("overall") or {}).items()}
        return cls(groups=groups, overall=overall)

    def to_dataframe(self, include_overall: bool = False) -> pd.DataFrame:
        """Return a long-form DataFrame with one row per (group, metric).

        Args:
            include_overall: Also emit rows for the pooled summary under the
                group label ``"*"``.

        Returns:
            DataFrame with ``group`` and ``metric`` columns followed by one
            column per statistic.
        """
        rows = []
        sections = list(self.groups.items())
        if include_overall:
            sections.append(("*", self.overall))
        for group, summary in sections:
            for metric, stats in summary.items():
                rows.append({"group": group, "metric": metric, **stats})
        if not rows:
            return pd.DataFrame(columns=["group", "metric"])
        return pd.DataFrame(rows)
