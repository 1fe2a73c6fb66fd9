"""Shared fixtures for auditstats tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from auditstats.metrics import METRIC_NAMES

AuditFactory = Callable[..., Dict[str, Any]]


def build_audits(
    value: float = 100, chains: int = 3, overrides: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Return an audit result with ``value`` for every raw metric."""
    audits: Dict[str, Any] = {}
    for metric in METRIC_NAMES:
        if metric == "critical-request-chains":
            audits[metric] = {"rawValue": False, "displayValue": f"{chains} chains found"}
        else:
            audits[metric] = {"rawValue": value, "displayValue": f"{value} ms"}
    audits.update(overrides or {})
    return audits


@pytest.fixture
def make_audits() -> AuditFactory:
    return build_audits


@pytest.fixture
def write_report(tmp_path: Path) -> Callable[..., Path]:
    """Write a Lighthouse-style report JSON and return its path."""

    def _write(
        name: str,
        url: str = "https://www.example.com/",
        value: float = 100,
        chains: int = 3,
        audits: Optional[Dict[str, Any]] = None,
    ) -> Path:
        report = {
            "requestedUrl": url,
            "finalUrl": url,
            "audits": audits if audits is not None else build_audits(value, chains),
        }
        path = tmp_path / "reports" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(report))
        return path

    return _write
