"""Loading saved Lighthouse JSON reports.

A report's ``audits`` object is the audit result the aggregator consumes.
Newer Lighthouse versions report ``numericValue`` instead of ``rawValue``;
records are normalized so ``rawValue`` is always the field read.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Mapping
from urllib.parse import urlsplit

DEFAULT_GROUP = "default"

_URL_FIELDS = ("finalUrl", "requestedUrl", "url")


def _normalize_record(record: Any) -> Any:
    if isinstance(record, dict) and "rawValue" not in record and "numericValue" in record:
        record = dict(record)
        record["rawValue"] = record["numericValue"]
    return record


def audits_from_report(report: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the normalized ``audits`` mapping of a parsed report.

    Raises:
        ValueError: If the report has no ``audits`` object.
    """
    audits = report.get("audits")
    if not isinstance(audits, dict):
        raise ValueError("Lighthouse report has no 'audits' object")
    return {name: _normalize_record(record) for name, record in audits.items()}


def read_report(path: Path) -> Dict[str, Any]:
    """Parse a report file as JSON.

    Raises:
        ValueError: If the file is not a JSON object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def load_report(path: Path) -> Dict[str, Any]:
    """Read a report file and return its audit result."""
    return audits_from_report(read_report(path))


def group_for_report(report: Mapping[str, Any]) -> str:
    """Derive a group key from the audited page's host name.

    Uses the first non-empty of ``finalUrl``, ``requestedUrl`` and ``url``;
    falls back to ``DEFAULT_GROUP``.
    """
    for name in _URL_FIELDS:
        url = report.get(name)
        if isinstance(url, str) and url:
            host = urlsplit(url).hostname
            if host:
                return host
    return DEFAULT_GROUP


def iter_report_paths(paths: Iterable[Path]) -> Iterator[Path]:
    """Yield report files, expanding directories to their sorted ``*.json`` files."""
    for path in paths:
        path = Path(path)
        if path.is_dir():
            yield from sorted(p for p in path.glob("*.json") if p.is_file())
        else:
            yield path
