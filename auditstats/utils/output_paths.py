"""Output path helpers for CLI artifacts."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

SUMMARY_SUFFIXES = {"json": ".summary.json", "csv": ".summary.csv"}


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory exists for a file path."""
    path.parent.mkdir(parents=True, exist_ok=True)


def summary_path(
    override: Optional[Path], fmt: str = "json", prefix: str = "lighthouse"
) -> Path:
    """Resolve where the CLI writes a summary.

    An explicit ``override`` wins; otherwise ``<prefix><suffix>`` in the
    current working directory.

    Raises:
        ValueError: If ``fmt`` has no known suffix.
    """
    if override is not None:
        return override
    try:
        suffix = SUMMARY_SUFFIXES[fmt]
    except KeyError:
        raise ValueError(f"Unsupported output format '{fmt}'") from None
    return Path.cwd() / f"{prefix}{suffix}"
