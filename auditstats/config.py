"""Configuration classes for auditstats components.

Settings can be loaded from YAML::

    stats:
      backend: numpy
      percentiles: [50, 90, 95]
      decimals: 1
    audit:
      pause_after_load_ms: 3000
      summary_metrics: [firstmeaningfulpaint, speedindexmetric]
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from auditstats.metrics import METRIC_NAMES, SUMMARY_METRICS, audit_path
from auditstats.stats import (
    BACKEND_NAMES,
    DEFAULT_DECIMALS,
    DEFAULT_PERCENTILES,
    StatsBackend,
    create_backend,
)
from auditstats.utils.yaml_utils import normalize_yaml_dict_keys


@dataclass
class StatsSettings:
    """Statistics backend selection and summary shape."""

    backend: str = "frequency"
    percentiles: Tuple[float, ...] = DEFAULT_PERCENTILES
    decimals: int = DEFAULT_DECIMALS

    def create_backend(self) -> StatsBackend:
        return create_backend(self.backend, self.percentiles, self.decimals)


@dataclass
class AuditSettings:
    """Lighthouse pass settings forwarded to audit runners."""

    pass_name: str = "auditstatsPass"
    port: int = 9222
    chrome_flags: Tuple[str, ...] = ("--no-sandbox", "--headless", "--disable-gpu")
    record_trace: bool = True
    # Quiet-window thresholds in milliseconds
    pause_after_load_ms: int = 5250
    network_quiet_threshold_ms: int = 5250
    cpu_quiet_threshold_ms: int = 5250
    use_throttling: bool = True
    # Normalized metric names published in page summaries
    summary_metrics: Tuple[str, ...] = SUMMARY_METRICS

    def lighthouse_flags(self) -> Dict[str, Any]:
        """Return launcher flags (debugging port and Chrome command line)."""
        return {
            "port": self.port,
            "chromeFlags": [f"--remote-debugging-port={self.port}", *self.chrome_flags],
        }

    def lighthouse_config(self) -> Dict[str, Any]:
        """Return the Lighthouse configuration restricted to catalog audits."""
        return {
            "extends": "lighthouse:default",
            "passes": [
                {
                    "passName": self.pass_name,
                    "recordTrace": self.record_trace,
                    "pauseAfterLoadMs": self.pause_after_load_ms,
                    "networkQuietThresholdMs": self.network_quiet_threshold_ms,
                    "cpuQuietThresholdMs": self.cpu_quiet_threshold_ms,
                    "useThrottling": self.use_throttling,
                    "gatherers": [],
                }
            ],
            "audits": [audit_path(m) for m in METRIC_NAMES],
        }


@dataclass
class AuditStatsConfig:
    """Top-level configuration."""

    stats: StatsSettings = field(default_factory=StatsSettings)
    audit: AuditSettings = field(default_factory=AuditSettings)


# Global configuration instance
DEFAULT_CONFIG = AuditStatsConfig()


def _check_keys(section: str, data: Dict[str, Any], cls: type) -> None:
    allowed = {f.name for f in fields(cls)}
    for key in data:
        if key not in allowed:
            raise ValueError(
                f"Unrecognized key '{key}' in '{section}'. Allowed: {', '.join(sorted(allowed))}"
            )


def _int_field(section: str, name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{section}.{name}' must be an integer, got {value!r}")
    return value


def _parse_stats(data: Dict[str, Any]) -> StatsSettings:
    _check_keys("stats", data, StatsSettings)
    settings = StatsSettings()
    if "backend" in data:
        backend = data["backend"]
        if backend not in BACKEND_NAMES:
            raise ValueError(
                f"Unknown stats backend '{backend}'. Available: {', '.join(BACKEND_NAMES)}"
            )
        settings.backend = backend
    if "percentiles" in data:
        raw = data["percentiles"]
        if not isinstance(raw, list):
            raise ValueError("'stats.percentiles' must be a list of numbers")
        percentiles: List[float] = []
        for p in raw:
            if isinstance(p, bool) or not isinstance(p, (int, float)):
                raise ValueError(f"Invalid percentile {p!r}")
            if not (0 <= p <= 100):
                raise ValueError(f"Percentile must be between 0 and 100, got {p}")
            percentiles.append(float(p))
        settings.percentiles = tuple(percentiles)
    if "decimals" in data:
        decimals = _int_field("stats", "decimals", data["decimals"])
        if decimals < 0:
            raise ValueError("'stats.decimals' must be non-negative")
        settings.decimals = decimals
    return settings


def _parse_audit(data: Dict[str, Any]) -> AuditSettings:
    _check_keys("audit", data, AuditSettings)
    settings = AuditSettings()
    for name in (
        "port",
        "pause_after_load_ms",
        "network_quiet_threshold_ms",
        "cpu_quiet_threshold_ms",
    ):
        if name in data:
            setattr(settings, name, _int_field("audit", name, data[name]))
    for name in ("record_trace", "use_throttling"):
        if name in data:
            if not isinstance(data[name], bool):
                raise ValueError(f"'audit.{name}' must be a boolean")
            setattr(settings, name, data[name])
    if "pass_name" in data:
        settings.pass_name = str(data["pass_name"])
    if "chrome_flags" in data:
        if not isinstance(data["chrome_flags"], list):
            raise ValueError("'audit.chrome_flags' must be a list of strings")
        settings.chrome_flags = tuple(str(f) for f in data["chrome_flags"])
    if "summary_metrics" in data:
        metrics = data["summary_metrics"]
        if not isinstance(metrics, list):
            raise ValueError("'audit.summary_metrics' must be a list")
        unknown = [m for m in metrics if m not in SUMMARY_METRICS]
        if unknown:
            raise ValueError(f"Unknown summary metrics: {', '.join(map(str, unknown))}")
        settings.summary_metrics = tuple(metrics)
    return settings


def config_from_dict(data: Optional[Dict[str, Any]]) -> AuditStatsConfig:
    """Build a configuration from a parsed mapping.

    Raises:
        ValueError: On unknown sections or keys, or values of the wrong type.
    """
    if data is None:
        return AuditStatsConfig()
    if not isinstance(data, dict):
        raise ValueError("Configuration must map to a dictionary at top-level.")
    data = normalize_yaml_dict_keys(data)
    _check_keys("config", data, AuditStatsConfig)

    sections: Dict[str, Dict[str, Any]] = {}
    for name in ("stats", "audit"):
        section = data.get(name)
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise ValueError(f"'{name}' must be a mapping")
        sections[name] = normalize_yaml_dict_keys(section)

    return AuditStatsConfig(
        stats=_parse_stats(sections["stats"]),
        audit=_parse_audit(sections["audit"]),
    )


def load_config(path: Path) -> AuditStatsConfig:
    """Load and validate a YAML configuration file.

    Raises:
        ValueError: If the file is not valid YAML or fails validation.
    """
    try:
        data = yaml.safe_load(Path(path).read_text())
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in configuration file {path}: {exc}") from exc
    return config_from_dict(data)
