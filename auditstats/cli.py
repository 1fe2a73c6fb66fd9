"""Command-line interface for auditstats."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from time import perf_counter
from typing import Any, List, Optional

from auditstats.aggregator import Aggregator
from auditstats.config import DEFAULT_CONFIG, AuditStatsConfig, load_config
from auditstats.errors import AuditStatsError
from auditstats.io import audits_from_report, group_for_report, iter_report_paths, read_report
from auditstats.logging import get_logger, level_for_flags, set_global_log_level
from auditstats.metrics import METRIC_NAMES, extraction_rule, normalize_metric_name
from auditstats.stats import BACKEND_NAMES
from auditstats.utils.output_paths import ensure_parent_dir, summary_path

logger = get_logger(__name__)


def _format_table(headers: List[str], rows: List[List[Any]], min_width: int = 8) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers
        rows: Data rows
        min_width: Minimum column width

    Returns:
        Formatted table string
    """
    if not rows:
        return ""

    all_data = [headers] + rows
    col_widths = []
    for col_idx in range(len(headers)):
        max_width = max(len(str(row[col_idx])) for row in all_data)
        col_widths.append(max(max_width, min_width))

    def format_row(row_data: List[Any]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    for row in rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def _format_duration(seconds: float) -> str:
    """Return a concise duration string ("123.0 ms", "1.23 s", "1m 15.2s")."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    if seconds < 60.0:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    rem = seconds - minutes * 60
    return f"{minutes}m {rem:.1f}s"


def _print_metrics() -> None:
    rows = [
        [metric, normalize_metric_name(metric), extraction_rule(metric).value]
        for metric in METRIC_NAMES
    ]
    print(_format_table(["Metric", "Summary key", "Source field"], rows))


def _resolve_config(config_path: Optional[Path], backend: Optional[str]) -> AuditStatsConfig:
    config = load_config(config_path) if config_path is not None else DEFAULT_CONFIG
    if backend is not None:
        config = replace(config, stats=replace(config.stats, backend=backend))
    return config


def _summarize_reports(
    paths: List[Path],
    group: Optional[str],
    config_path: Optional[Path],
    backend: Optional[str],
    output: Optional[Path],
    stdout: bool,
    fmt: str,
) -> None:
    """Aggregate saved Lighthouse reports and write the grouped summary.

    Reports that cannot be read or aggregated are logged and skipped. Exits
    with status 1 when no report was aggregated or on configuration errors.
    """
    _start_time = perf_counter()
    try:
        config = _resolve_config(config_path, backend)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load configuration: {type(e).__name__}: {e}")
        print(f"❌ ERROR: Failed to load configuration: {e}")
        sys.exit(1)

    aggregator = Aggregator(config.stats.create_backend())
    failed = 0
    for path in iter_report_paths(paths):
        try:
            report = read_report(path)
            report_group = group or group_for_report(report)
            aggregator.add_to_aggregate(audits_from_report(report), report_group)
        except (OSError, ValueError, AuditStatsError) as e:
            failed += 1
            logger.error(f"Skipping report {path}: {type(e).__name__}: {e}")
            continue
        logger.debug(f"Aggregated {path} into group '{report_group}'")

    summary = aggregator.summarize()
    if summary is None:
        logger.error("No reports could be aggregated")
        print("❌ ERROR: No reports could be aggregated")
        sys.exit(1)

    logger.info(
        f"Aggregated {aggregator.sample_count} reports into "
        f"{len(aggregator.groups)} groups ({failed} skipped)"
    )

    if fmt == "csv":
        text = summary.to_dataframe(include_overall=True).to_csv(index=False)
    else:
        text = json.dumps(summary.to_dict(), indent=2)

    effective_output = summary_path(output, fmt)
    ensure_parent_dir(effective_output)
    logger.info(f"Writing summary to: {effective_output}")
    effective_output.write_text(text)
    print(f"✅ Summary written to: {effective_output}")
    if stdout:
        print(text)

    logger.info(f"Summary completed in {_format_duration(perf_counter() - _start_time)}")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``auditstats`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="auditstats",
        description="Aggregate Lighthouse audit results into grouped statistics.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Suppress console output (logs only)"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{summarize,metrics}",
        help="Available commands",
    )

    summarize_parser = subparsers.add_parser(
        "summarize", help="Summarize saved Lighthouse JSON reports"
    )
    summarize_parser.add_argument(
        "paths", type=Path, nargs="+", help="Report files or directories of *.json reports"
    )
    summarize_parser.add_argument(
        "--group",
        "-g",
        default=None,
        help="Group key for every report (default: host name of the audited URL)",
    )
    summarize_parser.add_argument(
        "--config", "-c", type=Path, default=None, help="YAML configuration file"
    )
    summarize_parser.add_argument(
        "--backend",
        "-b",
        choices=BACKEND_NAMES,
        default=None,
        help="Statistics backend (overrides the configuration)",
    )
    summarize_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Summary file (default: lighthouse.summary.<format> in the current directory)",
    )
    summarize_parser.add_argument(
        "--stdout", action="store_true", help="Print the summary to stdout"
    )
    summarize_parser.add_argument(
        "--format", "-f", choices=("json", "csv"), default="json", help="Output format"
    )

    subparsers.add_parser("metrics", help="List the metrics read from each report")

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    set_global_log_level(level_for_flags(verbose=args.verbose, quiet=args.quiet))
    logger.debug("Debug logging enabled")

    if args.command == "summarize":
        _summarize_reports(
            paths=args.paths,
            group=args.group,
            config_path=args.config,
            backend=args.backend,
            output=args.output,
            stdout=args.stdout,
            fmt=args.format,
        )
    elif args.command == "metrics":
        _print_metrics()


if __name__ == "__main__":
    main()
