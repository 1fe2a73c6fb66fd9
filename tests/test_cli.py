import json
from pathlib import Path

import pandas as pd
import pytest

from auditstats import cli


def extract_json_from_stdout(output: str) -> str:
    """Extract the JSON document from stdout that may contain status lines."""
    json_start = output.find("{")
    if json_start == -1:
        return output

    brace_count = 0
    for i in range(json_start, len(output)):
        if output[i] == "{":
            brace_count += 1
        elif output[i] == "}":
            brace_count -= 1
            if brace_count == 0:
                return output[json_start : i + 1]
    return output


def test_cli_summarize_directory(write_report, tmp_path: Path) -> None:
    write_report("a1.json", url="https://a.example/", value=100)
    write_report("a2.json", url="https://a.example/about", value=300)
    write_report("b1.json", url="https://b.example/", value=50)
    out_file = tmp_path / "out" / "summary.json"

    cli.main(["summarize", str(tmp_path / "reports"), "--output", str(out_file)])

    data = json.loads(out_file.read_text())
    assert set(data["groups"]) == {"a.example", "b.example"}
    assert data["groups"]["a.example"]["domsize"]["mean"] == 200
    assert data["groups"]["b.example"]["domsize"]["total_samples"] == 1
    assert data["overall"]["domsize"]["total_samples"] == 3


def test_cli_fixed_group_and_stdout(write_report, tmp_path: Path, capsys) -> None:
    a = write_report("a.json", url="https://a.example/")
    b = write_report("b.json", url="https://b.example/")
    out_file = tmp_path / "s.json"

    cli.main(
        ["summarize", str(a), str(b), "--group", "mobile", "-o", str(out_file), "--stdout"]
    )

    captured = capsys.readouterr()
    data = json.loads(extract_json_from_stdout(captured.out))
    assert list(data["groups"]) == ["mobile"]
    assert "Summary written to" in captured.out


def test_cli_skips_bad_reports(write_report, tmp_path: Path, caplog) -> None:
    write_report("good.json")
    broken = write_report("broken.json")
    report = json.loads(broken.read_text())
    del report["audits"]["dom-size"]
    broken.write_text(json.dumps(report))
    (tmp_path / "reports" / "garbage.json").write_text("{not json")
    out_file = tmp_path / "s.json"

    cli.main(["summarize", str(tmp_path / "reports"), "-o", str(out_file)])

    data = json.loads(out_file.read_text())
    assert data["overall"]["domsize"]["total_samples"] == 1
    assert "Skipping report" in caplog.text


def test_cli_exits_when_nothing_aggregated(tmp_path: Path, capsys) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"audits": {}}))

    with pytest.raises(SystemExit) as exc:
        cli.main(["summarize", str(bad), "-o", str(tmp_path / "s.json")])

    assert exc.value.code == 1
    assert "No reports could be aggregated" in capsys.readouterr().out
    assert not (tmp_path / "s.json").exists()


def test_cli_missing_file_is_skipped(write_report, tmp_path: Path) -> None:
    good = write_report("good.json")
    out_file = tmp_path / "s.json"
    cli.main(["summarize", str(good), str(tmp_path / "missing.json"), "-o", str(out_file)])
    assert out_file.exists()


def test_cli_csv_output(write_report, tmp_path: Path) -> None:
    write_report("a.json", url="https://a.example/", value=120)
    out_file = tmp_path / "s.csv"

    cli.main(["summarize", str(tmp_path / "reports"), "--format", "csv", "-o", str(out_file)])

    df = pd.read_csv(out_file)
    assert set(df["group"]) == {"a.example", "*"}
    row = df[(df["group"] == "a.example") & (df["metric"] == "bootuptime")]
    assert row["max"].iloc[0] == 120


def test_cli_default_output_path(write_report, tmp_path: Path, monkeypatch) -> None:
    report = write_report("a.json")
    monkeypatch.chdir(tmp_path)
    cli.main(["summarize", str(report)])
    assert (tmp_path / "lighthouse.summary.json").exists()


def test_cli_backend_and_config(write_report, tmp_path: Path) -> None:
    write_report("a.json", value=1)
    write_report("b.json", value=2)
    config = tmp_path / "auditstats.yaml"
    config.write_text("stats:\n  percentiles: [50]\n  decimals: 1\n")
    out_file = tmp_path / "s.json"

    cli.main(
        [
            "summarize",
            str(tmp_path / "reports"),
            "--config",
            str(config),
            "--backend",
            "numpy",
            "-o",
            str(out_file),
        ]
    )

    stats = json.loads(out_file.read_text())["overall"]["bootuptime"]
    assert stats["p50"] == 1.5
    assert "p90" not in stats


def test_cli_invalid_config_exits(write_report, tmp_path: Path) -> None:
    report = write_report("a.json")
    config = tmp_path / "bad.yaml"
    config.write_text("stats:\n  backend: tdigest\n")

    with pytest.raises(SystemExit) as exc:
        cli.main(["summarize", str(report), "--config", str(config)])
    assert exc.value.code == 1


def test_cli_metrics_table(capsys) -> None:
    cli.main(["metrics"])
    out = capsys.readouterr().out
    assert "critical-request-chains" in out
    assert "criticalrequestchains" in out
    assert "displayValue" in out
    assert out.count("rawValue") == 12


def test_cli_no_args_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 0
    assert "usage" in capsys.readouterr().out


def test_format_duration() -> None:
    assert cli._format_duration(0.123) == "123.0 ms"
    assert cli._format_duration(1.234) == "1.23 s"
    assert cli._format_duration(75.2) == "1m 15.2s"


def test_cli_malformed_yaml_config_exits(write_report, tmp_path: Path, capsys) -> None:
    report = write_report("a.json")
    config = tmp_path / "broken.yaml"
    config.write_text("stats: [unclosed\n")

    with pytest.raises(SystemExit) as exc:
        cli.main(["summarize", str(report), "--config", str(config)])
    assert exc.value.code == 1
    assert "Failed to load configuration" in capsys.readouterr().out
