"""Tests for the per-page audit pipeline."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from auditstats.aggregator import Aggregator
from auditstats.config import AuditSettings
from auditstats.pipeline import ERROR, PAGE_SUMMARY, AuditPipeline, PublishedMessage


class FakeRunner:
    """Returns canned audit results per URL and records the config it received."""

    def __init__(self, results: Dict[str, Any]) -> None:
        self.results = results
        self.configs: List[Dict[str, Any]] = []

    def __call__(self, target: str, config: Dict[str, Any]) -> Any:
        self.configs.append(config)
        result = self.results[target]
        if isinstance(result, Exception):
            raise result
        return result


def _pipeline(results: Dict[str, Any], settings: AuditSettings = None):
    messages: List[PublishedMessage] = []
    runner = FakeRunner(results)
    pipeline = AuditPipeline(runner, Aggregator(), messages.append, settings)
    return pipeline, runner, messages


def test_process_publishes_summary_per_group(make_audits) -> None:
    pipeline, _runner, messages = _pipeline(
        {"https://a/": make_audits(100), "https://b/": make_audits(300)}
    )

    assert pipeline.process("https://a/", "A") is True
    assert [(m.type, m.group, m.url) for m in messages] == [
        (PAGE_SUMMARY, "A", "https://a/")
    ]

    assert pipeline.process("https://b/", "B") is True
    latest = messages[1:]
    assert [(m.type, m.group) for m in latest] == [(PAGE_SUMMARY, "A"), (PAGE_SUMMARY, "B")]
    assert all(m.url == "https://b/" for m in latest)
    assert latest[1].data["domsize"]["mean"] == 300
    assert latest[1].source == "lighthouse"


def test_summary_messages_filtered_to_summary_metrics(make_audits) -> None:
    settings = AuditSettings(summary_metrics=("domsize", "timetofirstbyte"))
    pipeline, _runner, messages = _pipeline({"u": make_audits()}, settings)

    pipeline.process("u", "A")
    assert set(messages[0].data) == {"domsize", "timetofirstbyte"}


def test_runner_failure_is_isolated(make_audits) -> None:
    pipeline, _runner, messages = _pipeline(
        {"good": make_audits(100), "bad": RuntimeError("chrome crashed")}
    )

    assert pipeline.process("bad", "A") is False
    assert pipeline.aggregator.summarize() is None
    assert messages == [
        PublishedMessage(
            ERROR,
            {"error": "chrome crashed", "type": "RuntimeError"},
            url="bad",
            group="A",
        )
    ]

    assert pipeline.process("good", "A") is True
    assert messages[-1].type == PAGE_SUMMARY


def test_malformed_result_is_logged_and_skipped(make_audits, caplog) -> None:
    broken = make_audits()
    del broken["dom-size"]
    pipeline, _runner, messages = _pipeline({"good": make_audits(), "broken": broken})

    pipeline.process("good", "A")
    with caplog.at_level("ERROR", logger="auditstats"):
        assert pipeline.process("broken", "A") is False

    assert "MissingMetricError" in caplog.text
    assert messages[-1].type == ERROR
    assert messages[-1].data["type"] == "MissingMetricError"
    assert pipeline.aggregator.sample_count == 1


def test_runner_receives_lighthouse_config(make_audits) -> None:
    pipeline, runner, _messages = _pipeline({"u": make_audits()})
    pipeline.process("u", "A")

    config = runner.configs[0]
    assert config["flags"]["port"] == 9222
    assert config["config"]["passes"][0]["passName"] == "auditstatsPass"
    assert "critical-request-chains" in config["config"]["audits"]


def test_without_publisher_only_aggregates(make_audits) -> None:
    pipeline = AuditPipeline(FakeRunner({"u": make_audits()}))
    assert pipeline.process("u", "A") is True
    assert pipeline.publish_summary("u") == 0
    assert pipeline.aggregator.groups == ("A",)


@pytest.mark.parametrize("workers", [1, 4])
def test_process_many(make_audits, workers: int) -> None:
    results = {f"https://site/{i}": make_audits(i) for i in range(20)}
    results["https://site/broken"] = ValueError("bad report")
    pipeline, _runner, _messages = _pipeline(results)

    items = [(url, "even" if i % 2 == 0 else "odd") for i, url in enumerate(results)]
    assert pipeline.process_many(items, max_workers=workers) == 20

    summary = pipeline.aggregator.summarize()
    assert summary.overall["bootuptime"]["total_samples"] == 20
    assert set(summary.groups) == {"even", "odd"}


def test_process_many_rejects_zero_workers() -> None:
    pipeline, _runner, _messages = _pipeline({})
    with pytest.raises(ValueError):
        pipeline.process_many([], max_workers=0)


def test_failing_publisher_does_not_stop_the_batch(make_audits, caplog) -> None:
    def publisher(message: PublishedMessage) -> None:
        raise RuntimeError("bus down")

    runner = FakeRunner({"u1": make_audits(100), "u2": make_audits(200)})
    aggregator = Aggregator()
    pipeline = AuditPipeline(runner, aggregator, publisher)

    with caplog.at_level("ERROR", logger="auditstats"):
        assert pipeline.process_many([("u1", "A"), ("u2", "A")]) == 0
    assert aggregator.sample_count == 2
    assert "RuntimeError: bus down" in caplog.text
    assert "Could not publish error for u1" in caplog.text
