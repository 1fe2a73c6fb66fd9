"""Per-page audit pipeline around an :class:`Aggregator`.

The pipeline asks an audit runner for each page's audit result, feeds it to
the aggregator and publishes the refreshed per-group summaries. A failing page
is logged and published as an ``error`` message; it never affects pages
already aggregated or still to come. A publisher that raises is treated as a
page failure too.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from auditstats.aggregator import Aggregator
from auditstats.config import AuditSettings
from auditstats.logging import get_logger

logger = get_logger(__name__)

SOURCE = "lighthouse"
PAGE_SUMMARY = "lighthouse.pageSummary"
ERROR = "error"

AuditRunner = Callable[[str, Dict[str, Any]], Mapping[str, Any]]


@dataclass(frozen=True)
class PublishedMessage:
    """Message handed to a publisher.

    Attributes:
        type: Message type (``lighthouse.pageSummary`` or ``error``).
        data: Message payload.
        url: Page that triggered the message.
        group: Group the payload belongs to, if any.
        source: Producer name.
    """

    type: str
    data: Dict[str, Any]
    url: str
    group: Optional[str] = None
    source: str = SOURCE


Publisher = Callable[[PublishedMessage], None]


class AuditPipeline:
    """Drive aggregation page by page.

    Args:
        runner: Callable returning the audit result for a target URL. Receives
            the target and the dictionary built by :meth:`audit_config`.
        aggregator: Aggregator receiving the results.
        publisher: Optional callable receiving summary and error messages.
        settings: Audit settings; defaults to :class:`AuditSettings`.
    """

    def __init__(
        self,
        runner: AuditRunner,
        aggregator: Optional[Aggregator] = None,
        publisher: Optional[Publisher] = None,
        settings: Optional[AuditSettings] = None,
    ) -> None:
        self.runner = runner
        self.aggregator = aggregator if aggregator is not None else Aggregator()
        self.publisher = publisher
        self.settings = settings if settings is not None else AuditSettings()

    def audit_config(self) -> Dict[str, Any]:
        """Return launcher flags and Lighthouse config for the runner."""
        return {
            "flags": self.settings.lighthouse_flags(),
            "config": self.settings.lighthouse_config(),
        }

    def _publish(self, message: PublishedMessage) -> None:
        if self.publisher is not None:
            self.publisher(message)

    def _publish_error(self, url: str, group: str, error: Exception) -> None:
        message = PublishedMessage(
            ERROR,
            {"error": str(error), "type": type(error).__name__},
            url=url,
            group=group,
        )
        try:
            self._publish(message)
        except Exception as e:
            logger.error(f"Could not publish error for {url}: {type(e).__name__}: {e}")

    def publish_summary(self, url: str) -> int:
        """Publish one page-summary message per group.

        Returns:
            Number of messages published (0 when nothing is aggregated).
        """
        summary = self.aggregator.summarize()
        if summary is None or self.publisher is None:
            return 0
        summary = summary.filtered(self.settings.summary_metrics)
        for group, group_summary in summary.groups.items():
            self._publish(
                PublishedMessage(PAGE_SUMMARY, group_summary, url=url, group=group)
            )
        return len(summary.groups)

    def process(self, target: str, group: str) -> bool:
        """Audit one page and aggregate its result.

        Returns:
            True when the page was aggregated and its summaries published.
            False when auditing, ingestion or publishing failed; a publishing
            failure leaves the page's samples aggregated.
        """
        logger.info(f"Collecting Lighthouse result for {target}")
        try:
            result = self.runner(target, self.audit_config())
            self.aggregator.add_to_aggregate(result, group)
            self.publish_summary(target)
        except Exception as e:
            logger.error(
                f"Error creating Lighthouse result for {target}: {type(e).__name__}: {e}"
            )
            self._publish_error(target, group, e)
            return False

        logger.info(f"Finished collecting Lighthouse result for {target}")
        return True

    def process_many(
        self, items: Iterable[Tuple[str, str]], max_workers: int = 1
    ) -> int:
        """Process ``(target, group)`` pairs, optionally in parallel.

        Args:
            items: Pages to audit with their group keys.
            max_workers: Thread count; 1 processes sequentially.

        Returns:
            Number of pages aggregated successfully.

        Raises:
            ValueError: If ``max_workers`` is less than 1.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        pairs = list(items)
        if max_workers == 1:
            return sum(self.process(target, group) for target, group in pairs)

        logger.debug(f"Processing {len(pairs)} pages with {max_workers} workers")
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(lambda pair: self.process(*pair), pairs))
        return sum(outcomes)
