"""Batch scheduler: processes one bounded batch of the crawl frontier."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, List, Optional, TypeVar

from seocrawl.cancellation import CancellationToken
from seocrawl.constants import (
    BROKEN_STATUS_THRESHOLD,
    DEFAULT_BATCH_SIZE,
    DEFAULT_CALL_TIMEOUT_SECONDS,
    DEFAULT_LOAD_SHED_FACTOR,
)
from seocrawl.exceptions import (
    AnalysisFailure,
    CrawlCancelled,
    ExtractionFailure,
    MalformedLinkUrl,
    format_error_message,
    service_error_message,
)
from seocrawl.models import AnalysisRecord, CrawledPage, LinkCandidate
from seocrawl.services import LinkExtractor, PageAnalyzer
from seocrawl.session import CrawlSession
from seocrawl.urls import parse_absolute_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BatchOutcome:
    """What happened while processing one batch."""
    pages: List[CrawledPage] = field(default_factory=list)
    no_work: bool = False
    completed: bool = False  # page budget reached
    extraction_calls: int = 0
    skipped_extractions: int = 0
    links_enqueued: int = 0
    links_dropped: int = 0


class BatchScheduler:
    """Runs the analyze / merge inlinks / discover links cycle for one batch.

    All frontier, registry and inlink graph mutations happen in the calling
    task. Link extraction calls are issued one page at a time, in the order
    the pages were emitted.
    """

    def __init__(
        self,
        analyzer: PageAnalyzer,
        extractor: LinkExtractor,
        batch_size: int = DEFAULT_BATCH_SIZE,
        load_shed_factor: float = DEFAULT_LOAD_SHED_FACTOR,
        call_timeout: Optional[float] = DEFAULT_CALL_TIMEOUT_SECONDS,
    ):
        """Initialize the scheduler.

        Args:
            analyzer: Page analyzer service
            extractor: Link extractor service
            batch_size: Maximum URLs per analyzer call
            load_shed_factor: Skip link extraction while the frontier holds more
                than (remaining budget * factor) URLs
            call_timeout: Seconds allowed for each analyzer/extractor call (None = no limit).
                On timeout the crawl stops waiting, but a collaborator running its
                request in a worker thread keeps that thread busy until the request
                returns; LLMClient bounds this with its own request_timeout.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.analyzer = analyzer
        self.extractor = extractor
        self.batch_size = batch_size
        self.load_shed_factor = load_shed_factor
        self.call_timeout = call_timeout

    async def run_batch(
        self, session: CrawlSession, token: Optional[CancellationToken] = None
    ) -> BatchOutcome:
        """Process exactly one batch.

        Args:
            session: Crawl state to read and update
            token: Optional cancellation token checked before each external call

        Returns:
            BatchOutcome for the batch

        Raises:
            AnalysisFailure: If the analyzer fails or returns the wrong number of records
            ExtractionFailure: If the link extractor fails for any page
            CrawlCancelled: If the token is set at a suspension point
        """
        self._check_cancelled(token)

        size = min(self.batch_size, session.remaining_budget)
        batch_urls = session.frontier.dequeue_batch(size)
        if not batch_urls:
            return BatchOutcome(no_work=True)

        logger.info(f"Analyzing batch of {len(batch_urls)} URLs")
        records = await self._analyze(batch_urls, session.seed_url)

        # Inlinks are a snapshot: edges found later in this batch are not attached
        pages = [
            CrawledPage.from_record(record, session.inlink_graph.edges_for(record.url))
            for record in records
        ]
        session.results.extend(pages)
        session.analyzed_count += len(pages)
        session.batches += 1
        outcome = BatchOutcome(pages=pages)

        if session.budget_exhausted:
            outcome.completed = True
            return outcome

        for page in pages:
            if page.status >= BROKEN_STATUS_THRESHOLD:
                logger.debug(f"Not scanning links on {page.url} (status {page.status})")
                continue

            if len(session.frontier) > session.remaining_budget * self.load_shed_factor:
                outcome.skipped_extractions += 1
                logger.debug(f"Frontier oversupplied, skipping link extraction for {page.url}")
                continue

            self._check_cancelled(token)
            links = await self._extract(page.url, session.site_domain)
            outcome.extraction_calls += 1
            self._merge_links(session, page, links, outcome)

        return outcome

    def _merge_links(
        self,
        session: CrawlSession,
        page: CrawledPage,
        links: List[LinkCandidate],
        outcome: BatchOutcome,
    ) -> None:
        for link in links:
            try:
                parts = parse_absolute_url(link.url)
            except MalformedLinkUrl as e:
                outcome.links_dropped += 1
                logger.debug(f"Dropping link from {page.url}: {e}")
                continue

            session.inlink_graph.record_edge(link.url, page.url, link.anchor_text)

            if parts.hostname == session.site_domain and session.frontier.enqueue(link.url):
                outcome.links_enqueued += 1

    async def _analyze(self, urls: List[str], context_url: str):
        context = "page analysis"
        try:
            records = await self._with_timeout(self.analyzer.analyze(urls, context_url))
        except AnalysisFailure:
            raise
        except asyncio.TimeoutError as e:
            raise AnalysisFailure(
                service_error_message(context, f"timed out after {self.call_timeout}s")
            ) from e
        except Exception as e:
            raise AnalysisFailure(service_error_message(context, str(e))) from e

        if not _is_list_of(records, AnalysisRecord):
            logger.error(f"Analyzer returned {type(records).__name__} instead of a list of AnalysisRecord")
            raise AnalysisFailure(format_error_message(context), kind="format")
        if len(records) != len(urls):
            logger.error(f"Analyzer returned {len(records)} records for {len(urls)} URLs")
            raise AnalysisFailure(format_error_message(context), kind="format")
        return list(records)

    async def _extract(self, page_url: str, site_domain: str) -> List[LinkCandidate]:
        context = f"link extraction for {page_url}"
        try:
            links = await self._with_timeout(self.extractor.extract(page_url, site_domain))
        except ExtractionFailure:
            raise
        except asyncio.TimeoutError as e:
            raise ExtractionFailure(
                service_error_message(context, f"timed out after {self.call_timeout}s"),
                page_url=page_url,
            ) from e
        except Exception as e:
            raise ExtractionFailure(service_error_message(context, str(e)), page_url=page_url) from e

        if not _is_list_of(links, LinkCandidate):
            logger.error(f"Link extractor returned {type(links).__name__} instead of a list of LinkCandidate")
            raise ExtractionFailure(format_error_message(context), kind="format", page_url=page_url)
        return list(links)

    async def _with_timeout(self, call: Awaitable[T]) -> T:
        if self.call_timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.call_timeout)

    @staticmethod
    def _check_cancelled(token: Optional[CancellationToken]) -> None:
        if token is not None and token.cancelled:
            raise CrawlCancelled(token.reason or "Crawl cancelled")


def _is_list_of(value, item_type) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(item, item_type) for item in value)
