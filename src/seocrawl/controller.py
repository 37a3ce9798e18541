"""Crawl controller: drives batches until the crawl completes or fails."""

import logging
import time
from dataclasses import replace
from typing import Callable, Iterable, List, Optional

from seocrawl.cancellation import CancellationToken
from seocrawl.config import CrawlConfig
from seocrawl.exceptions import (
    AnalysisFailure,
    CrawlCancelled,
    CrawlError,
    ExtractionFailure,
    InvalidSeedUrl,
)
from seocrawl.models import CrawledPage, CrawlProgress, CrawlState, CrawlSummary
from seocrawl.rate_limiter import FixedIntervalLimiter
from seocrawl.scheduler import BatchScheduler
from seocrawl.services import LinkExtractor, PageAnalyzer
from seocrawl.session import CrawlSession
from seocrawl.urls import site_domain_for

logger = logging.getLogger(__name__)


class CrawlController:
    """Runs one breadth-first crawl from a seed URL.

    The controller owns the crawl session exclusively. Observers receive
    read-only CrawlProgress snapshots and each batch's pages as soon as the
    batch is merged, before the next batch starts.

    State machine:
        IDLE -> INITIALIZING -> RUNNING -> COMPLETED
                                RUNNING -> FAILED | CANCELLED
    """

    def __init__(
        self,
        analyzer: PageAnalyzer,
        extractor: LinkExtractor,
        config: Optional[CrawlConfig] = None,
        limiter: Optional[FixedIntervalLimiter] = None,
        on_progress: Optional[Callable[[CrawlProgress], None]] = None,
        on_batch: Optional[Callable[[List[CrawledPage]], None]] = None,
        token: Optional[CancellationToken] = None,
    ):
        """Initialize the controller.

        Args:
            analyzer: Page analyzer service
            extractor: Link extractor service
            config: Crawl configuration (defaults to CrawlConfig())
            limiter: Inter-batch limiter (defaults to the configured fixed delay)
            on_progress: Optional callback receiving progress snapshots
            on_batch: Optional callback receiving each batch's pages
            token: Optional cancellation token
        """
        self.config = config or CrawlConfig()
        self.config.validate()
        self.scheduler = BatchScheduler(
            analyzer,
            extractor,
            batch_size=self.config.batch_size,
            load_shed_factor=self.config.load_shed_factor,
            call_timeout=self.config.call_timeout_seconds,
        )
        self.limiter = limiter or FixedIntervalLimiter(self.config.batch_delay_seconds)
        self.on_progress = on_progress
        self.on_batch = on_batch
        self.token = token or CancellationToken()

        self.state = CrawlState.IDLE
        self.error: Optional[str] = None
        self._session: Optional[CrawlSession] = None
        self._started: Optional[float] = None
        self._elapsed = 0.0

    @property
    def results(self) -> List[CrawledPage]:
        """Pages analyzed so far, in submission order."""
        return list(self._session.results) if self._session else []

    @property
    def session(self) -> Optional[CrawlSession]:
        return self._session

    def cancel(self, reason: str = "Crawl cancelled") -> None:
        self.token.cancel(reason)

    def progress(self, message: str = "") -> CrawlProgress:
        session = self._session
        return CrawlProgress(
            state=self.state,
            discovered=len(session.visited) if session else 0,
            analyzed=session.analyzed_count if session else 0,
            target=self.config.target_page_count,
            batches=session.batches if session else 0,
            message=message,
        )

    async def run(self, seed_url: str, exclusions: Iterable[str] = ()) -> CrawlSummary:
        """Crawl from ``seed_url`` until the budget is spent or the frontier is empty.

        Failures inside the crawl do not propagate: collaborator errors,
        malformed collaborator output and exceptions raised by observers all
        move the controller to FAILED, keep the pages analyzed so far and
        report the error in the summary.

        Args:
            seed_url: Absolute URL to start from
            exclusions: URLs that must never be analyzed

        Returns:
            CrawlSummary describing how the crawl ended

        Raises:
            InvalidSeedUrl: If the seed cannot be parsed; the crawl never starts
            CrawlError: If this controller has already run
        """
        if self.state != CrawlState.IDLE:
            raise CrawlError("A crawl controller can only run once")

        self._started = time.monotonic()
        try:
            self._initialize(seed_url, exclusions)
            self._set_state(CrawlState.RUNNING)
            await self._run_loop()
        except InvalidSeedUrl:
            raise
        except (AnalysisFailure, ExtractionFailure) as e:
            logger.error(f"Crawl failed: {e.message}")
            self.error = e.message
            self._set_state(CrawlState.FAILED, e.message)
        except CrawlCancelled as e:
            logger.warning(f"Crawl cancelled after {self._session.analyzed_count} pages")
            self.error = e.message
            self._set_state(CrawlState.CANCELLED, e.message)
        except Exception as e:
            message = f"Unexpected error during crawl: {str(e) or type(e).__name__}"
            logger.exception(message)
            self.error = message
            self.state = CrawlState.FAILED
            try:
                self._publish(message)
            except Exception:
                logger.exception("Progress observer failed while reporting the crawl failure")
        else:
            message = f"Crawl complete! Analyzed {self._session.analyzed_count} pages."
            logger.info(message)
            self._set_state(CrawlState.COMPLETED, message)
        finally:
            self._elapsed = time.monotonic() - self._started

        return self.summary()

    def _initialize(self, seed_url: str, exclusions: Iterable[str]) -> None:
        self._set_state(CrawlState.INITIALIZING)
        try:
            site_domain = site_domain_for(seed_url)
        except InvalidSeedUrl as e:
            self.error = e.message
            self._set_state(CrawlState.FAILED, e.message)
            raise

        session = CrawlSession(
            seed_url=seed_url,
            site_domain=site_domain,
            target_page_count=self.config.target_page_count,
        )
        excluded = session.frontier.preseed(exclusions)
        if excluded:
            logger.info(f"Excluding {excluded} URLs from the crawl.")

        if not session.frontier.enqueue(seed_url):
            logger.warning(f"Seed URL {seed_url} is excluded; nothing to crawl")

        self._session = session

    async def _run_loop(self) -> None:
        session = self._session
        while not session.frontier.is_empty() and not session.budget_exhausted:
            self._publish(
                f"Analyzing batch... Discovered: {len(session.visited)}, "
                f"Analyzed: {session.analyzed_count}/{session.target_page_count}"
            )

            outcome = await self.scheduler.run_batch(session, self.token)
            if outcome.no_work:
                break

            if self.on_batch:
                self.on_batch(list(outcome.pages))
            logger.info(
                f"Batch {session.batches}: analyzed {session.analyzed_count}/"
                f"{session.target_page_count}, discovered {len(session.visited)}, "
                f"+{outcome.links_enqueued} queued"
            )
            self._publish(
                f"Discovered: {len(session.visited)}, "
                f"Analyzed: {session.analyzed_count}/{session.target_page_count}"
            )

            if outcome.completed:
                break

            await self.limiter.wait(self.token)
            if self.token.cancelled:
                raise CrawlCancelled(self.token.reason or "Crawl cancelled")

    def summary(self) -> CrawlSummary:
        session = self._session
        return CrawlSummary(
            seed_url=session.seed_url if session else "",
            site_domain=session.site_domain if session else None,
            state=self.state,
            analyzed_count=session.analyzed_count if session else 0,
            discovered_count=len(session.visited) if session else 0,
            batches=session.batches if session else 0,
            elapsed_seconds=self._elapsed,
            error=self.error,
        )

    def backfilled_results(self) -> List[CrawledPage]:
        """Copies of the results with inlinks taken from the final graph.

        The emitted results keep their emission-time snapshots; this is an
        explicit opt-in for reports that want every edge seen during the crawl.
        """
        if not self._session:
            return []
        graph = self._session.inlink_graph
        return [replace(page, inlinks=tuple(graph.edges_for(page.url))) for page in self._session.results]

    def _set_state(self, state: CrawlState, message: str = "") -> None:
        self.state = state
        self._publish(message)

    def _publish(self, message: str) -> None:
        if self.on_progress:
            self.on_progress(self.progress(message))
