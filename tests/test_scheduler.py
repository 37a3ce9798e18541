"""Tests for the batch scheduler."""

import asyncio

import pytest

from conftest import FakeAnalyzer, FakeExtractor
from seocrawl.cancellation import CancellationToken
from seocrawl.exceptions import AnalysisFailure, CrawlCancelled, ExtractionFailure
from seocrawl.models import AnalysisRecord, Inlink
from seocrawl.scheduler import BatchScheduler
from seocrawl.session import CrawlSession

SEED = "https://example.com/"


def make_session(urls=(SEED,), target=10):
    session = CrawlSession(seed_url=SEED, site_domain="example.com", target_page_count=target)
    for url in urls:
        session.frontier.enqueue(url)
    return session


class TestBatchScheduler:
    """Test cases for BatchScheduler."""

    @pytest.mark.asyncio
    async def test_empty_frontier_is_no_work(self):
        analyzer = FakeAnalyzer()
        scheduler = BatchScheduler(analyzer, FakeExtractor())

        outcome = await scheduler.run_batch(make_session(urls=()))

        assert outcome.no_work is True
        assert analyzer.calls == []

    @pytest.mark.asyncio
    async def test_batch_truncated_to_remaining_budget(self):
        urls = [f"https://example.com/{i}" for i in range(5)]
        session = make_session(urls=urls, target=3)
        analyzer = FakeAnalyzer()
        extractor = FakeExtractor()

        outcome = await BatchScheduler(analyzer, extractor, batch_size=5).run_batch(session)

        assert analyzer.calls == [urls[:3]]
        assert session.analyzed_count == 3
        assert outcome.completed is True
        assert extractor.calls == []  # no discovery once the budget is spent
        assert session.frontier.peek() == urls[3:]

    @pytest.mark.asyncio
    async def test_results_keep_submission_order(self):
        urls = [f"https://example.com/{i}" for i in range(4)]
        session = make_session(urls=urls)

        await BatchScheduler(FakeAnalyzer(), FakeExtractor()).run_batch(session)

        assert [page.url for page in session.results] == urls

    @pytest.mark.asyncio
    async def test_inlinks_are_emission_time_snapshot(self):
        """An edge found while processing a batch is not attached to a sibling already emitted."""
        a = "https://example.com/a"
        session = make_session(urls=(SEED, a))
        extractor = FakeExtractor({SEED: [(a, "About")]})

        outcome = await BatchScheduler(FakeAnalyzer(), extractor).run_batch(session)

        page_a = outcome.pages[1]
        assert page_a.url == a
        assert page_a.inlinks == ()
        assert session.inlink_graph.edges_for(a) == [Inlink(SEED, "About")]

    @pytest.mark.asyncio
    async def test_known_inlinks_attached_at_emission(self):
        a = "https://example.com/a"
        session = make_session(urls=(a,))
        session.inlink_graph.record_edge(a, SEED, "About")

        outcome = await BatchScheduler(FakeAnalyzer(), FakeExtractor()).run_batch(session)

        assert outcome.pages[0].inlinks == (Inlink(SEED, "About"),)

    @pytest.mark.asyncio
    async def test_broken_page_is_not_scanned_for_links(self):
        missing = "https://example.com/missing"
        session = make_session(urls=(SEED, missing))
        analyzer = FakeAnalyzer(statuses={missing: 404})
        extractor = FakeExtractor({missing: [("https://example.com/never", "Never")]})

        await BatchScheduler(analyzer, extractor).run_batch(session)

        assert extractor.calls == [SEED]
        assert "https://example.com/never" not in session.visited

    @pytest.mark.asyncio
    async def test_same_domain_restriction(self):
        extractor = FakeExtractor({
            SEED: [
                ("https://example.com/about", "About"),
                ("https://blog.example.com/post", "Blog"),
                ("https://other.org/", "Partner"),
            ]
        })
        session = make_session()

        outcome = await BatchScheduler(FakeAnalyzer(), extractor).run_batch(session)

        assert session.frontier.peek() == ["https://example.com/about"]
        assert outcome.links_enqueued == 1
        # Off-domain edges are still recorded for backlink reporting
        assert session.inlink_graph.edges_for("https://blog.example.com/post") == [Inlink(SEED, "Blog")]
        assert session.inlink_graph.edges_for("https://other.org/") == [Inlink(SEED, "Partner")]

    @pytest.mark.asyncio
    async def test_malformed_links_are_dropped(self):
        extractor = FakeExtractor({
            SEED: [
                ("not a url", "Broken"),
                ("/relative/path", "Relative"),
                ("https://example.com/ok", "OK"),
            ]
        })
        session = make_session()

        outcome = await BatchScheduler(FakeAnalyzer(), extractor).run_batch(session)

        assert outcome.links_dropped == 2
        assert session.frontier.peek() == ["https://example.com/ok"]
        assert session.inlink_graph.targets() == ["https://example.com/ok"]

    @pytest.mark.asyncio
    async def test_already_seen_link_records_edge_but_not_requeued(self):
        extractor = FakeExtractor({SEED: [(SEED, "Home")]})
        session = make_session()

        await BatchScheduler(FakeAnalyzer(), extractor).run_batch(session)

        assert session.frontier.is_empty()
        assert session.inlink_graph.edges_for(SEED) == [Inlink(SEED, "Home")]

    @pytest.mark.asyncio
    async def test_load_shedding_skips_extraction(self):
        # After one page the remaining budget is 9; 9 * 1.5 = 13.5
        queued = [f"https://example.com/q{i}" for i in range(14)]
        session = make_session(urls=[SEED] + queued, target=10)
        extractor = FakeExtractor()

        outcome = await BatchScheduler(FakeAnalyzer(), extractor, batch_size=1).run_batch(session)

        assert extractor.calls == []
        assert outcome.skipped_extractions == 1

    @pytest.mark.asyncio
    async def test_load_shedding_threshold_not_reached(self):
        queued = [f"https://example.com/q{i}" for i in range(13)]
        session = make_session(urls=[SEED] + queued, target=10)
        extractor = FakeExtractor()

        await BatchScheduler(FakeAnalyzer(), extractor, batch_size=1).run_batch(session)

        assert extractor.calls == [SEED]

    @pytest.mark.asyncio
    async def test_record_count_mismatch_is_format_failure(self):
        class ShortAnalyzer:
            async def analyze(self, urls, context_url):
                return [AnalysisRecord(url=urls[0], status=200)]

        session = make_session(urls=(SEED, "https://example.com/a"))

        with pytest.raises(AnalysisFailure) as exc_info:
            await BatchScheduler(ShortAnalyzer(), FakeExtractor()).run_batch(session)

        assert exc_info.value.kind == "format"
        assert session.results == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [None, {"url": SEED}, [{"url": SEED, "status": 200}]])
    async def test_malformed_analyzer_output_is_format_failure(self, reply):
        class MalformedAnalyzer:
            async def analyze(self, urls, context_url):
                return reply

        session = make_session()

        with pytest.raises(AnalysisFailure, match="invalid data format") as exc_info:
            await BatchScheduler(MalformedAnalyzer(), FakeExtractor()).run_batch(session)

        assert exc_info.value.kind == "format"
        assert session.results == []

    @pytest.mark.asyncio
    async def test_malformed_extractor_output_is_format_failure(self):
        class DictExtractor:
            async def extract(self, page_url, site_domain):
                return [{"url": "https://example.com/a", "anchorText": "A"}]

        session = make_session()

        with pytest.raises(ExtractionFailure, match="invalid data format") as exc_info:
            await BatchScheduler(FakeAnalyzer(), DictExtractor()).run_batch(session)

        assert exc_info.value.kind == "format"
        assert exc_info.value.page_url == SEED
        assert [page.url for page in session.results] == [SEED]

    @pytest.mark.asyncio
    async def test_unexpected_analyzer_error_becomes_analysis_failure(self):
        class BrokenAnalyzer:
            async def analyze(self, urls, context_url):
                raise RuntimeError("quota exceeded")

        with pytest.raises(AnalysisFailure, match="quota exceeded") as exc_info:
            await BatchScheduler(BrokenAnalyzer(), FakeExtractor()).run_batch(make_session())

        assert exc_info.value.kind == "service"

    @pytest.mark.asyncio
    async def test_analyzer_timeout(self):
        class SlowAnalyzer:
            async def analyze(self, urls, context_url):
                await asyncio.sleep(5)
                return []

        scheduler = BatchScheduler(SlowAnalyzer(), FakeExtractor(), call_timeout=0.01)

        with pytest.raises(AnalysisFailure, match="timed out"):
            await scheduler.run_batch(make_session())

    @pytest.mark.asyncio
    async def test_extraction_failure_keeps_emitted_pages(self):
        session = make_session()
        extractor = FakeExtractor(fail_on=SEED)

        with pytest.raises(ExtractionFailure) as exc_info:
            await BatchScheduler(FakeAnalyzer(), extractor).run_batch(session)

        assert exc_info.value.page_url == SEED
        assert [page.url for page in session.results] == [SEED]
        assert session.analyzed_count == 1

    @pytest.mark.asyncio
    async def test_cancelled_token_stops_before_dequeue(self):
        token = CancellationToken()
        token.cancel()
        session = make_session()
        analyzer = FakeAnalyzer()

        with pytest.raises(CrawlCancelled):
            await BatchScheduler(analyzer, FakeExtractor()).run_batch(session, token)

        assert analyzer.calls == []
        assert session.frontier.peek() == [SEED]

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            BatchScheduler(FakeAnalyzer(), FakeExtractor(), batch_size=0)
