"""Shared fixtures: in-memory stand-ins for the page analyzer and link extractor."""

import pytest

from seocrawl.config import CrawlConfig
from seocrawl.exceptions import AnalysisFailure, ExtractionFailure, format_error_message
from seocrawl.models import AnalysisRecord, LinkCandidate


class FakeAnalyzer:
    """Returns a record per URL with a configurable status."""

    def __init__(self, statuses=None, fail_on_call=None):
        self.statuses = statuses or {}
        self.fail_on_call = fail_on_call
        self.calls = []

    async def analyze(self, urls, context_url):
        if not urls:
            return []
        self.calls.append(list(urls))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise AnalysisFailure(format_error_message("page analysis"), kind="format")
        return [
            AnalysisRecord(url=url, status=self.statuses.get(url, 200), title=f"Title of {url}")
            for url in urls
        ]


class FakeExtractor:
    """Returns links from a site map of page URL -> [(url, anchor), ...]."""

    def __init__(self, site=None, fail_on=None):
        self.site = site or {}
        self.fail_on = fail_on
        self.calls = []

    async def extract(self, page_url, site_domain):
        self.calls.append(page_url)
        if page_url == self.fail_on:
            raise ExtractionFailure(f"Failed during link extraction for {page_url}", page_url=page_url)
        return [LinkCandidate(url=url, anchor_text=anchor) for url, anchor in self.site.get(page_url, [])]


def wide_site(root="https://example.com", fanout=12):
    """A seed page linking to ``fanout`` children, each linking back to the seed."""
    children = [f"{root}/page-{i}" for i in range(fanout)]
    site = {root: [(child, f"Page {i}") for i, child in enumerate(children)]}
    for child in children:
        site[child] = [(root, "Home")]
    return site


@pytest.fixture
def fast_config():
    """Crawl config without inter-batch delay."""
    return CrawlConfig(target_page_count=10, batch_size=5, batch_delay_seconds=0.0)
