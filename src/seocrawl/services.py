"""Contracts for the external collaborators of the crawl engine."""

from typing import Protocol, Sequence

from seocrawl.models import AnalysisRecord, LinkCandidate


class PageAnalyzer(Protocol):
    """Produces SEO metadata for a batch of URLs."""

    async def analyze(self, urls: Sequence[str], context_url: str) -> list[AnalysisRecord]:
        """Analyze a batch of URLs.

        Implementations return one record per input URL, in input order, and
        return an empty list without calling any service when ``urls`` is
        empty. Failures are raised as AnalysisFailure.
        """
        ...


class LinkExtractor(Protocol):
    """Lists the outbound links of a page."""

    async def extract(self, page_url: str, site_domain: str) -> list[LinkCandidate]:
        """Return the unique links found on ``page_url``.

        Links on other domains may still be present; the caller filters.
        Failures are raised as ExtractionFailure.
        """
        ...
