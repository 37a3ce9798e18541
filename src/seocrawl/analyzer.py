"""LLM-backed page analyzer."""

import asyncio
import logging
from typing import Sequence

from seocrawl.constants import ANALYSIS_TEMPERATURE
from seocrawl.exceptions import AnalysisFailure, format_error_message, service_error_message
from seocrawl.llm import LLMClient
from seocrawl.models import AnalysisRecord
from seocrawl.schemas import ANALYSIS_RESPONSE_SCHEMA, parse_analysis_payload

logger = logging.getLogger(__name__)

CONTEXT = "page analysis"


class LLMPageAnalyzer:
    """Asks an LLM for a simulated technical SEO analysis of a batch of URLs.

    The model does not fetch the pages; its output is treated as given data.
    """

    def __init__(self, client: LLMClient, temperature: float = ANALYSIS_TEMPERATURE):
        """Initialize the analyzer.

        Args:
            client: LLM client used for the analysis prompt
            temperature: Sampling temperature for the analysis call
        """
        self.client = client
        self.temperature = temperature

    async def analyze(self, urls: Sequence[str], context_url: str) -> list[AnalysisRecord]:
        """Analyze a batch of URLs.

        Args:
            urls: URLs to analyze
            context_url: URL the crawl started from

        Returns:
            One AnalysisRecord per URL, in input order

        Raises:
            AnalysisFailure: If the LLM call fails or its reply has the wrong shape
        """
        if not urls:
            return []

        prompt = self._build_analysis_prompt(urls, context_url)

        try:
            response = await asyncio.to_thread(
                self.client.generate, prompt, self.temperature, ANALYSIS_RESPONSE_SCHEMA
            )
        except Exception as e:
            logger.error(f"Error in {CONTEXT}: {e}")
            raise AnalysisFailure(service_error_message(CONTEXT, str(e))) from e

        try:
            records = parse_analysis_payload(response)
        except ValueError as e:
            logger.error(f"Error in {CONTEXT}: undecodable reply: {e}")
            raise AnalysisFailure(format_error_message(CONTEXT), kind="format") from e

        if len(records) != len(urls):
            logger.error(f"Error in {CONTEXT}: expected {len(urls)} objects, got {len(records)}")
            raise AnalysisFailure(format_error_message(CONTEXT), kind="format")

        return records

    def _build_analysis_prompt(self, urls: Sequence[str], context_url: str) -> str:
        """Build the prompt for batch page analysis.

        Args:
            urls: URLs to analyze
            context_url: URL the crawl started from

        Returns:
            Formatted prompt string
        """
        url_list = "\n".join(urls)
        return f"""Act as an expert SEO website crawler and technical SEO analyst.
Perform a comprehensive, simulated analysis of the following URLs. They all belong to the website that starts at {context_url}.

URLS TO ANALYZE:
{url_list}

For each URL, report:

Core & crawl metrics:
- url: the exact URL from the list
- status: simulated HTTP status code (e.g. 200, 301, 404, 500)
- crawlDepth: plausible number of clicks from the homepage (homepage is 0)
- responseTimeMs: plausible simulated server response time in milliseconds

Indexing & directives:
- redirectUrl: final redirect destination, or null
- canonicalUrl: URL of the <link rel="canonical"> tag, or null if absent
- isNoIndex: true if a 'noindex' directive is present
- isNoFollow: true if a 'nofollow' directive is present
- isBlockedByRobotsTxt: whether the site's robots.txt disallows the URL path

On-page content:
- title: full text of the <title> tag, "N/A" if missing
- titleLength: character count of the title
- metaDescription: full text of the meta description, "N/A" if missing
- metaDescriptionLength: character count of the meta description
- h1s: list of all <h1> texts
- h2s: list of all <h2> texts
- wordCount: estimated word count of the main content
- duplicateContentScore: similarity to other pages on the site, 0.0 (unique) to 1.0 (identical)

Advanced & technical:
- missingAltTextImages: number of <img> tags without an alt attribute
- schemaTypes: list of Schema.org types found (e.g. "Product", "Review", "Article")
- urlParameters: list of query parameters present in the URL (e.g. "sort=price")

If a page would realistically be a 404 or a redirect, simulate that.

Your output must be ONLY a single JSON array of objects, one object per URL, in the order given, with no other text or markdown. The array must contain exactly {len(urls)} objects.
"""
