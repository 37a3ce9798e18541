"""LLM-backed link extractor."""

import asyncio
import logging

from seocrawl.constants import LINK_EXTRACTION_TEMPERATURE
from seocrawl.exceptions import ExtractionFailure, format_error_message, service_error_message
from seocrawl.llm import LLMClient
from seocrawl.models import LinkCandidate
from seocrawl.schemas import LINK_RESPONSE_SCHEMA, parse_link_payload

logger = logging.getLogger(__name__)


class LLMLinkExtractor:
    """Asks an LLM for the internal links of a page and their anchor text."""

    def __init__(self, client: LLMClient, temperature: float = LINK_EXTRACTION_TEMPERATURE):
        self.client = client
        self.temperature = temperature

    async def extract(self, page_url: str, site_domain: str) -> list[LinkCandidate]:
        """Return the unique links found on a page.

        Args:
            page_url: Page to scan
            site_domain: Hostname the links should belong to

        Returns:
            Links in reply order, first occurrence of each URL only

        Raises:
            ExtractionFailure: If the LLM call fails or its reply has the wrong shape
        """
        context = f"link extraction for {page_url}"
        prompt = self._build_extraction_prompt(page_url, site_domain)

        try:
            response = await asyncio.to_thread(
                self.client.generate, prompt, self.temperature, LINK_RESPONSE_SCHEMA
            )
        except Exception as e:
            logger.error(f"Error in {context}: {e}")
            raise ExtractionFailure(service_error_message(context, str(e)), page_url=page_url) from e

        try:
            candidates = parse_link_payload(response)
        except ValueError as e:
            logger.error(f"Error in {context}: undecodable reply: {e}")
            raise ExtractionFailure(format_error_message(context), kind="format", page_url=page_url) from e

        seen = set()
        links = []
        for candidate in candidates:
            if candidate.url in seen:
                continue
            seen.add(candidate.url)
            links.append(candidate)

        logger.debug(f"Extracted {len(links)} links from {page_url}")
        return links

    def _build_extraction_prompt(self, page_url: str, site_domain: str) -> str:
        return f"""Act as a link extraction bot. Find all unique internal links on a single web page and their anchor text.
- Page to scan: {page_url}
- Site domain: {site_domain}

Rules:
1. Find all <a> tags on the page.
2. For each link, give the absolute URL and the clean anchor text.
3. Convert relative URLs (e.g. "/path") to absolute ones (e.g. "https://{site_domain}/path").
4. Only return URLs on the exact domain "{site_domain}". Do NOT include subdomains or external links.
5. Do NOT include links to files (e.g. .pdf, .jpg) or fragment links (#section). Only web pages.
6. Clean the anchor text by collapsing whitespace. For image links use the alt text or "Image Link". If there is no text, use "N/A".

Your output must be ONLY a single JSON array of objects, each with a "url" and an "anchorText" key, without duplicates. If no links are found, return an empty array.
"""
