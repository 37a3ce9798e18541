"""Tests for the LLM-backed page analyzer and link extractor."""

import json
from unittest.mock import Mock

import pytest

from seocrawl.analyzer import LLMPageAnalyzer
from seocrawl.exceptions import AnalysisFailure, ExtractionFailure, LLMError
from seocrawl.link_extractor import LLMLinkExtractor
from seocrawl.schemas import ANALYSIS_RESPONSE_SCHEMA, LINK_RESPONSE_SCHEMA

URLS = ["https://example.com/", "https://example.com/about"]


def mock_client(reply=None, error=None):
    client = Mock()
    if error is not None:
        client.generate.side_effect = error
    else:
        client.generate.return_value = reply
    return client


class TestLLMPageAnalyzer:
    """Test cases for LLMPageAnalyzer."""

    @pytest.mark.asyncio
    async def test_analyze_batch(self):
        reply = json.dumps([{"url": url, "status": 200, "title": f"T{i}"} for i, url in enumerate(URLS)])
        client = mock_client(reply)

        records = await LLMPageAnalyzer(client).analyze(URLS, URLS[0])

        assert [record.url for record in records] == URLS
        assert records[1].title == "T1"
        prompt, temperature, schema = client.generate.call_args.args
        assert temperature == 0.1
        assert schema is ANALYSIS_RESPONSE_SCHEMA
        assert "https://example.com/about" in prompt
        assert "exactly 2 objects" in prompt

    @pytest.mark.asyncio
    async def test_empty_batch_skips_call(self):
        client = mock_client("[]")
        assert await LLMPageAnalyzer(client).analyze([], URLS[0]) == []
        client.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_service_error(self):
        client = mock_client(error=LLMError("quota exceeded"))

        with pytest.raises(AnalysisFailure) as exc_info:
            await LLMPageAnalyzer(client).analyze(URLS, URLS[0])

        assert exc_info.value.kind == "service"
        assert exc_info.value.message == "Failed during page analysis. LLM API Error: quota exceeded"

    @pytest.mark.asyncio
    async def test_undecodable_reply(self):
        with pytest.raises(AnalysisFailure) as exc_info:
            await LLMPageAnalyzer(mock_client("not json")).analyze(URLS, URLS[0])

        assert exc_info.value.kind == "format"
        assert exc_info.value.message == (
            "The AI returned an invalid data format during page analysis. Please try again."
        )

    @pytest.mark.asyncio
    async def test_wrong_record_count(self):
        reply = json.dumps([{"url": URLS[0], "status": 200}])

        with pytest.raises(AnalysisFailure) as exc_info:
            await LLMPageAnalyzer(mock_client(reply)).analyze(URLS, URLS[0])

        assert exc_info.value.kind == "format"


class TestLLMLinkExtractor:
    """Test cases for LLMLinkExtractor."""

    @pytest.mark.asyncio
    async def test_extract_dedupes_by_url(self):
        reply = json.dumps([
            {"url": "https://example.com/a", "anchorText": "About"},
            {"url": "https://example.com/b", "anchorText": "Blog"},
            {"url": "https://example.com/a", "anchorText": "About us"},
        ])
        client = mock_client(reply)

        links = await LLMLinkExtractor(client).extract(URLS[0], "example.com")

        assert [(link.url, link.anchor_text) for link in links] == [
            ("https://example.com/a", "About"),
            ("https://example.com/b", "Blog"),
        ]
        prompt, temperature, schema = client.generate.call_args.args
        assert temperature == 0.0
        assert schema is LINK_RESPONSE_SCHEMA
        assert '"example.com"' in prompt

    @pytest.mark.asyncio
    async def test_service_error_names_page(self):
        client = mock_client(error=LLMError("timeout"))

        with pytest.raises(ExtractionFailure) as exc_info:
            await LLMLinkExtractor(client).extract(URLS[1], "example.com")

        assert exc_info.value.page_url == URLS[1]
        assert "link extraction for https://example.com/about" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_undecodable_reply(self):
        with pytest.raises(ExtractionFailure) as exc_info:
            await LLMLinkExtractor(mock_client('{"error": "nope"}')).extract(URLS[0], "example.com")

        assert exc_info.value.kind == "format"
