"""Tests for LLM payload decoding and validation."""

import json

import pytest

from seocrawl.schemas import (
    ANALYSIS_RESPONSE_SCHEMA,
    LINK_RESPONSE_SCHEMA,
    decode_json_array,
    parse_analysis_payload,
    parse_link_payload,
)


class TestDecodeJsonArray:
    """Test cases for decode_json_array."""

    def test_plain_array(self):
        assert decode_json_array('[{"a": 1}]') == [{"a": 1}]

    def test_code_fence_stripped(self):
        assert decode_json_array('```json\n[1, 2]\n```') == [1, 2]

    def test_single_array_wrapper_unwrapped(self):
        assert decode_json_array('{"pages": [1]}') == [1]

    def test_object_without_single_array(self):
        with pytest.raises(ValueError):
            decode_json_array('{"a": [1], "b": [2]}')

    def test_not_json(self):
        with pytest.raises(ValueError):
            decode_json_array("Sorry, I cannot help with that.")

    def test_empty_reply(self):
        with pytest.raises(ValueError):
            decode_json_array("")


class TestAnalysisPayload:
    """Test cases for parse_analysis_payload."""

    def test_full_object(self):
        reply = json.dumps([{
            "url": "https://example.com/",
            "status": 200,
            "crawlDepth": 0,
            "redirectUrl": None,
            "canonicalUrl": "https://example.com/",
            "isNoIndex": False,
            "isNoFollow": False,
            "isBlockedByRobotsTxt": False,
            "title": "Home",
            "titleLength": 4,
            "metaDescription": "Welcome",
            "metaDescriptionLength": 7,
            "h1s": ["Welcome"],
            "h2s": [],
            "wordCount": 350,
            "duplicateContentScore": 0.1,
            "missingAltTextImages": 2,
            "schemaTypes": ["Organization"],
            "urlParameters": [],
            "responseTimeMs": 180,
        }])

        [record] = parse_analysis_payload(reply)

        assert record.url == "https://example.com/"
        assert record.canonical_url == "https://example.com/"
        assert record.word_count == 350
        assert record.schema_types == ["Organization"]
        assert record.response_time_ms == 180

    def test_lenient_defaults(self):
        reply = '[{"url": "https://example.com/a", "status": 404, "title": null, "h1s": null, "redirectUrl": "N/A"}]'

        [record] = parse_analysis_payload(reply)

        assert record.status == 404
        assert record.title == "N/A"
        assert record.h1s == []
        assert record.redirect_url is None
        assert record.meta_description == "N/A"

    def test_duplicate_score_clamped(self):
        [record] = parse_analysis_payload('[{"url": "u", "status": 200, "duplicateContentScore": 1.7}]')
        assert record.duplicate_content_score == 1.0

    def test_missing_status_rejected(self):
        with pytest.raises(ValueError):
            parse_analysis_payload('[{"url": "https://example.com/"}]')


class TestLinkPayload:
    """Test cases for parse_link_payload."""

    def test_links(self):
        reply = '[{"url": "https://example.com/a", "anchorText": "  About \\n us "}, {"url": "https://example.com/b"}]'

        links = parse_link_payload(reply)

        assert [link.url for link in links] == ["https://example.com/a", "https://example.com/b"]
        assert links[0].anchor_text == "About us"
        assert links[1].anchor_text == "N/A"

    def test_empty_array(self):
        assert parse_link_payload("[]") == []

    def test_missing_url_rejected(self):
        with pytest.raises(ValueError):
            parse_link_payload('[{"anchorText": "About"}]')


class TestResponseSchemas:
    """Structured output schemas sent to Gemini."""

    def test_analysis_schema(self):
        assert ANALYSIS_RESPONSE_SCHEMA["type"] == "ARRAY"
        item = ANALYSIS_RESPONSE_SCHEMA["items"]
        properties = item["properties"]

        assert item["type"] == "OBJECT"
        assert properties["crawlDepth"]["type"] == "INTEGER"
        assert properties["redirectUrl"] == {
            "type": "STRING",
            "nullable": True,
            "description": "Final destination URL if the page redirects.",
        }
        assert properties["h1s"]["type"] == "ARRAY"
        assert properties["h1s"]["items"] == {"type": "STRING"}
        assert properties["duplicateContentScore"]["type"] == "NUMBER"
        assert properties["isBlockedByRobotsTxt"]["type"] == "BOOLEAN"
        assert "url" in item["required"]
        assert len(properties) == 20

    def test_link_schema(self):
        item = LINK_RESPONSE_SCHEMA["items"]

        assert set(item["properties"]) == {"url", "anchorText"}
        assert item["required"] == ["url", "anchorText"]
