"""Validation schemas for JSON payloads returned by the LLM services."""

import json
import re
from typing import Any, List, Optional, Type, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from seocrawl.models import AnalysisRecord, LinkCandidate

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


class AnalysisPayload(BaseModel):
    """One page object as returned by the analysis prompt."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str = Field(description="The full URL of the crawled page.")
    status: int = Field(description="Simulated HTTP status code (e.g. 200, 301, 404).")
    crawl_depth: int = Field(0, alias="crawlDepth", description="Clicks from the start URL (homepage is 0).")
    redirect_url: Optional[str] = Field(
        None, alias="redirectUrl", description="Final destination URL if the page redirects."
    )
    canonical_url: Optional[str] = Field(
        None, alias="canonicalUrl", description="Canonical URL from the <link> tag, if present."
    )
    is_no_index: bool = Field(False, alias="isNoIndex", description="True if a 'noindex' directive is present.")
    is_no_follow: bool = Field(False, alias="isNoFollow", description="True if a 'nofollow' directive is present.")
    is_blocked_by_robots_txt: bool = Field(
        False, alias="isBlockedByRobotsTxt", description="True if robots.txt disallows the URL."
    )
    title: str = Field("N/A", description="Content of the <title> tag.")
    title_length: int = Field(0, alias="titleLength", description="Character count of the title.")
    meta_description: str = Field(
        "N/A", alias="metaDescription", description="Content of the meta description, 'N/A' if missing."
    )
    meta_description_length: int = Field(
        0, alias="metaDescriptionLength", description="Character count of the meta description."
    )
    h1s: List[str] = Field(default_factory=list, description="All H1 texts.")
    h2s: List[str] = Field(default_factory=list, description="All H2 texts.")
    word_count: int = Field(0, alias="wordCount", description="Estimated word count of the main content.")
    duplicate_content_score: float = Field(
        0.0, alias="duplicateContentScore", description="Similarity to other pages, 0.0 (unique) to 1.0 (identical)."
    )
    missing_alt_text_images: int = Field(
        0, alias="missingAltTextImages", description="Count of <img> tags without an alt attribute."
    )
    schema_types: List[str] = Field(
        default_factory=list, alias="schemaTypes", description="Schema.org types found (e.g. 'Product')."
    )
    url_parameters: List[str] = Field(
        default_factory=list, alias="urlParameters", description="Query parameters in the URL (e.g. 'sort=price')."
    )
    response_time_ms: int = Field(
        0, alias="responseTimeMs", description="Simulated server response time in milliseconds."
    )

    @field_validator("h1s", "h2s", "schema_types", "url_parameters", mode="before")
    @classmethod
    def _none_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("title", "meta_description", mode="before")
    @classmethod
    def _none_to_na(cls, v: Any) -> Any:
        return "N/A" if v is None else v

    @field_validator("redirect_url", "canonical_url", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in ("", "null", "none", "n/a"):
            return None
        return v

    @field_validator("duplicate_content_score")
    @classmethod
    def _clamp_score(cls, v: float) -> float:
        return min(1.0, max(0.0, v))

    def to_record(self) -> AnalysisRecord:
        return AnalysisRecord(**self.model_dump(by_alias=False))


class LinkPayload(BaseModel):
    """One link object as returned by the link extraction prompt."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str = Field(description="The full, absolute URL of the link.")
    anchor_text: str = Field("N/A", alias="anchorText", description="Clickable text of the link, whitespace trimmed.")

    @field_validator("anchor_text", mode="before")
    @classmethod
    def _clean_anchor(cls, v: Any) -> Any:
        if v is None:
            return "N/A"
        if isinstance(v, str):
            cleaned = " ".join(v.split())
            return cleaned or "N/A"
        return v

    def to_candidate(self) -> LinkCandidate:
        return LinkCandidate(url=self.url, anchor_text=self.anchor_text)


_ANALYSIS_ADAPTER = TypeAdapter(List[AnalysisPayload])
_LINK_ADAPTER = TypeAdapter(List[LinkPayload])

_GEMINI_TYPES = {str: "STRING", int: "INTEGER", float: "NUMBER", bool: "BOOLEAN"}


def response_schema_for(model: Type[BaseModel]) -> dict:
    """Build a Gemini response schema for a JSON array of ``model`` objects.

    Properties use the camelCase aliases the prompts ask for, and every
    property is required so the model emits complete objects.

    Args:
        model: Payload model describing one array item

    Returns:
        Schema dict accepted as ``GenerateContentConfig.response_schema``
    """
    properties = {}
    for name, info in model.model_fields.items():
        annotation = info.annotation
        nullable = False
        if get_origin(annotation) is Union:
            annotation = next(arg for arg in get_args(annotation) if arg is not type(None))
            nullable = True

        if get_origin(annotation) is list:
            prop = {"type": "ARRAY", "items": {"type": _GEMINI_TYPES[get_args(annotation)[0]]}}
        else:
            prop = {"type": _GEMINI_TYPES[annotation]}
        if nullable:
            prop["nullable"] = True
        if info.description:
            prop["description"] = info.description
        properties[info.alias or name] = prop

    return {
        "type": "ARRAY",
        "items": {"type": "OBJECT", "properties": properties, "required": list(properties)},
    }


ANALYSIS_RESPONSE_SCHEMA = response_schema_for(AnalysisPayload)
LINK_RESPONSE_SCHEMA = response_schema_for(LinkPayload)


def decode_json_array(text: str) -> list:
    """Decode an LLM reply that should hold a single JSON array.

    Markdown code fences are stripped. An object wrapping exactly one array
    (e.g. ``{"pages": [...]}``) is unwrapped.

    Raises:
        ValueError: If the text is not a JSON array
    """
    cleaned = _FENCE_RE.sub("", (text or "").strip())
    data = json.loads(cleaned)
    if isinstance(data, dict):
        arrays = [v for v in data.values() if isinstance(v, list)]
        if len(arrays) == 1:
            data = arrays[0]
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
    return data


def parse_analysis_payload(text: str) -> list[AnalysisRecord]:
    """Decode and validate an analysis reply.

    Raises:
        ValueError: If the reply cannot be decoded (includes pydantic.ValidationError)
    """
    return [item.to_record() for item in _ANALYSIS_ADAPTER.validate_python(decode_json_array(text))]


def parse_link_payload(text: str) -> list[LinkCandidate]:
    """Decode and validate a link extraction reply.

    Raises:
        ValueError: If the reply cannot be decoded (includes pydantic.ValidationError)
    """
    return [item.to_candidate() for item in _LINK_ADAPTER.validate_python(decode_json_array(text))]
