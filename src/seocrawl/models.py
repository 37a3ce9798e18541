"""Data models for the crawl engine."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Inlink:
    """One observed incoming edge to a page."""

    source_url: str
    anchor_text: str

    def to_dict(self) -> dict:
        return {"sourceUrl": self.source_url, "anchorText": self.anchor_text}


@dataclass(frozen=True)
class LinkCandidate:
    """A link reported by the link extractor for a page."""

    url: str
    anchor_text: str


# Dataclass field name -> camelCase key used in JSON payloads and exports
WIRE_NAMES = {
    "url": "url",
    "status": "status",
    "crawl_depth": "crawlDepth",
    "redirect_url": "redirectUrl",
    "canonical_url": "canonicalUrl",
    "is_no_index": "isNoIndex",
    "is_no_follow": "isNoFollow",
    "is_blocked_by_robots_txt": "isBlockedByRobotsTxt",
    "title": "title",
    "title_length": "titleLength",
    "meta_description": "metaDescription",
    "meta_description_length": "metaDescriptionLength",
    "h1s": "h1s",
    "h2s": "h2s",
    "word_count": "wordCount",
    "duplicate_content_score": "duplicateContentScore",
    "missing_alt_text_images": "missingAltTextImages",
    "schema_types": "schemaTypes",
    "url_parameters": "urlParameters",
    "response_time_ms": "responseTimeMs",
    "inlinks": "inlinks",
}


@dataclass(frozen=True)
class AnalysisRecord:
    """SEO metadata reported by the page analyzer for a single URL."""

    url: str
    status: int

    # Crawl & architecture
    crawl_depth: int = 0
    redirect_url: Optional[str] = None
    canonical_url: Optional[str] = None
    is_no_index: bool = False
    is_no_follow: bool = False
    is_blocked_by_robots_txt: bool = False

    # On-page content
    title: str = "N/A"
    title_length: int = 0
    meta_description: str = "N/A"
    meta_description_length: int = 0
    h1s: list[str] = field(default_factory=list)
    h2s: list[str] = field(default_factory=list)
    word_count: int = 0
    duplicate_content_score: float = 0.0  # 0.0 unique .. 1.0 identical

    # Advanced & technical
    missing_alt_text_images: int = 0
    schema_types: list[str] = field(default_factory=list)
    url_parameters: list[str] = field(default_factory=list)
    response_time_ms: int = 0

    def to_dict(self) -> dict:
        """Convert to a camelCase dictionary.

        Returns:
            Dictionary keyed by the JSON field names
        """
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "inlinks":
                value = [inlink.to_dict() for inlink in value]
            elif isinstance(value, list):
                value = list(value)
            result[WIRE_NAMES[f.name]] = value
        return result


@dataclass(frozen=True)
class CrawledPage(AnalysisRecord):
    """An analyzed page as emitted to the result sequence.

    ``inlinks`` is a snapshot of the inlink graph taken when the page was
    emitted; edges discovered afterwards are not attached.
    """

    inlinks: tuple[Inlink, ...] = ()

    @classmethod
    def from_record(cls, record: AnalysisRecord, inlinks) -> "CrawledPage":
        values = {f.name: getattr(record, f.name) for f in fields(AnalysisRecord)}
        return cls(**values, inlinks=tuple(inlinks))


class CrawlState(str, Enum):
    """Lifecycle states of a crawl controller."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CrawlProgress:
    """Read-only progress snapshot handed to observers."""

    state: CrawlState
    discovered: int
    analyzed: int
    target: int
    batches: int
    message: str = ""


@dataclass
class CrawlSummary:
    """Final summary of a crawl."""

    seed_url: str
    site_domain: Optional[str]
    state: CrawlState
    analyzed_count: int = 0
    discovered_count: int = 0
    batches: int = 0
    elapsed_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == CrawlState.COMPLETED

    def to_dict(self) -> dict:
        return {
            "seed_url": self.seed_url,
            "site_domain": self.site_domain,
            "state": self.state.value,
            "analyzed_count": self.analyzed_count,
            "discovered_count": self.discovered_count,
            "batches": self.batches,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "error": self.error,
        }
