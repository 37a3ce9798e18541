"""Breadth-first SEO site crawler driven by LLM page analysis."""

__version__ = "0.1.0"

from seocrawl.analyzer import LLMPageAnalyzer
from seocrawl.cancellation import CancellationToken
from seocrawl.config import CrawlConfig, settings
from seocrawl.controller import CrawlController
from seocrawl.exceptions import (
    AnalysisFailure,
    CrawlCancelled,
    CrawlError,
    ExtractionFailure,
    InvalidSeedUrl,
    LLMError,
    MalformedLinkUrl,
)
from seocrawl.exclusions import load_exclusions, parse_exclusions
from seocrawl.export import to_csv, to_json, write_csv, write_json
from seocrawl.frontier import Frontier, VisitedRegistry
from seocrawl.inlink_graph import InlinkGraph
from seocrawl.link_extractor import LLMLinkExtractor
from seocrawl.llm import LLMClient
from seocrawl.models import (
    AnalysisRecord,
    CrawledPage,
    CrawlProgress,
    CrawlState,
    CrawlSummary,
    Inlink,
    LinkCandidate,
)
from seocrawl.rate_limiter import FixedIntervalLimiter
from seocrawl.scheduler import BatchOutcome, BatchScheduler
from seocrawl.services import LinkExtractor, PageAnalyzer
from seocrawl.session import CrawlSession

__all__ = [
    # Engine
    "CrawlController",
    "BatchScheduler",
    "BatchOutcome",
    "CrawlSession",
    "Frontier",
    "VisitedRegistry",
    "InlinkGraph",
    "FixedIntervalLimiter",
    "CancellationToken",
    # Collaborators
    "PageAnalyzer",
    "LinkExtractor",
    "LLMClient",
    "LLMPageAnalyzer",
    "LLMLinkExtractor",
    # Models
    "AnalysisRecord",
    "CrawledPage",
    "CrawlProgress",
    "CrawlState",
    "CrawlSummary",
    "Inlink",
    "LinkCandidate",
    # Errors
    "CrawlError",
    "InvalidSeedUrl",
    "AnalysisFailure",
    "ExtractionFailure",
    "MalformedLinkUrl",
    "CrawlCancelled",
    "LLMError",
    # I/O
    "parse_exclusions",
    "load_exclusions",
    "to_csv",
    "to_json",
    "write_csv",
    "write_json",
    "CrawlConfig",
    "settings",
]
