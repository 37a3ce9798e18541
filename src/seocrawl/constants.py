# src/seocrawl/constants.py
"""Centralized constants for the crawl engine.

This module contains magic numbers and default values that are used
across multiple modules. For user-configurable values, see config.py
and CrawlConfig.
"""

# =============================================================================
# Crawl Orchestration Constants
# =============================================================================

# Maximum number of URLs sent to the page analyzer in one call
DEFAULT_BATCH_SIZE = 5

# Default page budget for a crawl
DEFAULT_TARGET_PAGE_COUNT = 250

# Fixed pause between batches (seconds)
DEFAULT_BATCH_DELAY_SECONDS = 1.0

# Skip link extraction when the frontier holds more than
# (remaining budget * this factor) URLs
DEFAULT_LOAD_SHED_FACTOR = 1.5

# Timeout around a single analyzer/extractor call (seconds)
DEFAULT_CALL_TIMEOUT_SECONDS = 120.0

# Pages with a status at or above this value are not scanned for links
BROKEN_STATUS_THRESHOLD = 400


# =============================================================================
# LLM Constants
# =============================================================================

DEFAULT_LLM_PROVIDER = "gemini"
DEFAULT_LLM_MODEL = "gemini-2.5-flash"
DEFAULT_LLM_MAX_TOKENS = 8192

# Sampling temperatures used by the original prompts
ANALYSIS_TEMPERATURE = 0.1
LINK_EXTRACTION_TEMPERATURE = 0.0

# Transport retries inside the LLM client. Zero keeps the crawl-level
# "any failure is fatal" policy visible.
DEFAULT_LLM_MAX_RETRIES = 0
INITIAL_LLM_RETRY_DELAY_SECONDS = 2.0
LLM_RETRY_BACKOFF_FACTOR = 2.0

SUPPORTED_LLM_PROVIDERS = ("gemini", "openai", "anthropic")


# =============================================================================
# Export Constants
# =============================================================================

# Separator between items of list-valued CSV fields
CSV_LIST_SEPARATOR = " | "

CSV_HEADERS = [
    "URL",
    "Status",
    "Crawl Depth",
    "Response Time (ms)",
    "Redirect URL",
    "Canonical URL",
    "isNoIndex",
    "isNoFollow",
    "isBlockedByRobotsTxt",
    "Title",
    "Title Length",
    "Meta Description",
    "Meta Description Length",
    "H1s",
    "H2s",
    "Word Count",
    "Duplicate Content Score",
    "Missing Alt Text Images",
    "Schema Types",
    "URL Parameters",
    "Inlinks",
]
