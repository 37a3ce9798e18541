"""Exceptions raised by the crawl engine and its collaborators."""

from typing import Optional


class CrawlError(Exception):
    """Base class for all crawl errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidSeedUrl(CrawlError):
    """Raised when the seed URL cannot be parsed as an absolute URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"The entered URL is not valid: {url!r}. Please include http:// or https://"
        )


class AnalysisFailure(CrawlError):
    """Raised when the page analyzer fails or returns undecodable output.

    ``kind`` is ``"format"`` when the payload could not be decoded into the
    expected shape and ``"service"`` otherwise.
    """

    def __init__(self, message: str, kind: str = "service"):
        self.kind = kind
        super().__init__(message)


class ExtractionFailure(CrawlError):
    """Raised when the link extractor fails for a page."""

    def __init__(self, message: str, kind: str = "service", page_url: Optional[str] = None):
        self.kind = kind
        self.page_url = page_url
        super().__init__(message)


class MalformedLinkUrl(CrawlError):
    """Raised when a discovered link is not an absolute URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Malformed link URL: {url!r}")


class CrawlCancelled(CrawlError):
    """Raised inside the crawl task when its cancellation token is set."""


class LLMError(Exception):
    """Raised when an LLM provider call fails."""


def format_error_message(context: str) -> str:
    return f"The AI returned an invalid data format during {context}. Please try again."


def service_error_message(context: str, detail: str) -> str:
    return f"Failed during {context}. LLM API Error: {detail}"
