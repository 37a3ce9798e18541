"""URL parsing helpers shared by the crawl engine."""

from urllib.parse import SplitResult, urlsplit

from seocrawl.exceptions import InvalidSeedUrl, MalformedLinkUrl


def parse_absolute_url(url: str) -> SplitResult:
    """Parse an absolute URL.

    Args:
        url: URL string as produced by the link extractor

    Returns:
        The split URL

    Raises:
        MalformedLinkUrl: If the value is not a string or has no scheme
    """
    if not isinstance(url, str) or not url.strip():
        raise MalformedLinkUrl(str(url))
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        raise MalformedLinkUrl(url)
    if not parts.scheme or (parts.scheme in ("http", "https") and not parts.hostname):
        raise MalformedLinkUrl(url)
    return parts


def is_absolute_url(url: str) -> bool:
    try:
        parse_absolute_url(url)
    except MalformedLinkUrl:
        return False
    return True


def site_domain_for(seed_url: str) -> str:
    """Resolve the site domain from the seed URL.

    Raises:
        InvalidSeedUrl: If the seed has no scheme or hostname
    """
    try:
        parts = parse_absolute_url(seed_url)
    except MalformedLinkUrl:
        raise InvalidSeedUrl(seed_url)
    if not parts.hostname:
        raise InvalidSeedUrl(seed_url)
    return parts.hostname
