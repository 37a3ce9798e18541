"""Parsing of exclusion lists (plain URL lists or exported crawl CSVs)."""

import logging
import re
from pathlib import Path
from typing import Union

from seocrawl.urls import is_absolute_url

logger = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"[\r\n]+")


def parse_exclusions(text: str, csv: bool = False) -> set[str]:
    """Extract the URLs to exclude from a text source.

    For CSV input only the first field of each line is used, so a file
    exported by this tool can be fed back in to skip already-crawled pages.

    Args:
        text: File contents
        csv: Treat each line as a CSV row

    Returns:
        Set of absolute URLs
    """
    urls = set()
    for line in _LINE_BREAK_RE.split(text):
        candidate = line.strip()
        if csv and "," in candidate:
            candidate = candidate.split(",", 1)[0]
        if candidate.startswith('"'):
            candidate = candidate[1:]
        if candidate.endswith('"'):
            candidate = candidate[:-1]
        candidate = candidate.strip()

        if candidate.startswith("http") and is_absolute_url(candidate):
            urls.add(candidate)
    return urls


def load_exclusions(path: Union[str, Path]) -> set[str]:
    """Read an exclusion file; a .csv suffix selects CSV parsing.

    Args:
        path: Path to a .txt or .csv file

    Returns:
        Set of absolute URLs
    """
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8-sig")
    urls = parse_exclusions(text, csv=file_path.suffix.lower() == ".csv")
    logger.info(f"Loaded {len(urls)} excluded URLs from {file_path}")
    return urls
