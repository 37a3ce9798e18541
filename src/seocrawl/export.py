"""CSV and JSON export of crawl results."""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from seocrawl.constants import CSV_HEADERS, CSV_LIST_SEPARATOR
from seocrawl.models import CrawledPage, CrawlSummary, Inlink

logger = logging.getLogger(__name__)


def _escape_field(value: Any) -> str:
    """Render a text or list field as a quoted CSV value."""
    if value is None:
        return '""'
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, Inlink) for item in value):
            text = CSV_LIST_SEPARATOR.join(
                f'{link.source_url} ("{link.anchor_text}")' for link in value
            )
        else:
            text = CSV_LIST_SEPARATOR.join(str(item) for item in value)
    else:
        text = str(value)

    if "," in text or '"' in text or "\n" in text:
        text = text.replace('"', '""')
    return f'"{text}"'


def _bare(value: Any) -> str:
    """Render a numeric or boolean field unquoted."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def page_to_row(page: CrawledPage) -> list[str]:
    """Render one page as CSV values, in header order."""
    return [
        _escape_field(page.url),
        _bare(page.status),
        _bare(page.crawl_depth),
        _bare(page.response_time_ms),
        _escape_field(page.redirect_url),
        _escape_field(page.canonical_url),
        _bare(page.is_no_index),
        _bare(page.is_no_follow),
        _bare(page.is_blocked_by_robots_txt),
        _escape_field(page.title),
        _bare(page.title_length),
        _escape_field(page.meta_description),
        _bare(page.meta_description_length),
        _escape_field(page.h1s),
        _escape_field(page.h2s),
        _bare(page.word_count),
        _bare(page.duplicate_content_score),
        _bare(page.missing_alt_text_images),
        _escape_field(page.schema_types),
        _escape_field(page.url_parameters),
        _escape_field(page.inlinks),
    ]


def to_csv(pages: Iterable[CrawledPage]) -> str:
    """Render crawl results as CSV text, one row per page."""
    rows = [",".join(CSV_HEADERS)]
    rows.extend(",".join(page_to_row(page)) for page in pages)
    return "\n".join(rows)


def write_csv(pages: Iterable[CrawledPage], path: Union[str, Path]) -> Path:
    """Write crawl results to a CSV file.

    Args:
        pages: Pages in result order
        path: Destination file

    Returns:
        Path written
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(to_csv(pages), encoding="utf-8")
    logger.info(f"CSV export written to {out}")
    return out


def to_json(pages: Iterable[CrawledPage], summary: Optional[CrawlSummary] = None) -> str:
    """Render crawl results (and optionally the summary) as JSON text."""
    payload: dict = {"pages": [page.to_dict() for page in pages]}
    if summary is not None:
        payload = {"summary": summary.to_dict(), **payload}
    return json.dumps(payload, indent=2, ensure_ascii=False)


def write_json(
    pages: Iterable[CrawledPage],
    path: Union[str, Path],
    summary: Optional[CrawlSummary] = None,
) -> Path:
    """Write crawl results to a JSON file.

    Returns:
        Path written
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(to_json(pages, summary), encoding="utf-8")
    logger.info(f"JSON export written to {out}")
    return out
