"""Mutable state of a single crawl."""

from dataclasses import dataclass, field
from typing import List

from seocrawl.frontier import Frontier
from seocrawl.inlink_graph import InlinkGraph
from seocrawl.models import CrawledPage


@dataclass
class CrawlSession:
    """State owned by one crawl controller for the duration of one crawl."""

    seed_url: str
    site_domain: str
    target_page_count: int
    frontier: Frontier = field(default_factory=Frontier)
    inlink_graph: InlinkGraph = field(default_factory=InlinkGraph)
    analyzed_count: int = 0
    batches: int = 0
    results: List[CrawledPage] = field(default_factory=list)

    @property
    def visited(self):
        return self.frontier.registry

    @property
    def remaining_budget(self) -> int:
        return max(0, self.target_page_count - self.analyzed_count)

    @property
    def budget_exhausted(self) -> bool:
        return self.analyzed_count >= self.target_page_count
