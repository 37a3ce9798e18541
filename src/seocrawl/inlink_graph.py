"""Inlink (backlink) graph built up during a crawl."""

from typing import Dict, List

from seocrawl.models import Inlink


class InlinkGraph:
    """Maps a target URL to the edges observed pointing at it.

    Edges are kept in discovery order and are never deduplicated or pruned.
    Targets on other domains are recorded too.
    """

    def __init__(self):
        self._edges: Dict[str, List[Inlink]] = {}

    def record_edge(self, target: str, source: str, anchor_text: str) -> None:
        self._edges.setdefault(target, []).append(Inlink(source_url=source, anchor_text=anchor_text))

    def edges_for(self, target: str) -> list[Inlink]:
        """Return a snapshot of the edges recorded for ``target``."""
        return list(self._edges.get(target, ()))

    def targets(self) -> list[str]:
        return list(self._edges)

    def edge_count(self) -> int:
        return sum(len(edges) for edges in self._edges.values())

    def __contains__(self, target: object) -> bool:
        return target in self._edges

    def __len__(self) -> int:
        return len(self._edges)
