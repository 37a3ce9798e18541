"""Crawl frontier and visited registry.

The frontier is a strict FIFO queue, so expansion is breadth-first: a URL
is analyzed only after every URL discovered before it. The visited
registry records every URL that was ever enqueued or excluded; it is the
single mechanism behind both deduplication and exclusion.
"""

from collections import deque
from typing import Deque, Iterable, Iterator, Set


class VisitedRegistry:
    """Set of URLs that were accepted (enqueued) or excluded."""

    def __init__(self):
        self._seen: Set[str] = set()

    def add(self, url: str) -> bool:
        """Register a URL.

        Returns:
            False if the URL was already registered, True otherwise
        """
        if url in self._seen:
            return False
        self._seen.add(url)
        return True

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __iter__(self) -> Iterator[str]:
        return iter(self._seen)


class Frontier:
    """FIFO queue of discovered-but-unanalyzed URLs."""

    def __init__(self, registry: VisitedRegistry | None = None):
        self.registry = registry if registry is not None else VisitedRegistry()
        self._queue: Deque[str] = deque()

    def preseed(self, urls: Iterable[str]) -> int:
        """Register URLs as seen without queueing them.

        Used for exclusions, so that the "already seen" check also rejects
        excluded URLs.

        Returns:
            Number of URLs newly registered
        """
        return sum(1 for url in urls if self.registry.add(url))

    def enqueue(self, url: str) -> bool:
        """Queue a URL unless it was seen before.

        Returns:
            True if the URL was added to the registry and the frontier tail
        """
        if not self.registry.add(url):
            return False
        self._queue.append(url)
        return True

    def dequeue_batch(self, n: int) -> list[str]:
        """Remove and return up to ``n`` URLs from the head, in arrival order."""
        batch = []
        while self._queue and len(batch) < n:
            batch.append(self._queue.popleft())
        return batch

    def peek(self) -> list[str]:
        """Snapshot of the queued URLs, head first."""
        return list(self._queue)

    def is_empty(self) -> bool:
        return not self._queue

    def __len__(self) -> int:
        return len(self._queue)
