"""Cooperative cancellation for a running crawl."""

import asyncio


class CancellationToken:
    """Flag checked by the crawl task at each suspension point.

    ``cancel()`` may be called from a signal handler or another task on the
    same event loop.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: str | None = None

    def cancel(self, reason: str = "Crawl cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()
