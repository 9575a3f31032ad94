"""
Debounced forwarding of classified searches to the search log.

Implements a trailing-edge debounce: only the last query submitted within the
idle window is forwarded, and a query identical to the last one sent is
dropped.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from chumba_feed.models import SearchAnalysis


logger = logging.getLogger(__name__)


class SearchLogDebouncer:
    """
    Schedules search analytics after the user stops typing.

    The pending send is an asyncio task owned by the debouncer; ``close()``
    cancels it so nothing is sent after teardown.

    Attributes:
        send_fn: Async callable receiving the analysis to record
        delay_seconds: Idle window before a query is forwarded
        last_sent_query: Normalized query most recently forwarded
    """

    def __init__(
        self,
        send_fn: Callable[[SearchAnalysis], Awaitable[object]],
        delay_seconds: float = 1.0
    ):
        self.send_fn = send_fn
        self.delay_seconds = delay_seconds
        self.last_sent_query: Optional[str] = None
        self._pending: Optional[asyncio.Task] = None
        self._closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def submit(self, analysis: SearchAnalysis) -> None:
        """
        Schedule an analysis, replacing any send still waiting.

        Must be called from within a running event loop.

        Args:
            analysis: Classified search to forward once typing pauses
        """
        if self._closed:
            logger.debug("Search logger closed; ignoring submission")
            return

        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._send_later(analysis))

    async def flush(self) -> None:
        """Wait for the pending send, if any, to run."""
        if self._pending is not None:
            await asyncio.gather(self._pending, return_exceptions=True)

    def close(self) -> None:
        """Cancel the pending send and reject further submissions."""
        self._closed = True
        self.cancel()

    def cancel(self) -> None:
        """Drop the pending send, if any. Later submissions are accepted."""
        if self.pending:
            self._pending.cancel()
        self._pending = None

    async def _send_later(self, analysis: SearchAnalysis) -> None:
        await asyncio.sleep(self.delay_seconds)

        if analysis.normalized_query == self.last_sent_query:
            logger.debug(f"Skipping repeated search {analysis.normalized_query!r}")
            return

        self.last_sent_query = analysis.normalized_query
        try:
            await self.send_fn(analysis)
        except Exception as e:
            # Search analytics are non-critical
            logger.debug(f"Search log send failed: {e}")
