"""
Per-key debouncing on the asyncio event loop.

Each key owns at most one pending single-shot timer. Scheduling again for
the same key cancels the previous timer, so a burst of triggers fires the
callback once, a full quiet period after the last trigger.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Cancellable delayed triggers keyed by item id.

    Must be used from code running inside an event loop.

    Example:
        >>> debouncer = Debouncer(0.3)
        >>> debouncer.schedule("item-1", lambda: print("render"))
        >>> debouncer.schedule("item-1", lambda: print("render"))  # replaces the first
    """

    def __init__(self, delay: float):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = delay
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    def schedule(
        self,
        key: str,
        callback: Callable[[], None],
        delay: Optional[float] = None,
    ) -> None:
        """Run callback after the quiet period, replacing any pending timer for key."""
        self.cancel(key)
        loop = asyncio.get_running_loop()
        wait = self.delay if delay is None else delay
        self._handles[key] = loop.call_later(wait, self._fire, key, callback)

    def _fire(self, key: str, callback: Callable[[], None]) -> None:
        self._handles.pop(key, None)
        callback()

    def cancel(self, key: str) -> bool:
        """Cancel the pending timer for key. Returns False if none was pending."""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        logger.debug(f"Cancelled pending trigger for {key}")
        return True

    def cancel_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()

    def is_pending(self, key: str) -> bool:
        return key in self._handles

    def __len__(self) -> int:
        return len(self._handles)
