"""
Stale-response suppression for selector-driven loads.

Each change of selection (side, period) issues a new request token. Only
the result of the request holding the current token is delivered; an
older request still in flight is cancelled, and a result that arrives for
a superseded token is discarded. Arrival order never decides which result
wins, the most recent selection does.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from ..core.errors import StaleResponseError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RequestToken:
    """Identifies one load issued for one selection."""

    value: int
    selection: Any


class LatestRequestGuard(Generic[T]):
    """Deliver only the result of the most recently issued request."""

    def __init__(self) -> None:
        self._counter = 0
        self._current: Optional[RequestToken] = None
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def current(self) -> Optional[RequestToken]:
        return self._current

    def issue(self, selection: Any) -> RequestToken:
        """Issue a token for a new selection, superseding all earlier ones."""
        self._counter += 1
        self._current = RequestToken(self._counter, selection)
        return self._current

    def is_current(self, token: RequestToken) -> bool:
        return self._current is not None and token.value == self._current.value

    async def run(self, selection: Any, fetch: Callable[[], Awaitable[T]]) -> T:
        """
        Run a load for `selection`, cancelling any load still in flight.

        Raises:
            StaleResponseError: If another selection was issued before this
                load finished.
        """
        token = self.issue(selection)

        previous = self._in_flight
        if previous is not None and not previous.done():
            logger.debug("Cancelling request superseded by %s", token)
            previous.cancel()

        task = asyncio.ensure_future(fetch())
        self._in_flight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self.is_current(token):
                raise
            raise StaleResponseError(token.value, self._current.value) from None

        if not self.is_current(token):
            logger.debug("Discarding stale response for %s", token)
            raise StaleResponseError(token.value, self._current.value)
        return result
