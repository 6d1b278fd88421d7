"""
Pending Registry

Tracks in-flight futures until they settle, so callers can wait for whatever
is still outstanding.
"""

import asyncio
import itertools
import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

from .combinators import Settlement, then, when_all_settled

logger = logging.getLogger(__name__)


class PendingRegistry:
    """
    Self-pruning cache of pending futures.

    Each added future is removed automatically once it settles. all_settled()
    waits for the futures outstanding at call time.

    Example:
        registry = PendingRegistry()
        for message in batch:
            registry.add(send(message))
        await registry.all_settled()
    """

    def __init__(self):
        self._tickets = itertools.count()
        self._pending: Dict[int, asyncio.Future] = {}

    def add(self, awaitable: Awaitable[Any]) -> None:
        """
        Add a future to the registry.

        Coroutines are wrapped in a task. The entry is removed once the
        future settles, before any all_settled() waiter observes it.

        Args:
            awaitable: Future, task or coroutine to track

        Raises:
            TypeError if awaitable is not awaitable
        """
        fut = asyncio.ensure_future(awaitable)
        ticket = next(self._tickets)
        self._pending[ticket] = fut
        fut.add_done_callback(lambda _: self._evict(ticket))
        logger.debug(f"Registered ticket {ticket} ({len(self._pending)} pending)")

    def _evict(self, ticket: int) -> None:
        self._pending.pop(ticket, None)
        logger.debug(f"Evicted ticket {ticket} ({len(self._pending)} pending)")

    def all_settled(
        self,
        on_settled: Optional[Callable[[List[Settlement]], Any]] = None,
    ) -> asyncio.Future:
        """
        Future resolved once every currently registered future has settled.

        Futures added after this call are not waited on.

        Args:
            on_settled: Optional function applied to the Settlement list; its
                return value (awaited if awaitable) becomes the result

        Returns:
            Future resolving to a list of Settlement records in ticket order,
            or to on_settled's result
        """
        snapshot = list(self._pending.values())
        settled = when_all_settled(snapshot)
        return then(settled, on_settled) if on_settled else settled

    def tickets(self) -> List[int]:
        """Outstanding tickets in ascending order."""
        return sorted(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, ticket: object) -> bool:
        return ticket in self._pending

    def __iter__(self) -> Iterator[asyncio.Future]:
        return iter(list(self._pending.values()))

    def __repr__(self) -> str:
        return f"PendingRegistry(pending={len(self._pending)})"
