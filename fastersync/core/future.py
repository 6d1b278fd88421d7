"""
Deferred Future

An asyncio future that can be settled by whoever holds it.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, TypeVar

from ..config import get_settings
from . import combinators as _combinators

T = TypeVar('T')

logger = logging.getLogger(__name__)


class DeferredFuture(asyncio.Future):
    """
    asyncio.Future with public settle operations.

    It is a real asyncio.Future: awaitable, accepted by asyncio.isfuture(),
    asyncio.gather() and asyncio.wait(). The settle operations are plain
    methods, so they exist from the moment the future does.

    Examples:
        # Hand the future to a consumer, settle it from elsewhere
        deferred = DeferredFuture()
        loop.call_later(1, deferred.settle_success, "done")
        result = await deferred

        # Explicit chaining
        deferred.then(lambda x: x * 2).then(print)
    """

    def __init__(self, *, loop: Optional[asyncio.AbstractEventLoop] = None):
        super().__init__(loop=loop)
        self._settled = False

    @property
    def settled(self) -> bool:
        """True once a settle operation was accepted (or the future is done)."""
        return self._settled or self.done()

    def _may_settle(self, operation: str) -> bool:
        """Apply the double settlement policy; True if settling may proceed."""
        if not self.settled:
            return True

        if get_settings().double_settle == "ignore":
            logger.debug(f"Ignoring {operation} on already settled future {self!r}")
            return False

        raise asyncio.InvalidStateError(f"{operation}: future is already settled")

    def settle_success(self, value: Any = None) -> None:
        """
        Fulfil the future with value.

        Args:
            value: Result, or an awaitable whose outcome the future adopts
        """
        if self._may_settle("settle_success"):
            _combinators.adopt(self, value)
            self._settled = True

    def settle_failure(self, error: BaseException) -> None:
        """
        Reject the future with error, passed through unchanged to consumers.

        A value asyncio refuses as an exception raises TypeError and leaves
        the future unsettled.

        Args:
            error: Exception instance (or class) to raise in consumers
        """
        if self._may_settle("settle_failure"):
            self.set_exception(error)
            self._settled = True

    resolve = settle_success
    reject = settle_failure

    def then(
        self,
        on_fulfilled: Optional[Callable[[T], Any]] = None,
        on_rejected: Optional[Callable[[BaseException], Any]] = None,
    ) -> asyncio.Future:
        """
        Explicit continuation chaining.

        Returns:
            New future for the continuation's result
        """
        return _combinators.then(self, on_fulfilled, on_rejected)

    def catch(self, on_rejected: Callable[[BaseException], Any]) -> asyncio.Future:
        """Handle a rejection; see combinators.catch()."""
        return _combinators.catch(self, on_rejected)

    def finally_(self, on_settled: Callable[[], Any]) -> asyncio.Future:
        """Run cleanup on either outcome; see combinators.finally_()."""
        return _combinators.finally_(self, on_settled)
