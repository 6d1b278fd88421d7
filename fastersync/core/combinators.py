"""
Continuations and Aggregate Waits

Promise-style composition over plain asyncio futures.

Every continuation is attached with add_done_callback, so it runs on a later
iteration of the event loop, never inline. Aggregates never cancel their
inputs: cancelling the future returned by when_all() leaves the constituent
futures untouched, unlike asyncio.gather().
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Literal, Optional, TypeVar

T = TypeVar('T')

FULFILLED = "fulfilled"
REJECTED = "rejected"


@dataclass(frozen=True)
class Settlement:
    """Outcome record of one future observed by when_all_settled()."""

    status: Literal["fulfilled", "rejected"]
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def fulfilled(self) -> bool:
        return self.status == FULFILLED

    @property
    def rejected(self) -> bool:
        return self.status == REJECTED

    @classmethod
    def of(cls, fut: asyncio.Future) -> "Settlement":
        """Capture the outcome of a done future."""
        if fut.cancelled():
            return cls(REJECTED, error=asyncio.CancelledError())
        error = fut.exception()
        if error is not None:
            return cls(REJECTED, error=error)
        return cls(FULFILLED, value=fut.result())

    def __repr__(self) -> str:
        if self.fulfilled:
            return f"Settlement(fulfilled, value={self.value!r})"
        return f"Settlement(rejected, error={self.error!r})"


def _copy_outcome(target: asyncio.Future, source: asyncio.Future) -> None:
    """Settle ``target`` with the outcome of the done future ``source``."""
    if source.cancelled():
        if not target.done():
            target.cancel()
        return
    error = source.exception()
    if target.done():
        return
    if error is not None:
        target.set_exception(error)
    else:
        target.set_result(source.result())


def adopt(target: asyncio.Future, value: Any) -> None:
    """
    Settle ``target`` with ``value``.

    Awaitables are followed rather than stored: ``target`` takes the outcome
    of ``value`` once it settles, the way a promise adopts a thenable.

    Args:
        target: Pending future to settle
        value: Plain value, future, task or coroutine
    """
    if value is target:
        target.set_exception(TypeError("Chaining cycle detected: future settled with itself"))
        return

    if inspect.isawaitable(value):
        source = asyncio.ensure_future(value, loop=target.get_loop())
        source.add_done_callback(lambda done: _copy_outcome(target, done))
        return

    target.set_result(value)


def then(
    source: Awaitable[T],
    on_fulfilled: Optional[Callable[[T], Any]] = None,
    on_rejected: Optional[Callable[[BaseException], Any]] = None,
) -> asyncio.Future:
    """
    Explicit continuation chaining.

    Args:
        source: Future (or awaitable) to continue from
        on_fulfilled: Receives the value; its return value is adopted
        on_rejected: Receives the exception; its return value is adopted

    Returns:
        New future for the continuation's result

    Example:
        then(fut, lambda x: x * 2).add_done_callback(report)
    """
    source = asyncio.ensure_future(source)
    derived = source.get_loop().create_future()

    def _continue(done: asyncio.Future) -> None:
        if derived.done():
            if not done.cancelled():
                done.exception()
            return
        if done.cancelled():
            derived.cancel()
            return

        error = done.exception()
        if error is None:
            if on_fulfilled is None:
                derived.set_result(done.result())
                return
            callback, argument = on_fulfilled, done.result()
        else:
            if on_rejected is None:
                derived.set_exception(error)
                return
            callback, argument = on_rejected, error

        try:
            result = callback(argument)
        except Exception as exc:
            derived.set_exception(exc)
        else:
            adopt(derived, result)

    source.add_done_callback(_continue)
    return derived


def catch(source: Awaitable[T], on_rejected: Callable[[BaseException], Any]) -> asyncio.Future:
    """Handle a rejection; fulfilled values pass through unchanged."""
    return then(source, None, on_rejected)


def finally_(source: Awaitable[T], on_settled: Callable[[], Any]) -> asyncio.Future:
    """
    Run ``on_settled()`` once ``source`` settles either way.

    The derived future carries the original outcome, unless ``on_settled``
    raises or returns an awaitable that fails, in which case that error wins.
    """
    source = asyncio.ensure_future(source)
    loop = source.get_loop()
    derived = loop.create_future()

    def _continue(done: asyncio.Future) -> None:
        if derived.done():
            if not done.cancelled():
                done.exception()
            return
        try:
            result = on_settled()
        except Exception as exc:
            derived.set_exception(exc)
            return

        if not inspect.isawaitable(result):
            _copy_outcome(derived, done)
            return

        def _after_cleanup(cleanup: asyncio.Future) -> None:
            if cleanup.cancelled() or cleanup.exception() is not None:
                _copy_outcome(derived, cleanup)
            else:
                _copy_outcome(derived, done)

        asyncio.ensure_future(result, loop=loop).add_done_callback(_after_cleanup)

    source.add_done_callback(_continue)
    return derived


def _resolve_loop(futures: List[asyncio.Future], loop: Optional[asyncio.AbstractEventLoop]):
    if loop is not None:
        return loop
    if futures:
        return futures[0].get_loop()
    return asyncio.get_running_loop()


def when_all(
    futures: Iterable[Awaitable[T]],
    *,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> asyncio.Future:
    """
    Wait for all futures to complete.

    Fails fast: the returned future rejects with the first rejection as soon
    as it is observed, without waiting for the rest.

    Args:
        futures: Futures (or awaitables) to wait for
        loop: Event loop for the result when ``futures`` is empty

    Returns:
        Future resolving to the list of results in input order

    Example:
        users, products = await when_all([fetch_users(), fetch_products()])
    """
    futures = [asyncio.ensure_future(f, loop=loop) for f in futures]
    outer = _resolve_loop(futures, loop).create_future()
    if not futures:
        outer.set_result([])
        return outer

    results: List[Any] = [None] * len(futures)
    remaining = [len(futures)]

    def _on_done(index: int, done: asyncio.Future) -> None:
        if done.cancelled():
            if not outer.done():
                outer.cancel()
            return
        error = done.exception()
        if outer.done():
            return
        if error is not None:
            outer.set_exception(error)
            return
        results[index] = done.result()
        remaining[0] -= 1
        if remaining[0] == 0:
            outer.set_result(results)

    for index, fut in enumerate(futures):
        fut.add_done_callback(lambda done, index=index: _on_done(index, done))
    return outer


def when_any(
    futures: Iterable[Awaitable[T]],
    *,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> asyncio.Future:
    """
    Wait for the first future to settle.

    The returned future adopts the first outcome, fulfilled or rejected.
    With no futures it never settles.

    Args:
        futures: Futures (or awaitables) to race
        loop: Event loop for the result when ``futures`` is empty

    Returns:
        Future carrying the outcome of the first settled input
    """
    futures = [asyncio.ensure_future(f, loop=loop) for f in futures]
    outer = _resolve_loop(futures, loop).create_future()

    def _on_done(done: asyncio.Future) -> None:
        if outer.done():
            # Mark late failures as retrieved.
            if not done.cancelled():
                done.exception()
            return
        _copy_outcome(outer, done)

    for fut in futures:
        fut.add_done_callback(_on_done)
    return outer


def when_all_settled(
    futures: Iterable[Awaitable[T]],
    *,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> asyncio.Future:
    """
    Wait for every future to settle, successfully or not.

    Never short-circuits and never rejects because an input failed.

    Returns:
        Future resolving to a list of Settlement records in input order
    """
    futures = [asyncio.ensure_future(f, loop=loop) for f in futures]
    outer = _resolve_loop(futures, loop).create_future()
    if not futures:
        outer.set_result([])
        return outer

    remaining = [len(futures)]

    def _on_done(done: asyncio.Future) -> None:
        remaining[0] -= 1
        if remaining[0] == 0 and not outer.done():
            outer.set_result([Settlement.of(f) for f in futures])

    for fut in futures:
        fut.add_done_callback(_on_done)
    return outer
