"""
Barrier

A fixed number of externally settled futures, awaited together.
"""

import asyncio
import logging
from typing import Annotated, Any, Iterator, List, Optional

from pydantic import Field, TypeAdapter, ValidationError

from .combinators import when_all, when_any
from .exceptions import InvalidArgumentError
from .future import DeferredFuture

logger = logging.getLogger(__name__)

_NON_NEGATIVE_INT = TypeAdapter(Annotated[int, Field(strict=True, ge=0)])


def check_non_negative(name: str, value: Any) -> int:
    """
    Validate a length or index argument.

    Zero is valid; bools, floats, strings, None and negative values are not.

    Raises:
        InvalidArgumentError if value is not a non-negative int
    """
    try:
        return _NON_NEGATIVE_INT.validate_python(value)
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid {name}", detail=str(e)) from e


class Barrier:
    """
    Fixed-size collection of futures settled by index.

    Example:
        barrier = Barrier(3)
        for i, url in enumerate(urls):
            client.fetch(url, callback=lambda body, i=i: barrier.resolve(i, body))
        bodies = await barrier.all()
    """

    def __init__(self, length: int, *, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Construct a Barrier with the specified number of futures.

        Args:
            length: Number of futures (0 is allowed)
            loop: Event loop owning the futures (defaults to the running loop)

        Raises:
            InvalidArgumentError if length is not a non-negative int
        """
        self._length = check_non_negative("length", length)
        self._loop = loop or asyncio.get_running_loop()
        self._slots: List[DeferredFuture] = [
            DeferredFuture(loop=self._loop) for _ in range(self._length)
        ]
        logger.debug(f"Created barrier with {self._length} slots")

    @property
    def length(self) -> int:
        """Number of slots, fixed at construction."""
        return self._length

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, index: int) -> DeferredFuture:
        return self._slot(index)

    def __iter__(self) -> Iterator[DeferredFuture]:
        return iter(self._slots)

    def _slot(self, index: int) -> DeferredFuture:
        index = check_non_negative("index", index)
        # IndexError past the end, like any other sequence
        return self._slots[index]

    def resolve(self, index: int, value: Any = None) -> None:
        """
        Resolve the future at the given index with the given value.

        Args:
            index: Index of the future
            value: Value to resolve it with

        Raises:
            InvalidArgumentError if index is not a non-negative int
            IndexError if index >= length
        """
        self._slot(index).settle_success(value)
        logger.debug(f"Barrier slot {index} resolved")

    def reject(self, index: int, error: BaseException) -> None:
        """
        Reject the future at the given index with the given error.

        Raises:
            InvalidArgumentError if index is not a non-negative int
            IndexError if index >= length
        """
        self._slot(index).settle_failure(error)
        logger.debug(f"Barrier slot {index} rejected with {error!r}")

    def all(self) -> asyncio.Future:
        """
        Future resolved with the list of slot values once every slot resolves.

        Rejects as soon as any slot rejects.
        """
        return when_all(self._slots, loop=self._loop)

    def race(self) -> asyncio.Future:
        """Future settled like whichever slot settles first."""
        return when_any(self._slots, loop=self._loop)

    def __repr__(self) -> str:
        settled = sum(1 for slot in self._slots if slot.settled)
        return f"Barrier(length={self._length}, settled={settled})"
