"""
fastersync Core Primitives

Externally settled futures, fixed barriers and pending registries over asyncio.
"""

from .barrier import Barrier
from .combinators import (
    Settlement,
    adopt,
    catch,
    finally_,
    then,
    when_all,
    when_all_settled,
    when_any,
)
from .exceptions import InvalidArgumentError, SyncError
from .future import DeferredFuture
from .registry import PendingRegistry

__all__ = [
    'DeferredFuture',
    'Barrier',
    'PendingRegistry',
    'Settlement',
    'adopt',
    'then',
    'catch',
    'finally_',
    'when_all',
    'when_any',
    'when_all_settled',
    'SyncError',
    'InvalidArgumentError',
]
