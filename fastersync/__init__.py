"""
fastersync - Synchronization Primitives for asyncio

Small building blocks for coordinating futures on a single event loop.

Features:
- DeferredFuture: an asyncio.Future settled by whoever holds it
- Barrier: N index-addressable futures awaited together (all / race)
- PendingRegistry: self-pruning set of in-flight futures (all_settled)
- Promise-style then/catch/finally_ continuations
"""

from .config import Settings, configure_logging, get_settings, set_settings
from .core import (
    Barrier,
    DeferredFuture,
    InvalidArgumentError,
    PendingRegistry,
    Settlement,
    SyncError,
    adopt,
    catch,
    finally_,
    then,
    when_all,
    when_all_settled,
    when_any,
)

__version__ = "0.1.0"

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
    'Settings',
    'get_settings',
    'set_settings',
    'configure_logging',
]
