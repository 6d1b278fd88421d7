"""
Synchronization Primitives Demo

Demonstrates DeferredFuture, Barrier and PendingRegistry on one event loop.
"""

import asyncio
import random

from fastersync import (
    Barrier,
    DeferredFuture,
    PendingRegistry,
    configure_logging,
)


# Example 1: Settling a future from the outside
async def example_deferred():
    """Demo of a future settled by a callback."""
    print("\n=== Example 1: DeferredFuture ===")

    deferred = DeferredFuture()
    loop = asyncio.get_running_loop()
    loop.call_later(0.05, deferred.settle_success, "settled by a timer")

    shouted = deferred.then(lambda text: text.upper())
    print(f"Awaited: {await deferred}")
    print(f"Chained: {await shouted}")


# Example 2: Collecting callback results with a barrier
async def example_barrier():
    """Demo of index-addressed results."""
    print("\n=== Example 2: Barrier ===")

    names = ["alpha", "beta", "gamma", "delta"]
    barrier = Barrier(len(names))
    loop = asyncio.get_running_loop()

    for index, name in enumerate(names):
        loop.call_later(random.uniform(0.01, 0.1), barrier.resolve, index, name.title())

    print(f"First finished: {await barrier.race()}")
    print(f"All, in order: {await barrier.all()}")


# Example 3: Fail fast
async def example_fail_fast():
    """Demo of all() rejecting on the first failure."""
    print("\n=== Example 3: Fail Fast ===")

    barrier = Barrier(3)
    barrier.resolve(0, "ok")
    barrier.reject(1, RuntimeError("slot 1 failed"))

    try:
        await barrier.all()
    except RuntimeError as e:
        print(f"Caught: {e} (slot 2 still pending: {not barrier[2].done()})")


# Example 4: Draining in-flight work
async def example_registry():
    """Demo of waiting for everything outstanding."""
    print("\n=== Example 4: PendingRegistry ===")

    async def job(n: int) -> int:
        await asyncio.sleep(random.uniform(0.01, 0.05))
        if n == 2:
            raise ValueError(f"job {n} failed")
        return n * n

    registry = PendingRegistry()
    for n in range(5):
        registry.add(job(n))
    print(f"Outstanding tickets: {registry.tickets()}")

    results = await registry.all_settled()
    for record in results:
        print(f"  {record}")

    summary = await registry.all_settled(lambda records: len(records))
    print(f"Outstanding after drain: {summary}")


async def main():
    """Run all examples."""
    configure_logging()

    await example_deferred()
    await example_barrier()
    await example_fail_fast()
    await example_registry()


if __name__ == "__main__":
    asyncio.run(main())
