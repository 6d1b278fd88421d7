"""
Tests for PendingRegistry.

Tests:
- Ticket assignment (monotonic, never reused)
- Self-eviction on settlement, success or failure
- all_settled(): snapshot semantics, no short-circuit, outcome records
- all_settled(on_settled): sync, async and failing transforms
"""

import pytest
import asyncio
import random

from fastersync import PendingRegistry, Settlement


def pending_future() -> asyncio.Future:
    """Create a bare pending future on the running loop."""
    return asyncio.get_running_loop().create_future()


# =============================================================================
# add / eviction
# =============================================================================

class TestAdd:
    """Tests for PendingRegistry.add."""

    @pytest.mark.asyncio
    async def test_tickets_start_at_zero(self):
        """Test that tickets are assigned 0, 1, 2, ..."""
        registry = PendingRegistry()
        for _ in range(3):
            assert registry.add(pending_future()) is None

        assert registry.tickets() == [0, 1, 2]
        assert len(registry) == 3
        assert 0 in registry
        assert 3 not in registry

    @pytest.mark.asyncio
    async def test_settled_future_is_evicted(self):
        """Test that settling f1 leaves only f2's ticket."""
        registry = PendingRegistry()
        f1, f2 = pending_future(), pending_future()
        registry.add(f1)
        registry.add(f2)

        f1.set_result("one")
        await asyncio.sleep(0)

        assert registry.tickets() == [1]
        assert list(registry) == [f2]

    @pytest.mark.asyncio
    async def test_rejected_future_is_evicted(self):
        """Test that failures are evicted as well."""
        registry = PendingRegistry()
        f = pending_future()
        registry.add(f)

        f.set_exception(ValueError("error"))
        await asyncio.sleep(0)

        assert len(registry) == 0
        with pytest.raises(ValueError):
            f.result()

    @pytest.mark.asyncio
    async def test_tickets_never_reused(self):
        """Test that eviction does not free ticket numbers."""
        registry = PendingRegistry()
        first = pending_future()
        registry.add(first)
        first.set_result(None)
        await asyncio.sleep(0)

        registry.add(pending_future())
        registry.add(pending_future())

        assert registry.tickets() == [1, 2]

    @pytest.mark.asyncio
    async def test_add_coroutine(self):
        """Test that coroutines are wrapped in tasks."""
        async def work():
            await asyncio.sleep(0.01)
            return "worked"

        registry = PendingRegistry()
        registry.add(work())

        assert len(registry) == 1
        results = await registry.all_settled()
        assert results == [Settlement("fulfilled", value="worked")]
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_add_non_awaitable(self):
        """Test that non-awaitables are rejected by asyncio."""
        registry = PendingRegistry()
        with pytest.raises(TypeError):
            registry.add(42)
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_external_observers_see_original_outcome(self):
        """Test that tracking does not alter the future's value."""
        value = object()
        registry = PendingRegistry()
        f = pending_future()
        registry.add(f)

        f.set_result(value)
        assert await f is value

    @pytest.mark.asyncio
    async def test_caller_callbacks_unaffected(self):
        """Test that the caller's own callbacks still run."""
        seen = []
        registry = PendingRegistry()
        f = pending_future()
        f.add_done_callback(lambda done: seen.append(done.result()))
        registry.add(f)

        f.set_result("value")
        await asyncio.sleep(0)

        assert seen == ["value"]
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_repr(self):
        """Test the repr."""
        registry = PendingRegistry()
        registry.add(pending_future())
        assert repr(registry) == "PendingRegistry(pending=1)"


# =============================================================================
# all_settled
# =============================================================================

class TestAllSettled:
    """Tests for PendingRegistry.all_settled."""

    @pytest.mark.asyncio
    async def test_mixed_outcomes_do_not_reject(self):
        """Test one rejection among three futures."""
        error = RuntimeError("failed")
        registry = PendingRegistry()
        futures = [pending_future() for _ in range(3)]
        for f in futures:
            registry.add(f)

        settled = registry.all_settled()
        futures[2].set_result("c")
        futures[1].set_exception(error)
        futures[0].set_result("a")

        results = await settled

        assert [r.status for r in results] == ["fulfilled", "rejected", "fulfilled"]
        assert results[0].value == "a"
        assert results[1].error is error
        assert results[1].rejected
        assert results[2].value == "c"
        assert results[2].fulfilled
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_empty_registry(self):
        """Test all_settled() with nothing outstanding."""
        assert await PendingRegistry().all_settled() == []

    @pytest.mark.asyncio
    async def test_snapshot_semantics(self):
        """Test that futures added after the call are not waited on."""
        registry = PendingRegistry()
        early, late = pending_future(), pending_future()
        registry.add(early)

        settled = registry.all_settled()
        registry.add(late)
        early.set_result("early")

        results = await settled

        assert results == [Settlement("fulfilled", value="early")]
        assert registry.tickets() == [1]
        assert not late.done()

    @pytest.mark.asyncio
    async def test_waits_for_every_future(self):
        """Test that all_settled() does not short-circuit."""
        registry = PendingRegistry()
        futures = [pending_future() for _ in range(random.randint(3, 10))]
        for f in futures:
            registry.add(f)

        settled = registry.all_settled()
        futures[0].set_exception(ValueError("first"))
        await asyncio.sleep(0)
        assert not settled.done()

        for f in futures[1:]:
            f.set_result(None)

        results = await settled
        assert len(results) == len(futures)
        assert results[0].rejected

    @pytest.mark.asyncio
    async def test_cancelled_future_reported_as_rejected(self):
        """Test that cancellation is captured, not raised."""
        registry = PendingRegistry()
        f = pending_future()
        registry.add(f)

        settled = registry.all_settled()
        f.cancel()

        results = await settled
        assert results[0].rejected
        assert isinstance(results[0].error, asyncio.CancelledError)

    @pytest.mark.asyncio
    async def test_on_settled_transform(self):
        """Test that on_settled's result becomes the outcome."""
        registry = PendingRegistry()
        futures = [pending_future() for _ in range(4)]
        for f in futures:
            registry.add(f)

        settled = registry.all_settled(lambda results: sum(r.fulfilled for r in results))
        for i, f in enumerate(futures):
            if i % 2:
                f.set_exception(ValueError(i))
            else:
                f.set_result(i)

        assert await settled == 2

    @pytest.mark.asyncio
    async def test_on_settled_async_transform(self):
        """Test that an awaitable returned by on_settled is awaited."""
        async def summarize(results):
            await asyncio.sleep(0)
            return [r.value for r in results]

        registry = PendingRegistry()
        f = pending_future()
        registry.add(f)

        settled = registry.all_settled(summarize)
        f.set_result("value")

        assert await settled == ["value"]

    @pytest.mark.asyncio
    async def test_on_settled_error_rejects(self):
        """Test that an exception in on_settled rejects the returned future."""
        def explode(results):
            raise KeyError("transform failed")

        registry = PendingRegistry()
        settled = registry.all_settled(explode)

        with pytest.raises(KeyError):
            await settled

    @pytest.mark.asyncio
    async def test_repeated_all_settled(self):
        """Test calling all_settled() again after everything settled."""
        registry = PendingRegistry()
        f = pending_future()
        registry.add(f)
        f.set_result(1)

        assert len(await registry.all_settled()) == 1
        assert await registry.all_settled() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
