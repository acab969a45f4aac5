"""QueryCache — tests for caching, de-duplication and invalidation.

Tests cover:
    - Keys are order-independent for equal inputs
    - Fresh entries are served from cache; stale ones refetch
    - Concurrent identical queries share one request
    - Errors are not cached
    - mutate() invalidates the named procedures
    - invalidate() during a fetch prevents a stale write-back for that procedure only
"""

import asyncio

import pytest

from rpc_starter.core.domain_types import ErrorKind
from rpc_starter.infrastructure.rpc_client import QueryCache, RpcCallError


class FakeRpc:
    """Counts calls; optionally blocks until released."""

    def __init__(self):
        self.calls = []
        self.gate: asyncio.Event | None = None
        self.fail_next = False

    async def call(self, procedure, input=None):
        self.calls.append((procedure, input))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_next:
            self.fail_next = False
            raise RpcCallError(ErrorKind.INTERNAL, "boom")
        return {"procedure": procedure, "n": len(self.calls)}


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def rpc():
    return FakeRpc()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(rpc, clock):
    return QueryCache(rpc, stale_seconds=10, clock=clock)


def test_key_ignores_dict_order():
    assert QueryCache.key("p", {"a": 1, "b": 2}) == QueryCache.key("p", {"b": 2, "a": 1})
    assert QueryCache.key("p", {"a": 1}) != QueryCache.key("q", {"a": 1})


async def test_fresh_entry_served_from_cache(cache, rpc, clock):
    first = await cache.query("getTodos")
    clock.now = 5
    second = await cache.query("getTodos")
    assert first == second
    assert len(rpc.calls) == 1
    assert len(cache) == 1


async def test_stale_entry_refetched(cache, rpc, clock):
    await cache.query("getTodos")
    clock.now = 10
    await cache.query("getTodos")
    assert len(rpc.calls) == 2


async def test_different_inputs_cached_separately(cache, rpc):
    await cache.query("greet", {"name": "a"})
    await cache.query("greet", {"name": "b"})
    assert len(rpc.calls) == 2


async def test_concurrent_queries_deduplicated(cache, rpc):
    rpc.gate = asyncio.Event()
    pending = [asyncio.create_task(cache.query("getTodos")) for _ in range(5)]
    await asyncio.sleep(0)
    rpc.gate.set()
    results = await asyncio.gather(*pending)
    assert len(rpc.calls) == 1
    assert all(r == results[0] for r in results)


async def test_errors_not_cached(cache, rpc):
    rpc.fail_next = True
    with pytest.raises(RpcCallError):
        await cache.query("getTodos")
    assert len(cache) == 0
    await cache.query("getTodos")
    assert len(rpc.calls) == 2


async def test_mutate_invalidates_named_procedures(cache, rpc):
    await cache.query("getTodos")
    await cache.query("getCurrentTime")
    await cache.mutate("addTodo", {"text": "x"}, invalidates=["getTodos"])
    assert len(cache) == 1
    await cache.query("getTodos")
    assert [c[0] for c in rpc.calls] == ["getTodos", "getCurrentTime", "addTodo", "getTodos"]


async def test_invalidate_all(cache):
    await cache.query("getTodos")
    await cache.query("hello")
    cache.invalidate()
    assert len(cache) == 0


async def test_invalidate_during_fetch_skips_write_back(cache, rpc):
    rpc.gate = asyncio.Event()
    task = asyncio.create_task(cache.query("getTodos"))
    await asyncio.sleep(0)
    cache.invalidate("getTodos")
    rpc.gate.set()
    await task
    assert len(cache) == 0


async def test_cancelled_caller_does_not_cancel_shared_fetch(cache, rpc):
    rpc.gate = asyncio.Event()
    first = asyncio.create_task(cache.query("getTodos"))
    second = asyncio.create_task(cache.query("getTodos"))
    await asyncio.sleep(0)
    first.cancel()
    rpc.gate.set()
    assert (await second)["procedure"] == "getTodos"
    assert len(rpc.calls) == 1


async def test_invalidating_one_procedure_keeps_others_in_flight(cache, rpc):
    rpc.gate = asyncio.Event()
    task = asyncio.create_task(cache.query("getTodos"))
    await asyncio.sleep(0)
    cache.invalidate("getCurrentTime")
    rpc.gate.set()
    await task
    await cache.query("getTodos")
    assert [c[0] for c in rpc.calls] == ["getTodos"]
    assert len(cache) == 1


async def test_invalidate_all_during_fetch_skips_write_back(cache, rpc):
    rpc.gate = asyncio.Event()
    task = asyncio.create_task(cache.query("getTodos"))
    await asyncio.sleep(0)
    cache.invalidate()
    rpc.gate.set()
    await task
    assert len(cache) == 0
