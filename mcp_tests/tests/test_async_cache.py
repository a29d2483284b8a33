import asyncio
from collections import Counter
from dataclasses import dataclass

import pytest

from core.cache import AsyncKeyedCache
from core.errors import ValidationError
from core.models import ResourceKey


@dataclass(frozen=True)
class Thing:
    val: str
    cache_seconds: int


class FakeAsyncLoader:
    def __init__(self, things=None):
        self._things = dict(things or {})
        self.calls = Counter()

    async def __call__(self, key):
        self.calls[key] += 1
        return self._things.get(key)


@pytest.mark.asyncio
async def test_async_single_key_loaded_once(clock):
    thing = Thing("b", 100000)
    loader = FakeAsyncLoader({"b": thing})
    c = AsyncKeyedCache(max_size=2, loader=loader)

    assert await c.get("b") is thing
    assert await c.get("b") is thing
    assert loader.calls["b"] == 1


@pytest.mark.asyncio
async def test_async_evict_for_size(clock):
    loader = FakeAsyncLoader({
        "a": Thing("a", 0),
        "b": Thing("b", 100000),
        "c": Thing("c", -1),
    })
    c = AsyncKeyedCache(max_size=2, loader=loader)

    for k in ("a", "b", "c", "d", "a", "b"):
        await c.get(k)

    assert loader.calls == Counter({"a": 2, "b": 2, "c": 1, "d": 1})


@pytest.mark.asyncio
async def test_async_expiry(clock):
    loader = FakeAsyncLoader({"k": Thing("k", 30)})
    c = AsyncKeyedCache(max_size=2, loader=loader)

    await c.get("k")
    clock["now"] += 29.0
    await c.get("k")
    clock["now"] += 1.0
    await c.get("k")

    assert loader.calls["k"] == 2


@pytest.mark.asyncio
async def test_async_absent_not_cached(clock):
    loader = FakeAsyncLoader()
    c = AsyncKeyedCache(max_size=2, loader=loader)

    assert await c.get("missing") is None
    assert await c.get("missing") is None
    assert loader.calls["missing"] == 2


@pytest.mark.asyncio
async def test_async_resource_key_param_order_shares_slot(clock):
    seen = []

    async def loader(key):
        seen.append(key)
        return Thing(key.path, 60)

    c = AsyncKeyedCache(max_size=4, loader=loader)

    k1 = ResourceKey.of("docs/a", {"lang": "en", "v": "2"})
    k2 = ResourceKey.of("docs/a", {"v": "2", "lang": "en"})

    await c.get(k1)
    await c.get(k2)

    assert seen == [k1]
    assert c.keys() == ["docs/a?lang=en&v=2"]


@pytest.mark.asyncio
async def test_async_loader_error_propagates(clock):
    async def loader(key):
        raise RuntimeError("upstream down")

    c = AsyncKeyedCache(max_size=2, loader=loader)

    with pytest.raises(RuntimeError, match="upstream down"):
        await c.get("x")
    assert len(c) == 0


@pytest.mark.asyncio
async def test_async_concurrent_misses_both_load():
    calls = []
    gate = asyncio.Event()

    async def loader(key):
        calls.append(key)
        await gate.wait()
        return Thing(key, 100)

    c = AsyncKeyedCache(max_size=2, loader=loader)

    t1 = asyncio.create_task(c.get("same"))
    t2 = asyncio.create_task(c.get("same"))
    await asyncio.sleep(0)
    gate.set()

    r1, r2 = await asyncio.gather(t1, t2)

    assert calls == ["same", "same"]
    assert r1.val == r2.val == "same"
    assert len(c) == 1


def test_async_invalid_max_size():
    with pytest.raises(ValidationError):
        AsyncKeyedCache(max_size=0, loader=FakeAsyncLoader())
