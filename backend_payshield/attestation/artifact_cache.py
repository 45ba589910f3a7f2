"""
Load-once cache keyed by circuit type.

Concurrent first-time loads for the same key share one in-flight task; the
first successful result is stored and reused. A failed load is not cached,
so a later call retries. A caller that stops awaiting does not cancel the
shared load.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Generic, Hashable, TypeVar

V = TypeVar("V")


class LoadOnceCache(Generic[V]):
    def __init__(self) -> None:
        self._values: dict[Hashable, V] = {}
        self._pending: dict[Hashable, asyncio.Future[Any]] = {}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def peek(self, key: Hashable) -> V | None:
        return self._values.get(key)

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[V]]) -> V:
        if key in self._values:
            return self._values[key]
        pending = self._pending.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._load(key, loader))
            self._pending[key] = pending
            pending.add_done_callback(lambda _f, k=key: self._pending.pop(k, None))
        return await asyncio.shield(pending)

    async def _load(self, key: Hashable, loader: Callable[[], Awaitable[V]]) -> V:
        value = await loader()
        return self._values.setdefault(key, value)

    def clear(self) -> None:
        self._values.clear()
