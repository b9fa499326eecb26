# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, NamedTuple, TypeVar

from pos_session.application.interfaces import Clock
from pos_session.shared.logging import logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _Slot(NamedTuple, Generic[V]):  # noqa: UP046
    value: V
    fresh_until_ms: int


class InMemoryTTLCache(Generic[K, V]):  # noqa: UP046
    """Clock-driven TTL cache.

    Concurrent ``get_or_set_async`` calls for the same key await one loader,
    so a burst of logins triggers a single settings fetch.
    """

    def __init__(self, ttl_seconds: float, clock: Clock) -> None:
        self._ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock
        self._slots: dict[K, _Slot[V]] = {}
        self._locks: dict[K, asyncio.Lock] = {}

    def get(self, key: K) -> V | None:
        slot = self._slots.get(key)
        if slot is None:
            return None
        if self._clock.now_ms() >= slot.fresh_until_ms:
            del self._slots[key]
            return None
        return slot.value

    def set(self, key: K, value: V) -> None:
        self._slots[key] = _Slot(value, self._clock.now_ms() + self._ttl_ms)

    async def get_or_set_async(self, key: K, loader: Callable[[], Awaitable[V]]) -> V:
        cached = self.get(key)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = self.get(key)
            if cached is not None:
                return cached
            logger.debug(f"cache: loading {key}")
            value = await loader()
            self.set(key, value)
            return value

    def invalidate(self, key: K) -> None:
        if self._slots.pop(key, None) is not None:
            logger.debug(f"cache: dropped {key}")

    def clear(self) -> None:
        self._slots.clear()


__all__ = ["InMemoryTTLCache"]
