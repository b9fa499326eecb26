# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import re

import pytest

from pos_session.infrastructure.audit import AuditAction, AuditTrail
from pos_session.infrastructure.cache import InMemoryTTLCache
from pos_session.infrastructure.signals import SessionSignal, SignalBus, SignalEvent
from pos_session.infrastructure.token_issuer import SecureTokenIssuer
from pos_session.shared.logging import sanitize_message
from pos_session.tests.fakes import FrozenClock


def test_tokens_are_64_hex_chars_and_unique() -> None:
    issuer = SecureTokenIssuer()

    tokens = {issuer.issue() for _ in range(1000)}

    assert len(tokens) == 1000
    assert all(re.fullmatch(r"[0-9a-f]{64}", token) for token in tokens)


def test_token_issuer_refuses_short_tokens() -> None:
    with pytest.raises(ValueError):
        SecureTokenIssuer(16)


@pytest.mark.asyncio
async def test_ttl_cache_reloads_after_expiry() -> None:
    clock = FrozenClock(0)
    cache: InMemoryTTLCache[str, int] = InMemoryTTLCache(300, clock)
    loads = 0

    async def load() -> int:
        nonlocal loads
        loads += 1
        return loads

    assert await cache.get_or_set_async("timeout", load) == 1
    clock.set(299_999)
    assert await cache.get_or_set_async("timeout", load) == 1
    clock.set(300_000)
    assert await cache.get_or_set_async("timeout", load) == 2

    cache.invalidate("timeout")
    assert cache.get("timeout") is None


def test_signal_bus_isolates_failing_listeners() -> None:
    bus = SignalBus()
    received: list[SignalEvent] = []

    def broken(_: SignalEvent) -> None:
        raise RuntimeError("ui gone")

    bus.subscribe(SessionSignal.FORCED_LOGOUT, broken)
    unsubscribe = bus.subscribe(SessionSignal.FORCED_LOGOUT, received.append)

    bus.emit(SessionSignal.FORCED_LOGOUT, reason="expired")
    unsubscribe()
    bus.emit(SessionSignal.FORCED_LOGOUT, reason="expired")

    assert [event.payload for event in received] == [{"reason": "expired"}]


def test_session_tokens_are_redacted_from_logs() -> None:
    token = "ab" * 32

    assert token not in sanitize_message(f"headers={{'X-Session-Token': '{token}'}}")
    assert token not in sanitize_message(f"issued {token}")
    assert "***REDACTED***" in sanitize_message("pin=123456")


def test_audit_trail_redacts_secret_details() -> None:
    trail = AuditTrail(capacity=2)

    trail.record(AuditAction.SESSION_CREATED, 7, {"role": "Manager"})
    trail.record(AuditAction.SESSION_REJECTED, 7, {"session_token": "abc", "endpoint": "/sales"}, False)
    trail.record(AuditAction.SESSION_CLEARED, 7)

    assert [entry.action for entry in trail.recent()] == [
        AuditAction.SESSION_REJECTED,
        AuditAction.SESSION_CLEARED,
    ]
    assert trail.recent(AuditAction.SESSION_REJECTED)[0].details == {
        "session_token": "***REDACTED***",
        "endpoint": "/sales",
    }


@pytest.mark.asyncio
async def test_ttl_cache_shares_one_load_between_waiters() -> None:
    cache: InMemoryTTLCache[str, int] = InMemoryTTLCache(300, FrozenClock(0))
    started = 0
    release = asyncio.Event()

    async def load() -> int:
        nonlocal started
        started += 1
        await release.wait()
        return 15

    waiters = [asyncio.create_task(cache.get_or_set_async("timeout", load)) for _ in range(3)]
    await asyncio.sleep(0)
    release.set()

    assert await asyncio.gather(*waiters) == [15, 15, 15]
    assert started == 1
