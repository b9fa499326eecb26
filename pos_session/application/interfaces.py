# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from pos_session.domain.sessions import Session, SessionIdentity


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class TokenIssuer(Protocol):
    def issue(self) -> str: ...


class Clock(Protocol):
    def now_ms(self) -> int: ...


class ScheduledHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledHandle: ...


class SettingsSource(Protocol):
    async def fetch_system_settings(self) -> Mapping[str, Any]: ...


class JsonGateway(Protocol):
    async def post_json(self, endpoint: str, data: Any, require_auth: bool = True) -> Any: ...


class SessionLifecycle(Protocol):
    async def create_session(self, identity: SessionIdentity) -> Session: ...

    def get_current_session(self) -> Session | None: ...

    def clear_session(self) -> None: ...
