# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from pos_session.application.interfaces import Clock, ScheduledHandle, TokenIssuer
from pos_session.infrastructure.cache import InMemoryTTLCache
from pos_session.infrastructure.session_store import SessionStore
from pos_session.infrastructure.signals import SignalBus


@dataclass(slots=True)
class SessionContext:
    """Per-process session state shared by the lifecycle manager and the monitor.

    Built once by the container and passed by reference.
    """

    store: SessionStore
    clock: Clock
    token_issuer: TokenIssuer
    timeout_cache: InMemoryTTLCache[str, int]
    signals: SignalBus
    warning_shown: bool = False
    monitor_handle: ScheduledHandle | None = None

    def cancel_monitor(self) -> None:
        if self.monitor_handle is not None:
            self.monitor_handle.cancel()
            self.monitor_handle = None


__all__ = ["SessionContext"]
