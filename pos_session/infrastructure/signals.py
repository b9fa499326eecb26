# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pos_session.shared.logging import logger


class SessionSignal(str, Enum):
    EXPIRY_WARNING = "expiry_warning"
    WARNING_DISMISSED = "warning_dismissed"
    FORCED_LOGOUT = "forced_logout"


@dataclass(slots=True, frozen=True)
class SignalEvent:
    signal: SessionSignal
    payload: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[SignalEvent], None]


class SignalBus:
    """Fan-out of session events to UI listeners.

    A failing listener is logged and skipped; it never breaks the session
    operation that emitted the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[SessionSignal, list[Listener]] = defaultdict(list)

    def subscribe(self, signal: SessionSignal, listener: Listener) -> Callable[[], None]:
        self._listeners[signal].append(listener)

        def _unsubscribe() -> None:
            listeners = self._listeners.get(signal, [])
            if listener in listeners:
                listeners.remove(listener)

        return _unsubscribe

    def emit(self, signal: SessionSignal, **payload: Any) -> None:
        event = SignalEvent(signal=signal, payload=payload)
        listeners = list(self._listeners.get(signal, ()))
        logger.debug(f"signals: emit {signal.value} listeners={len(listeners)}")
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"signals: listener failed signal={signal.value}")


__all__ = ["Listener", "SessionSignal", "SignalBus", "SignalEvent"]
