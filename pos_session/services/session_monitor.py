# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pos_session.application.interfaces import Scheduler
from pos_session.domain.sessions import MS_PER_MINUTE, InvalidReason
from pos_session.services.session_context import SessionContext
from pos_session.shared.logging import logger

if TYPE_CHECKING:
    from pos_session.services.session_manager import SessionManager


class MonitorState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    CHECKING = "checking"
    EXPIRED = "expired"


class SessionMonitor:
    """Self-rescheduling expiry check for the live session.

    Each tick reads the session, forces a logout once it has expired, and
    otherwise schedules the next tick. Only one pending tick exists at a time:
    the previous handle is always cancelled before a new one is scheduled.
    """

    def __init__(
        self,
        manager: SessionManager,
        context: SessionContext,
        scheduler: Scheduler,
        *,
        check_interval_seconds: float = 30.0,
        warning_threshold_minutes: int = 5,
    ) -> None:
        self._manager = manager
        self._ctx = context
        self._scheduler = scheduler
        self._check_interval = check_interval_seconds
        self._warning_threshold_ms = warning_threshold_minutes * MS_PER_MINUTE
        self._state = MonitorState.IDLE
        self._warning_due = False
        self._time_left_ms: int | None = None

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def warning_due(self) -> bool:
        return self._warning_due

    @property
    def time_left_ms(self) -> int | None:
        return self._time_left_ms

    def start(self) -> None:
        self._ctx.cancel_monitor()
        self._warning_due = False
        self._schedule(0.0)
        logger.debug("SessionMonitor: started")

    def stop(self) -> None:
        self._ctx.cancel_monitor()
        if self._state is not MonitorState.EXPIRED:
            self._state = MonitorState.IDLE

    def check(self) -> MonitorState:
        self._ctx.monitor_handle = None
        self._state = MonitorState.CHECKING

        session, reason = self._manager.inspect_session()
        if session is None:
            self._time_left_ms = None
            self._warning_due = False
            if reason is InvalidReason.EXPIRED:
                logger.info("SessionMonitor: session expired - logged out")
                self._state = MonitorState.EXPIRED
            else:
                self._state = MonitorState.IDLE
            return self._state

        time_left = session.time_left_ms(self._ctx.clock.now_ms())
        self._time_left_ms = time_left
        self._warning_due = time_left <= self._warning_threshold_ms
        logger.debug(
            f"SessionMonitor: {time_left // 1000}s left, "
            f"warning at {self._warning_threshold_ms // 1000}s"
        )
        self._schedule(self._check_interval)
        return self._state

    def _schedule(self, delay_seconds: float) -> None:
        self._ctx.cancel_monitor()
        self._ctx.monitor_handle = self._scheduler.call_later(delay_seconds, self.check)
        self._state = MonitorState.ARMED


__all__ = ["MonitorState", "SessionMonitor"]
