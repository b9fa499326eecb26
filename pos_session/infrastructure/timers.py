# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from pos_session.shared.logging import logger


class SystemClock:
    def now_ms(self) -> int:
        return int(time.time() * 1000)


class AsyncioScheduler:
    """Schedules plain callbacks on the running event loop.

    Every call returns the loop's ``TimerHandle`` so the caller can cancel it
    before scheduling the next one.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        logger.debug(f"scheduler: callback={getattr(callback, '__name__', callback)} in {delay_seconds:.1f}s")
        return loop.call_later(max(0.0, delay_seconds), callback)


__all__ = ["AsyncioScheduler", "SystemClock"]
