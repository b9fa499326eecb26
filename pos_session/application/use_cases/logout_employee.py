# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for ending the current POS session."""

from __future__ import annotations

from pos_session.application.interfaces import SessionLifecycle


class LogoutEmployeeUseCase:
    def __init__(self, *, sessions: SessionLifecycle) -> None:
        self._sessions = sessions

    def execute(self) -> None:
        self._sessions.clear_session()
