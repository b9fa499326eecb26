# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Security audit trail for session events.

Entries go to loguru with ``audit=True`` bound so a sink can route them
separately, and the most recent ones are kept in memory for the status UI.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pos_session.shared.logging import logger
from pos_session.shared.logging.sensitive_filter import REDACTED

_SECRET_KEY_PARTS = ("pin", "password", "token", "secret")


class AuditAction(str, Enum):
    SESSION_CREATED = "session_created"
    SESSION_EXTENDED = "session_extended"
    SESSION_EXTENDED_FOR_ACTION = "session_extended_for_action"
    SESSION_TIMEOUT_REFRESHED = "session_timeout_refreshed"
    SESSION_CLEARED = "session_cleared"
    SESSION_EXPIRED = "session_expired"
    SESSION_TAMPERED = "session_tampered"
    SESSION_REJECTED = "session_rejected"
    PERMISSION_DENIED = "permission_denied"


@dataclass(frozen=True, slots=True)
class AuditEntry:
    action: AuditAction
    user_id: int | None
    success: bool
    details: Mapping[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        text = f"AUDIT {self.action.value} user_id={self.user_id} success={self.success}"
        if self.details:
            text += " " + " ".join(f"{key}={value}" for key, value in self.details.items())
        return text


def redact_details(details: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key: REDACTED if any(part in key.lower() for part in _SECRET_KEY_PARTS) else value
        for key, value in details.items()
    }


class AuditTrail:
    def __init__(self, capacity: int = 200) -> None:
        self._entries: deque[AuditEntry] = deque(maxlen=capacity)

    def record(
        self,
        action: AuditAction,
        user_id: int | None = None,
        details: Mapping[str, Any] | None = None,
        success: bool = True,
    ) -> AuditEntry:
        entry = AuditEntry(action, user_id, success, redact_details(details or {}))
        self._entries.append(entry)
        bound = logger.bind(audit=True, audit_action=action.value)
        (bound.info if success else bound.warning)(entry.render())
        return entry

    def recent(self, action: AuditAction | None = None) -> list[AuditEntry]:
        return [entry for entry in self._entries if action is None or entry.action is action]

    def clear(self) -> None:
        self._entries.clear()


audit_trail = AuditTrail()


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    details: Mapping[str, Any] | None = None,
    success: bool = True,
) -> AuditEntry:
    return audit_trail.record(action, user_id, details, success)


__all__ = ["AuditAction", "AuditEntry", "AuditTrail", "audit_log", "audit_trail", "redact_details"]
