# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from pos_session.domain.exceptions import InvariantViolation

MS_PER_MINUTE = 60 * 1000


class Role(str, Enum):
    CASHIER = "Cashier"
    INVENTORY = "Inventory"
    MANAGER = "Manager"

    @classmethod
    def parse(cls, value: str | None) -> Role | None:
        if not value:
            return None
        lowered = value.strip().lower()
        for role in cls:
            if role.value.lower() == lowered:
                return role
        return None


@dataclass(slots=True, frozen=True)
class SessionIdentity:
    """Who logged in, as reported by the backend login call."""

    user_id: int
    external_id: str
    display_name: str
    role: str
    is_manager: bool = False

    @classmethod
    def from_login_payload(cls, payload: Mapping[str, Any]) -> SessionIdentity:
        try:
            user_id = int(payload["id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvariantViolation("login payload has no numeric id", field="id") from exc
        return cls(
            user_id=user_id,
            external_id=str(payload.get("employeeId") or ""),
            display_name=str(payload.get("name") or ""),
            role=str(payload.get("role") or ""),
            is_manager=bool(payload.get("isManager", False)),
        )


@dataclass(slots=True, frozen=True)
class Session:

    user_id: int
    external_id: str
    display_name: str
    role: str
    is_manager: bool
    login_time: int
    last_activity: int
    expires_at: int
    token: str

    def time_left_ms(self, now_ms: int) -> int:
        return self.expires_at - now_ms

    def is_expired(self, now_ms: int) -> bool:
        return now_ms >= self.expires_at

    def extended(self, now_ms: int, timeout_ms: int) -> Session:
        return replace(self, last_activity=now_ms, expires_at=now_ms + timeout_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.user_id,
            "employeeId": self.external_id,
            "name": self.display_name,
            "role": self.role,
            "isManager": self.is_manager,
            "loginTime": self.login_time,
            "lastActivity": self.last_activity,
            "expiresAt": self.expires_at,
            "sessionToken": self.token,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Session:
        try:
            return cls(
                user_id=int(data["id"]),
                external_id=str(data["employeeId"]),
                display_name=str(data["name"]),
                role=str(data["role"]),
                is_manager=bool(data["isManager"]),
                login_time=int(data["loginTime"]),
                last_activity=int(data["lastActivity"]),
                expires_at=int(data["expiresAt"]),
                token=str(data["sessionToken"]),
            )
        except KeyError as exc:
            raise InvariantViolation("session record is incomplete", field=str(exc.args[0])) from exc
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvariantViolation(f"session record is malformed: {exc}") from exc


class InvalidReason(str, Enum):
    MISSING = "missing"
    TAMPERED = "tampered"
    EXPIRED = "expired"
    CORRUPT = "corrupt"
