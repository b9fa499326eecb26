# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any


class AppError(Exception):
    code: str = "app_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = dict(context) if context else {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class ErrorKind(str, Enum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    SERVER = "server"
    CLIENT = "client"
    AUTH = "auth"

    @property
    def retryable(self) -> bool:
        return self in (ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.SERVER)


class RequestError(AppError):
    """Terminal failure of a backend call.

    ``kind`` tells the caller whether to try again later (network, timeout,
    server), fix its input (client) or log in again (auth).
    """

    code = "request_failed"

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        *,
        http_status: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code=f"request_{kind.value}", context=context)
        self.kind = kind
        self.http_status = http_status

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def __str__(self) -> str:
        if self.http_status is not None:
            return f"[{self.kind.value} {self.http_status}] {self.message}"
        return f"[{self.kind.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["kind"] = self.kind.value
        if self.http_status is not None:
            payload["http_status"] = self.http_status
        return payload


class PermissionDeniedError(AppError):
    code = "permission_denied"

    def __init__(self, permission: str, action: str = "perform this action") -> None:
        super().__init__(
            f"Insufficient permissions to {action}. Required: {permission}",
            context={"permission": permission, "action": action},
        )
        self.permission = permission
        self.action = action


class SettingsNotConfiguredError(AppError):
    code = "settings_not_configured"

    def __init__(self, settings_type: str) -> None:
        super().__init__(
            f"{settings_type.capitalize()} settings not configured",
            context={"settings_type": settings_type},
        )


class SessionStoreError(AppError):
    code = "session_store_error"
