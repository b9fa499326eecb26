# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pos_session.application.interfaces import JsonGateway, SessionLifecycle
from pos_session.domain.sessions import Role, Session, SessionIdentity
from pos_session.shared.errors import AppError, RequestError


class InvalidCredentialsError(AppError):
    code = "invalid_credentials"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Invalid Employee ID or PIN")


class LoginEmployeeUseCase:
    def __init__(self, *, api: JsonGateway, sessions: SessionLifecycle) -> None:
        self._api = api
        self._sessions = sessions

    async def execute(
        self, employee_id: str, pin: str, selected_role: str | None = None
    ) -> Session:
        if not employee_id or not pin:
            raise InvalidCredentialsError("Please enter both Employee ID and PIN")

        try:
            result = await self._api.post_json(
                "/auth/login",
                {"employeeId": employee_id, "pin": pin, "selectedRole": selected_role},
                require_auth=False,
            )
        except RequestError as exc:
            if exc.http_status == 401:
                raise InvalidCredentialsError(_rejection_message(exc)) from exc
            raise

        employee = _employee_payload(result)
        if employee is None:
            message = result.get("message") if isinstance(result, Mapping) else None
            raise InvalidCredentialsError(message)

        return await self._sessions.create_session(_identity_from(employee))


def _rejection_message(exc: RequestError) -> str | None:
    try:
        body = json.loads(exc.context.get("body") or "null")
    except ValueError:
        return None
    message = body.get("message") if isinstance(body, Mapping) else None
    return message if isinstance(message, str) and message else None


def _employee_payload(result: Any) -> Mapping[str, Any] | None:
    if not isinstance(result, Mapping) or not result.get("success"):
        return None
    data = result.get("data")
    if not isinstance(data, Mapping):
        return None
    employee = data.get("employee")
    return employee if isinstance(employee, Mapping) else None


def _identity_from(employee: Mapping[str, Any]) -> SessionIdentity:
    identity = SessionIdentity.from_login_payload(employee)
    role = identity.role or (Role.MANAGER.value if identity.is_manager else Role.CASHIER.value)
    return SessionIdentity(
        user_id=identity.user_id,
        external_id=identity.external_id,
        display_name=identity.display_name,
        role=role,
        is_manager=identity.is_manager or Role.parse(role) is Role.MANAGER,
    )
