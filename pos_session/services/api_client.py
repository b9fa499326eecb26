# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Literal

import httpx

from pos_session.infrastructure.resilience import MultipartBody, ResilientRequestExecutor
from pos_session.services.session_manager import SessionManager
from pos_session.shared.errors import ErrorKind, RequestError, SettingsNotConfiguredError
from pos_session.shared.logging import logger

SettingsType = Literal["system", "tax"]

_SETTINGS_ENDPOINTS: dict[str, str] = {
    "system": "/system-settings",
    "tax": "/tax-settings",
}


class ApiClient:
    """Convenience surface over the resilient executor used by POS screens."""

    def __init__(self, executor: ResilientRequestExecutor, session: SessionManager) -> None:
        self._executor = executor
        self._session = session

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        *,
        require_auth: bool = True,
        **options: Any,
    ) -> httpx.Response:
        return await self._executor.execute(
            endpoint, method, body, require_auth=require_auth, **options
        )

    async def get(self, endpoint: str, require_auth: bool = True, **options: Any) -> httpx.Response:
        return await self.request(endpoint, "GET", require_auth=require_auth, **options)

    async def post(
        self, endpoint: str, data: Any, require_auth: bool = True, **options: Any
    ) -> httpx.Response:
        return await self.request(endpoint, "POST", data, require_auth=require_auth, **options)

    async def put(
        self, endpoint: str, data: Any, require_auth: bool = True, **options: Any
    ) -> httpx.Response:
        return await self.request(endpoint, "PUT", data, require_auth=require_auth, **options)

    async def delete(self, endpoint: str, require_auth: bool = True, **options: Any) -> httpx.Response:
        return await self.request(endpoint, "DELETE", require_auth=require_auth, **options)

    async def get_json(self, endpoint: str, require_auth: bool = True, **options: Any) -> Any:
        return _json_or_raise(await self.get(endpoint, require_auth, **options))

    async def post_json(
        self, endpoint: str, data: Any, require_auth: bool = True, **options: Any
    ) -> Any:
        return _json_or_raise(await self.post(endpoint, data, require_auth, **options))

    async def put_json(
        self, endpoint: str, data: Any, require_auth: bool = True, **options: Any
    ) -> Any:
        return _json_or_raise(await self.put(endpoint, data, require_auth, **options))

    async def get_settings(self, settings_type: SettingsType = "system") -> Any:
        endpoint = _SETTINGS_ENDPOINTS[settings_type]
        try:
            # settings are readable before login
            return await self.get_json(endpoint, require_auth=False)
        except RequestError as exc:
            if settings_type == "tax" and exc.http_status == 404:
                raise SettingsNotConfiguredError("tax") from exc
            raise

    async def fetch_system_settings(self) -> Mapping[str, Any]:
        settings = await self.get_settings("system")
        return settings if isinstance(settings, Mapping) else {}

    async def upload_file(
        self,
        endpoint: str,
        content: bytes,
        filename: str,
        *,
        content_type: str = "application/octet-stream",
        additional_data: Mapping[str, Any] | None = None,
        field_name: str = "file",
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        if self._session.is_session_valid():
            headers.update(self._session.get_auth_headers())

        body = MultipartBody(
            files={field_name: (filename, content, content_type)},
            data={key: str(value) for key, value in (additional_data or {}).items()},
        )
        return await self.request(endpoint, "POST", body, headers=headers, require_auth=False)

    async def log_activity(
        self,
        action: str,
        details: str,
        entity_type: str | None = None,
        entity_id: int | None = None,
    ) -> None:
        payload = {
            "action": action,
            "details": details,
            "entityType": entity_type,
            "entityId": entity_id,
        }
        try:
            await self.post("/user-activity", payload)
        except Exception:
            # activity logging never interrupts the screen that triggered it
            logger.exception(f"Failed to log activity action={action}")


class SystemSettingsSource:
    """Settings collaborator for the session manager, resolved lazily.

    The manager is built before the API client that needs it, so the client
    is looked up on first use.
    """

    def __init__(self, client_factory: Callable[[], ApiClient]) -> None:
        self._client_factory = client_factory

    async def fetch_system_settings(self) -> Mapping[str, Any]:
        return await self._client_factory().fetch_system_settings()


def _json_or_raise(response: httpx.Response) -> Any:
    if not response.is_success:
        raise RequestError(
            response.text or f"HTTP {response.status_code}",
            ErrorKind.SERVER,
            http_status=response.status_code,
        )
    return response.json()


__all__ = ["ApiClient", "SettingsType", "SystemSettingsSource"]
