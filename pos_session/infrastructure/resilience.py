# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Failure classification and the retrying request executor."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from pos_session.infrastructure.observability import record_retry, track_request
from pos_session.shared.config import ApiConfig, ResilienceConfig
from pos_session.shared.errors import ErrorKind, RequestError
from pos_session.shared.logging import (
    correlation_scope,
    get_correlation_id,
    has_correlation_id,
    logger,
    new_request_id,
)

JSON_CONTENT_TYPE = "application/json"
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
SESSION_TOKEN_HEADER = "X-Session-Token"


def classify_failure(
    exc: BaseException | None = None, *, status_code: int | None = None
) -> ErrorKind:
    """Map a failed attempt to its error kind; the first matching rule wins."""
    if isinstance(exc, RequestError):
        return exc.kind
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorKind.NETWORK
    if status_code is not None:
        if status_code == 401:
            return ErrorKind.AUTH
        if 400 <= status_code < 500:
            return ErrorKind.CLIENT
        if status_code >= 500:
            return ErrorKind.SERVER
    return ErrorKind.NETWORK


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000
    multiplier: float = 2.0

    @classmethod
    def from_config(cls, config: ResilienceConfig) -> RetryPolicy:
        return cls(
            max_retries=config.max_retries,
            base_delay_ms=config.base_delay_ms,
            max_delay_ms=config.max_delay_ms,
            multiplier=config.backoff_multiplier,
        )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def delay_ms(self, attempt: int) -> int:
        """Delay slept after failed attempt number ``attempt`` (1-based)."""
        try:
            delay = self.base_delay_ms * self.multiplier ** (attempt - 1)
        except OverflowError:
            return self.max_delay_ms
        return int(min(delay, self.max_delay_ms))

    def wait_strategy(self) -> wait_exponential:
        return wait_exponential(
            multiplier=self.base_delay_ms / 1000,
            exp_base=self.multiplier,
            max=self.max_delay_ms / 1000,
        )

    def with_overrides(
        self, *, max_retries: int | None = None, base_delay_ms: int | None = None
    ) -> RetryPolicy:
        changes: dict[str, Any] = {}
        if max_retries is not None:
            changes["max_retries"] = max_retries
        if base_delay_ms is not None:
            changes["base_delay_ms"] = base_delay_ms
        return replace(self, **changes) if changes else self


@dataclass(slots=True, frozen=True)
class MultipartBody:
    """Form upload; httpx writes the multipart content type with its boundary."""

    files: Mapping[str, tuple[str, bytes, str]]
    data: Mapping[str, str] = field(default_factory=dict)


class AuthSession(Protocol):
    def is_session_valid(self) -> bool: ...

    def get_auth_headers(self) -> dict[str, str]: ...

    def handle_backend_rejection(self, endpoint: str) -> None: ...


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, RequestError) and exc.retryable


def _encode_body(method: str, body: Any, headers: dict[str, str]) -> dict[str, Any]:
    if body is None or method not in BODY_METHODS:
        return {}
    if isinstance(body, MultipartBody):
        headers.pop("Content-Type", None)
        return {"files": dict(body.files), "data": dict(body.data)}
    if isinstance(body, (bytes, bytearray)):
        headers.pop("Content-Type", None)
        return {"content": bytes(body)}
    return {"json": body}


class ResilientRequestExecutor:
    def __init__(
        self,
        client: httpx.AsyncClient,
        session: AuthSession,
        *,
        api_config: ApiConfig,
        policy: RetryPolicy,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._session = session
        self._base_url = api_config.base_url
        self._timeout_ms = api_config.timeout_ms
        self._policy = policy
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def resolve_url(self, endpoint: str) -> str:
        if endpoint.startswith("http"):
            return endpoint
        return f"{self._base_url}{endpoint}"

    async def execute(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        *,
        require_auth: bool = True,
        headers: Mapping[str, str] | None = None,
        timeout_ms: int | None = None,
        max_retries: int | None = None,
        base_delay_ms: int | None = None,
    ) -> httpx.Response:
        method = method.upper()
        policy = self._policy.with_overrides(max_retries=max_retries, base_delay_ms=base_delay_ms)
        if timeout_ms is None:
            timeout_ms = self._timeout_ms

        request_headers: dict[str, str] = {"Content-Type": JSON_CONTENT_TYPE}
        request_headers.update(headers or {})

        if require_auth:
            if not self._session.is_session_valid():
                raise RequestError("Session expired. Please log in again.", ErrorKind.AUTH)
            request_headers.update(self._session.get_auth_headers())

        request_id = get_correlation_id() if has_correlation_id() else new_request_id()
        request_headers.setdefault("X-Request-ID", request_id)

        with correlation_scope(request_id):
            return await self._run(method, endpoint, body, request_headers, policy, timeout_ms)

    async def _run(
        self,
        method: str,
        endpoint: str,
        body: Any,
        request_headers: dict[str, str],
        policy: RetryPolicy,
        timeout_ms: int,
    ) -> httpx.Response:
        body_kwargs = _encode_body(method, body, request_headers)
        carries_session = SESSION_TOKEN_HEADER in request_headers
        url = self.resolve_url(endpoint)
        outcome = "success"

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.total_attempts),
            wait=policy.wait_strategy(),
            retry=retry_if_exception(_is_retryable),
            before_sleep=self._before_sleep(policy),
            sleep=self._sleep,
            reraise=True,
        )

        with track_request(method, lambda: outcome):
            try:
                async for attempt in retrying:
                    with attempt:
                        number = attempt.retry_state.attempt_number
                        logger.debug(f"api: {method} {endpoint} attempt={number}/{policy.total_attempts}")
                        response = await self._attempt(
                            method,
                            url,
                            endpoint,
                            request_headers,
                            body_kwargs,
                            timeout_ms,
                            carries_session,
                        )
                        if number > 1:
                            logger.info(
                                f"API request succeeded on attempt {number}/{policy.total_attempts}"
                            )
                        return response
            except RequestError as exc:
                outcome = exc.kind.value
                self._log_failure(url, exc)
                raise

        raise RequestError("Unknown error occurred", ErrorKind.NETWORK)

    async def _attempt(
        self,
        method: str,
        url: str,
        endpoint: str,
        headers: dict[str, str],
        body_kwargs: dict[str, Any],
        timeout_ms: int,
        carries_session: bool,
    ) -> httpx.Response:
        timeout_s = timeout_ms / 1000
        try:
            response = await asyncio.wait_for(
                self._client.request(method, url, headers=headers, timeout=timeout_s, **body_kwargs),
                timeout=timeout_s,
            )
        except Exception as exc:
            kind = classify_failure(exc)
            if kind is ErrorKind.TIMEOUT:
                message = f"Request timeout after {timeout_ms}ms"
            elif isinstance(exc, httpx.TransportError):
                message = "Network connection failed"
            else:
                message = str(exc) or "Unknown error occurred"
            raise RequestError(message, kind) from exc

        status = response.status_code
        if status < 400:
            return response

        kind = classify_failure(status_code=status)
        if kind is ErrorKind.AUTH:
            # anonymous calls such as login carry no session to revoke
            if carries_session:
                self._session.handle_backend_rejection(endpoint)
            raise RequestError(
                "Authentication failed. Please log in again.",
                kind,
                http_status=status,
                context={"body": response.text},
            )

        raise RequestError(response.text or f"HTTP {status}", kind, http_status=status)

    def _before_sleep(self, policy: RetryPolicy) -> Callable[[RetryCallState], None]:
        def _log(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            delay_ms = int((retry_state.next_action.sleep if retry_state.next_action else 0) * 1000)
            kind = classify_failure(exc)
            record_retry(kind.value)
            logger.warning(
                f"API request failed (attempt {retry_state.attempt_number}/{policy.total_attempts}), "
                f"retrying in {delay_ms}ms: {exc}"
            )

        return _log

    @staticmethod
    def _log_failure(url: str, exc: RequestError) -> None:
        if exc.retryable:
            logger.error(f"API request failed after all retries: {exc}")
        elif "/tax-settings" in url and exc.http_status == 404:
            logger.debug(f"Tax settings not found (expected for new setup): {exc}")
        else:
            logger.error(f"API request failed (non-retryable): {exc}")


__all__ = [
    "AuthSession",
    "MultipartBody",
    "ResilientRequestExecutor",
    "RetryPolicy",
    "classify_failure",
]
