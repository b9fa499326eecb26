# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Wires the session layer for one POS terminal process."""

from __future__ import annotations

from functools import cached_property

import httpx

from pos_session.application.use_cases import LoginEmployeeUseCase, LogoutEmployeeUseCase
from pos_session.infrastructure.cache import InMemoryTTLCache
from pos_session.infrastructure.resilience import ResilientRequestExecutor, RetryPolicy
from pos_session.infrastructure.session_store import SessionStore
from pos_session.infrastructure.signals import SignalBus
from pos_session.infrastructure.storage import MemoryKeyValueStore
from pos_session.infrastructure.timers import AsyncioScheduler, SystemClock
from pos_session.infrastructure.token_issuer import SecureTokenIssuer
from pos_session.services.api_client import ApiClient, SystemSettingsSource
from pos_session.services.session_context import SessionContext
from pos_session.services.session_manager import SessionManager
from pos_session.shared.config import AppConfig, load_config
from pos_session.shared.logging import setup_logging


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config

    @cached_property
    def config(self) -> AppConfig:
        return self._config or load_config()

    @cached_property
    def clock(self) -> SystemClock:
        return SystemClock()

    @cached_property
    def scheduler(self) -> AsyncioScheduler:
        return AsyncioScheduler()

    @cached_property
    def signals(self) -> SignalBus:
        return SignalBus()

    @cached_property
    def session_context(self) -> SessionContext:
        session_config = self.config.session
        return SessionContext(
            store=SessionStore(MemoryKeyValueStore()),
            clock=self.clock,
            token_issuer=SecureTokenIssuer(session_config.token_bytes),
            timeout_cache=InMemoryTTLCache(session_config.timeout_cache_seconds, self.clock),
            signals=self.signals,
        )

    @cached_property
    def session_manager(self) -> SessionManager:
        return SessionManager(
            self.session_context,
            settings=SystemSettingsSource(lambda: self.api_client),
            scheduler=self.scheduler,
            config=self.config.session,
        )

    @cached_property
    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient()

    @cached_property
    def request_executor(self) -> ResilientRequestExecutor:
        return ResilientRequestExecutor(
            self.http_client,
            self.session_manager,
            api_config=self.config.api,
            policy=RetryPolicy.from_config(self.config.resilience),
        )

    @cached_property
    def api_client(self) -> ApiClient:
        return ApiClient(self.request_executor, self.session_manager)

    @cached_property
    def login_employee_use_case(self) -> LoginEmployeeUseCase:
        return LoginEmployeeUseCase(api=self.api_client, sessions=self.session_manager)

    @cached_property
    def logout_employee_use_case(self) -> LogoutEmployeeUseCase:
        return LogoutEmployeeUseCase(sessions=self.session_manager)

    def configure_logging(self) -> None:
        setup_logging("DEBUG" if self.config.debug_logging else None)

    async def aclose(self) -> None:
        if "session_manager" in self.__dict__:
            self.session_manager.monitor.stop()
        if "http_client" in self.__dict__:
            await self.http_client.aclose()


__all__ = ["Container"]
