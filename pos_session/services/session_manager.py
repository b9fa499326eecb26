# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pos_session.application.interfaces import Scheduler, SettingsSource
from pos_session.domain.sessions import (
    MS_PER_MINUTE,
    AccessDecision,
    AccessOutcome,
    InvalidReason,
    Session,
    SessionIdentity,
    WarningDecision,
    WarningState,
    evaluate_access,
    evaluate_expiry_warning,
    role_has_permission,
)
from pos_session.domain.sessions.policies import LOGIN_ROUTE
from pos_session.infrastructure.audit import AuditAction, audit_log
from pos_session.infrastructure.observability import set_session_active
from pos_session.infrastructure.signals import SessionSignal
from pos_session.services.session_context import SessionContext
from pos_session.services.session_monitor import SessionMonitor
from pos_session.shared.config import SessionConfig
from pos_session.shared.errors import PermissionDeniedError, SessionStoreError
from pos_session.shared.logging import bind_employee, logger

TIMEOUT_CACHE_KEY = "session_timeout_ms"
ANONYMOUS_HEADERS = {"X-User-Id": "0", "X-User-Name": "Unknown"}


class SessionManager:
    """Creates, validates, extends and clears the single POS session.

    Every read re-validates the stored record against the separately stored
    token and the clock. An invalid record is deleted on the spot, so
    validity is never cached between calls.
    """

    def __init__(
        self,
        context: SessionContext,
        settings: SettingsSource,
        scheduler: Scheduler,
        config: SessionConfig | None = None,
    ) -> None:
        self._ctx = context
        self._settings = settings
        self._config = config or SessionConfig()
        self._monitor = SessionMonitor(
            self,
            context,
            scheduler,
            check_interval_seconds=self._config.check_interval_seconds,
            warning_threshold_minutes=self._config.warning_threshold_minutes,
        )

    @property
    def monitor(self) -> SessionMonitor:
        return self._monitor

    @property
    def context(self) -> SessionContext:
        return self._ctx

    # -- timeout configuration -------------------------------------------------

    async def get_session_timeout_ms(self) -> int:
        return await self._ctx.timeout_cache.get_or_set_async(
            TIMEOUT_CACHE_KEY, self._load_session_timeout_ms
        )

    async def _load_session_timeout_ms(self) -> int:
        default = self._config.default_timeout_minutes
        try:
            settings = await self._settings.fetch_system_settings()
            configured = settings.get("autoLogoutMinutes") if settings else None
            minutes = max(self._config.min_timeout_minutes, int(configured or default))
        except Exception as exc:
            logger.warning(f"Failed to load session timeout from settings, using default: {exc}")
            minutes = max(self._config.min_timeout_minutes, default)
        return minutes * MS_PER_MINUTE

    async def refresh_session_timeout(self) -> None:
        """Drop the cached timeout and re-time the live session from now."""
        self._ctx.timeout_cache.invalidate(TIMEOUT_CACHE_KEY)
        if self.get_current_session() is None:
            return

        timeout_ms = await self.get_session_timeout_ms()
        session = self.get_current_session()
        if session is None:
            return

        session = session.extended(self._ctx.clock.now_ms(), timeout_ms)
        self._ctx.store.save(session)
        self._monitor.start()
        audit_log(
            AuditAction.SESSION_TIMEOUT_REFRESHED,
            session.user_id,
            {"timeout_minutes": timeout_ms // MS_PER_MINUTE, "expires_at": session.expires_at},
        )

    def get_warning_threshold_ms(self) -> int:
        return self._config.warning_threshold_minutes * MS_PER_MINUTE

    def get_check_interval_ms(self) -> int:
        return int(self._config.check_interval_seconds * 1000)

    # -- lifecycle -------------------------------------------------------------

    async def create_session(self, identity: SessionIdentity) -> Session:
        self._monitor.stop()

        timeout_ms = await self.get_session_timeout_ms()
        now = self._ctx.clock.now_ms()
        session = Session(
            user_id=identity.user_id,
            external_id=identity.external_id,
            display_name=identity.display_name,
            role=identity.role,
            is_manager=identity.is_manager,
            login_time=now,
            last_activity=now,
            expires_at=now + timeout_ms,
            token=self._ctx.token_issuer.issue(),
        )

        self._ctx.store.save(session, with_token=True)
        self._ctx.warning_shown = False
        set_session_active(True)
        bind_employee(session.external_id)
        audit_log(
            AuditAction.SESSION_CREATED,
            session.user_id,
            {"role": session.role, "timeout_minutes": timeout_ms // MS_PER_MINUTE},
        )

        self._monitor.start()
        return session

    def inspect_session(self) -> tuple[Session | None, InvalidReason | None]:
        """Return the live session, or ``None`` plus why there is none."""
        try:
            stored = self._ctx.store.load()
        except SessionStoreError as exc:
            logger.error(f"SessionManager: {exc.message} ({exc.context.get('reason')})")
            self.force_logout(InvalidReason.CORRUPT)
            return None, InvalidReason.CORRUPT

        if stored is None:
            if not self._ctx.store.is_empty():
                self.clear_session()
            return None, InvalidReason.MISSING

        if not stored.token_matches:
            self.force_logout(InvalidReason.TAMPERED)
            return None, InvalidReason.TAMPERED

        if stored.session.is_expired(self._ctx.clock.now_ms()):
            self.force_logout(InvalidReason.EXPIRED)
            return None, InvalidReason.EXPIRED

        return stored.session, None

    def get_current_session(self) -> Session | None:
        session, _ = self.inspect_session()
        return session

    def is_session_valid(self) -> bool:
        return self.get_current_session() is not None

    async def extend_session(self) -> bool:
        return await self._extend(AuditAction.SESSION_EXTENDED, None)

    async def extend_for_action(self, reason: str) -> bool:
        """Extend after a completed business action; ``reason`` is only audited."""
        return await self._extend(AuditAction.SESSION_EXTENDED_FOR_ACTION, reason)

    async def _extend(self, action: AuditAction, reason: str | None) -> bool:
        if self.get_current_session() is None:
            return False

        timeout_ms = await self.get_session_timeout_ms()
        # the monitor may have cleared the session while the timeout loaded
        session = self.get_current_session()
        if session is None:
            return False

        session = session.extended(self._ctx.clock.now_ms(), timeout_ms)
        self._ctx.store.save(session)
        self._dismiss_warning()

        details: dict[str, object] = {"expires_at": session.expires_at}
        if reason:
            details["reason"] = reason
        audit_log(action, session.user_id, details)
        return True

    def clear_session(self) -> None:
        had_session = not self._ctx.store.is_empty()
        self._ctx.store.clear()
        self._monitor.stop()
        self._ctx.warning_shown = False
        set_session_active(False)
        bind_employee(None)
        if had_session:
            audit_log(AuditAction.SESSION_CLEARED)

    def force_logout(self, reason: InvalidReason | str, **details: object) -> None:
        """Clear the session and tell the UI to return to the login screen."""
        reason_value = reason.value if isinstance(reason, InvalidReason) else reason
        self.clear_session()
        action = {
            InvalidReason.EXPIRED.value: AuditAction.SESSION_EXPIRED,
            InvalidReason.TAMPERED.value: AuditAction.SESSION_TAMPERED,
            InvalidReason.CORRUPT.value: AuditAction.SESSION_TAMPERED,
        }.get(reason_value, AuditAction.SESSION_REJECTED)
        audit_log(action, details={"reason": reason_value, **details}, success=False)
        self._ctx.signals.emit(
            SessionSignal.FORCED_LOGOUT,
            reason=reason_value,
            redirect_to=LOGIN_ROUTE,
            **details,
        )

    def handle_backend_rejection(self, endpoint: str) -> None:
        logger.warning(f"SessionManager: backend rejected credentials endpoint={endpoint}")
        self.force_logout("unauthorized", endpoint=endpoint)

    # -- derived values --------------------------------------------------------

    def get_time_until_expiry(self) -> int:
        session = self.get_current_session()
        if session is None:
            return 0
        time_left = session.time_left_ms(self._ctx.clock.now_ms())
        return max(0, time_left // MS_PER_MINUTE)

    def poll_expiry_warning(self) -> WarningState:
        """Advance the warning flag and notify listeners when the prompt changes."""
        state = evaluate_expiry_warning(
            self.get_time_until_expiry(),
            self._ctx.warning_shown,
            self._config.warning_threshold_minutes,
        )
        self._ctx.warning_shown = state.warning_shown
        if state.decision is WarningDecision.NEEDS_CONFIRMATION:
            self._ctx.signals.emit(
                SessionSignal.EXPIRY_WARNING, minutes_left=self.get_time_until_expiry()
            )
        elif state.decision is WarningDecision.DISMISS:
            self._ctx.signals.emit(SessionSignal.WARNING_DISMISSED)
        return state

    def _dismiss_warning(self) -> None:
        if self._ctx.warning_shown:
            self._ctx.signals.emit(SessionSignal.WARNING_DISMISSED)
        self._ctx.warning_shown = False

    # -- identity & permissions ------------------------------------------------

    def get_auth_headers(self) -> dict[str, str]:
        session = self.get_current_session()
        if session is None:
            return dict(ANONYMOUS_HEADERS)
        return {
            "X-User-Id": str(session.user_id),
            "X-User-Name": session.display_name or session.external_id,
            "X-Session-Token": session.token,
        }

    def has_permission(self, permission: str) -> bool:
        session = self.get_current_session()
        if session is None:
            return False
        return role_has_permission(session.role, permission)

    def require_permission(self, permission: str, action: str = "perform this action") -> None:
        if not self.has_permission(permission):
            session = self.get_current_session()
            audit_log(
                AuditAction.PERMISSION_DENIED,
                session.user_id if session else None,
                {"permission": permission, "action": action},
                success=False,
            )
            raise PermissionDeniedError(permission, action)

    def check_access(
        self, *, required_permission: str | None = None, required_role: str | None = None
    ) -> AccessDecision:
        decision = evaluate_access(
            self.get_current_session(),
            required_permission=required_permission,
            required_role=required_role,
        )
        if decision.outcome is AccessOutcome.LOGIN_REQUIRED:
            self.clear_session()
        return decision


__all__ = ["ANONYMOUS_HEADERS", "SessionManager"]
