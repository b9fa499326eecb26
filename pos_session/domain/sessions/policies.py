# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Pure decisions the UI layer renders: expiry prompts and route guards."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pos_session.domain.sessions.entities import Session
from pos_session.domain.sessions.permissions import role_has_permission

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/manager"


class WarningDecision(str, Enum):
    NONE = "none"
    NEEDS_CONFIRMATION = "needs_confirmation"
    DISMISS = "dismiss"


@dataclass(slots=True, frozen=True)
class WarningState:
    decision: WarningDecision
    warning_shown: bool


def evaluate_expiry_warning(
    minutes_left: int, warning_shown: bool, threshold_minutes: int = 5
) -> WarningState:
    """Decide whether the "extend your session?" prompt should open or close.

    The prompt opens once per warning window. It is re-armed only after the
    remaining time climbs back above the threshold, which is also when an
    open prompt gets dismissed.
    """
    if 0 < minutes_left <= threshold_minutes and not warning_shown:
        return WarningState(WarningDecision.NEEDS_CONFIRMATION, True)
    if minutes_left > threshold_minutes and warning_shown:
        return WarningState(WarningDecision.DISMISS, False)
    return WarningState(WarningDecision.NONE, warning_shown)


class AccessOutcome(str, Enum):
    GRANTED = "granted"
    LOGIN_REQUIRED = "login_required"
    ROLE_DENIED = "role_denied"
    PERMISSION_DENIED = "permission_denied"


@dataclass(slots=True, frozen=True)
class AccessDecision:
    outcome: AccessOutcome
    redirect_to: str | None = None
    message: str | None = None

    @property
    def granted(self) -> bool:
        return self.outcome is AccessOutcome.GRANTED


def evaluate_access(
    session: Session | None,
    *,
    required_permission: str | None = None,
    required_role: str | None = None,
) -> AccessDecision:
    if session is None:
        return AccessDecision(AccessOutcome.LOGIN_REQUIRED, LOGIN_ROUTE)

    if required_role and session.role.lower() != required_role.lower():
        return AccessDecision(
            AccessOutcome.ROLE_DENIED,
            LOGIN_ROUTE,
            f"Access denied. Required role: {required_role}",
        )

    if required_permission and not role_has_permission(session.role, required_permission):
        return AccessDecision(
            AccessOutcome.PERMISSION_DENIED,
            HOME_ROUTE,
            "Access denied. Insufficient permissions.",
        )

    return AccessDecision(AccessOutcome.GRANTED)
