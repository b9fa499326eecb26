# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import MS_PER_MINUTE, InvalidReason, Role, Session, SessionIdentity
from .permissions import ROLE_PERMISSIONS, role_has_permission
from .policies import (
    AccessDecision,
    AccessOutcome,
    WarningDecision,
    WarningState,
    evaluate_access,
    evaluate_expiry_warning,
)

__all__ = [
    "MS_PER_MINUTE",
    "ROLE_PERMISSIONS",
    "AccessDecision",
    "AccessOutcome",
    "InvalidReason",
    "Role",
    "Session",
    "SessionIdentity",
    "WarningDecision",
    "WarningState",
    "evaluate_access",
    "evaluate_expiry_warning",
    "role_has_permission",
]
