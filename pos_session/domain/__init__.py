# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .exceptions import DomainError, InvariantViolation
from .sessions import Role, Session, SessionIdentity

__all__ = [
    "DomainError",
    "InvariantViolation",
    "Role",
    "Session",
    "SessionIdentity",
]
