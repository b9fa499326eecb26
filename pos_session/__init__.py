# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Session lifecycle and resilient backend access for the POS frontend."""

from pos_session.container import Container
from pos_session.domain.sessions import Role, Session, SessionIdentity
from pos_session.shared.errors import ErrorKind, PermissionDeniedError, RequestError

__all__ = [
    "Container",
    "ErrorKind",
    "PermissionDeniedError",
    "RequestError",
    "Role",
    "Session",
    "SessionIdentity",
]
