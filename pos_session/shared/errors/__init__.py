# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .base import (
    AppError,
    ErrorKind,
    PermissionDeniedError,
    RequestError,
    SessionStoreError,
    SettingsNotConfiguredError,
)

__all__ = [
    "AppError",
    "ErrorKind",
    "PermissionDeniedError",
    "RequestError",
    "SessionStoreError",
    "SettingsNotConfiguredError",
]
