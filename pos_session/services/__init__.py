# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .api_client import ApiClient, SystemSettingsSource
from .session_context import SessionContext
from .session_manager import SessionManager
from .session_monitor import MonitorState, SessionMonitor

__all__ = [
    "ApiClient",
    "MonitorState",
    "SessionContext",
    "SessionManager",
    "SessionMonitor",
    "SystemSettingsSource",
]
