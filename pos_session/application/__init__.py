# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .interfaces import (
    Clock,
    JsonGateway,
    KeyValueStore,
    ScheduledHandle,
    Scheduler,
    SessionLifecycle,
    SettingsSource,
    TokenIssuer,
)

__all__ = [
    "Clock",
    "JsonGateway",
    "KeyValueStore",
    "ScheduledHandle",
    "Scheduler",
    "SessionLifecycle",
    "SettingsSource",
    "TokenIssuer",
]
