# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .settings import (
    ApiConfig,
    AppConfig,
    ObservabilityConfig,
    ResilienceConfig,
    SessionConfig,
    load_config,
)

__all__ = [
    "ApiConfig",
    "AppConfig",
    "ObservabilityConfig",
    "ResilienceConfig",
    "SessionConfig",
    "load_config",
]
