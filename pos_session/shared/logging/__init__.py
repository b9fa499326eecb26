# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .logger import (
    bind_employee,
    clear_correlation_id,
    correlation_scope,
    get_correlation_id,
    has_correlation_id,
    logger,
    new_request_id,
    set_correlation_id,
    setup_logging,
)
from .sensitive_filter import sanitize_message, sanitize_record

__all__ = [
    "bind_employee",
    "clear_correlation_id",
    "correlation_scope",
    "get_correlation_id",
    "has_correlation_id",
    "logger",
    "new_request_id",
    "sanitize_message",
    "sanitize_record",
    "set_correlation_id",
    "setup_logging",
]
