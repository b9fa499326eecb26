# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

REDACTED = "***REDACTED***"

_KEYED = r"(%s['\"]?\s*[:=]\s*['\"]?)(%s)(['\"]?)"

_RULES: list[tuple[re.Pattern[str], str]] = [
    # session credentials
    (re.compile(_KEYED % (r"x-session-token", r"[\w\-.]{16,}"), re.IGNORECASE), rf"\1{REDACTED}\3"),
    (re.compile(_KEYED % (r"session[_-]?token", r"[\w\-.]{16,}"), re.IGNORECASE), rf"\1{REDACTED}\3"),
    (re.compile(_KEYED % (r"\btoken", r"[\w\-.]{20,}"), re.IGNORECASE), rf"\1{REDACTED}\3"),
    (re.compile(r"(bearer\s+)([\w\-.]{20,})", re.IGNORECASE), rf"\1{REDACTED}"),
    (re.compile(r"\b[0-9a-f]{64}\b"), REDACTED),
    # employee secrets
    (re.compile(_KEYED % (r"\bpin", r"\d{4,}"), re.IGNORECASE), rf"\1{REDACTED}\3"),
    (re.compile(_KEYED % (r"password", r"[^'\"\s]{4,}"), re.IGNORECASE), rf"\1{REDACTED}\3"),
    (re.compile(r"(authorization['\"]?\s*:\s*['\"]?)([^'\"]{10,})(['\"]?)", re.IGNORECASE), rf"\1{REDACTED}\3"),
    # tendered card numbers
    (re.compile(r"\b\d{4}[- ]?\d{4}[- ]?\d{4}[- ]?\d{4}\b"), "****-****-****-****"),
]


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter: scrub the message and string extras, never drop the record."""
    record["message"] = sanitize_message(record["message"])
    extra = record.get("extra") or {}
    for key, value in extra.items():
        if isinstance(value, str):
            extra[key] = sanitize_message(value)
    return True


__all__ = ["REDACTED", "sanitize_message", "sanitize_record"]
