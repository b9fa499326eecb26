# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pos_session.shared.logging import logger


class MemoryKeyValueStore:
    """Process-scoped key/value store; nothing survives a restart."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            logger.debug(f"storage: removed key={key}")

    def keys(self) -> list[str]:
        return list(self._data)


__all__ = ["MemoryKeyValueStore"]
