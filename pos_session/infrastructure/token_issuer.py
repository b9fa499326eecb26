# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import secrets


class SecureTokenIssuer:
    """Hex session tokens drawn from the OS CSPRNG."""

    def __init__(self, nbytes: int = 32) -> None:
        if nbytes < 32:
            raise ValueError("session tokens need at least 32 bytes of entropy")
        self._nbytes = nbytes

    def issue(self) -> str:
        return secrets.token_hex(self._nbytes)
