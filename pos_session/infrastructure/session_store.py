# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from dataclasses import dataclass

from pos_session.application.interfaces import KeyValueStore
from pos_session.domain.exceptions import InvariantViolation
from pos_session.domain.sessions import Session
from pos_session.shared.errors import SessionStoreError
from pos_session.shared.logging import logger

SESSION_KEY = "currentUser"
SESSION_TOKEN_KEY = "sessionToken"


@dataclass(slots=True, frozen=True)
class StoredSession:
    session: Session
    stored_token: str

    @property
    def token_matches(self) -> bool:
        return self.session.token == self.stored_token


class SessionStore:
    """Keeps the single session record plus a copy of its token.

    The record and the token copy live under separate keys so that a record
    swapped or edited behind our back no longer matches the token copy.
    """

    def __init__(self, storage: KeyValueStore) -> None:
        self._storage = storage

    def load(self) -> StoredSession | None:
        raw = self._storage.get(SESSION_KEY)
        stored_token = self._storage.get(SESSION_TOKEN_KEY)
        if not raw or not stored_token:
            return None

        try:
            session = Session.from_dict(json.loads(raw))
        except (json.JSONDecodeError, TypeError, InvariantViolation) as exc:
            raise SessionStoreError(
                "stored session record is unreadable", context={"reason": str(exc)}
            ) from exc

        return StoredSession(session=session, stored_token=stored_token)

    def save(self, session: Session, *, with_token: bool = False) -> None:
        self._storage.set(SESSION_KEY, json.dumps(session.to_dict()))
        if with_token:
            self._storage.set(SESSION_TOKEN_KEY, session.token)
        logger.debug(f"SessionStore: saved user_id={session.user_id} expires_at={session.expires_at}")

    def clear(self) -> None:
        self._storage.remove(SESSION_KEY)
        self._storage.remove(SESSION_TOKEN_KEY)

    def is_empty(self) -> bool:
        return self._storage.get(SESSION_KEY) is None and self._storage.get(SESSION_TOKEN_KEY) is None


__all__ = ["SESSION_KEY", "SESSION_TOKEN_KEY", "SessionStore", "StoredSession"]
