# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import pytest

from pos_session.domain.sessions import SessionIdentity
from pos_session.infrastructure.audit import audit_trail
from pos_session.tests.fakes import Harness, build_harness


@pytest.fixture()
def harness() -> Harness:
    return build_harness()


@pytest.fixture()
def manager_identity() -> SessionIdentity:
    return SessionIdentity(
        user_id=7, external_id="EMP007", display_name="Dana", role="Manager", is_manager=True
    )


@pytest.fixture()
def cashier_identity() -> SessionIdentity:
    return SessionIdentity(user_id=12, external_id="EMP012", display_name="Sam", role="Cashier")


@pytest.fixture(autouse=True)
def _fresh_audit_trail() -> None:
    audit_trail.clear()
