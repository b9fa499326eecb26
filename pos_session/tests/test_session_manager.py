# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json

import pytest

from pos_session.domain.sessions import SessionIdentity, WarningDecision
from pos_session.domain.sessions.policies import AccessOutcome
from pos_session.infrastructure.audit import AuditAction, audit_trail
from pos_session.infrastructure.session_store import SESSION_KEY, SESSION_TOKEN_KEY
from pos_session.infrastructure.signals import SessionSignal
from pos_session.shared.errors import PermissionDeniedError
from pos_session.tests.fakes import Harness, build_harness

MINUTE = 60_000


@pytest.mark.asyncio
async def test_create_session_persists_record_and_token_copy(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    session = await harness.manager.create_session(manager_identity)

    assert session.token == f"{1:064x}"
    assert session.login_time == session.last_activity == 0
    assert session.expires_at == 5 * MINUTE
    assert harness.storage.get(SESSION_TOKEN_KEY) == session.token
    assert json.loads(harness.storage.get(SESSION_KEY))["sessionToken"] == session.token
    assert harness.manager.get_current_session() == session


@pytest.mark.asyncio
async def test_second_login_replaces_first_session(
    harness: Harness, manager_identity: SessionIdentity, cashier_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    second = await harness.manager.create_session(cashier_identity)

    current = harness.manager.get_current_session()
    assert current == second
    assert current.role == "Cashier"
    assert len(harness.scheduler.pending) == 1


@pytest.mark.asyncio
async def test_token_mismatch_invalidates_and_clears_both_keys(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    harness.storage.set(SESSION_TOKEN_KEY, "forged")

    assert harness.manager.get_current_session() is None
    assert harness.storage.get(SESSION_KEY) is None
    assert harness.storage.get(SESSION_TOKEN_KEY) is None
    assert harness.signals.of(SessionSignal.FORCED_LOGOUT)[0].payload["reason"] == "tampered"
    [entry] = audit_trail.recent(AuditAction.SESSION_TAMPERED)
    assert entry.success is False


@pytest.mark.asyncio
async def test_missing_token_copy_clears_record(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    harness.storage.remove(SESSION_TOKEN_KEY)

    assert harness.manager.is_session_valid() is False
    assert harness.storage.get(SESSION_KEY) is None


@pytest.mark.asyncio
async def test_corrupt_record_is_cleared(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    harness.storage.set(SESSION_KEY, "{not json")

    assert harness.manager.get_current_session() is None
    assert harness.storage.get(SESSION_TOKEN_KEY) is None


@pytest.mark.asyncio
async def test_non_finite_expiry_is_treated_as_corrupt(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    record = json.loads(harness.storage.get(SESSION_KEY))
    record["expiresAt"] = float("inf")
    harness.storage.set(SESSION_KEY, json.dumps(record))

    assert harness.manager.is_session_valid() is False
    assert harness.storage.keys() == []
    assert harness.manager.get_auth_headers() == {"X-User-Id": "0", "X-User-Name": "Unknown"}
    [event] = harness.signals.of(SessionSignal.FORCED_LOGOUT)
    assert event.payload["reason"] == "corrupt"


@pytest.mark.asyncio
async def test_five_minute_timeout_scenario(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)

    harness.clock.set(4 * MINUTE)
    assert harness.manager.get_time_until_expiry() == 1

    harness.clock.set(299_000)
    assert harness.manager.is_session_valid() is True
    assert harness.manager.get_time_until_expiry() == 0

    harness.clock.set(300_000)
    assert harness.manager.is_session_valid() is False
    assert harness.manager.get_time_until_expiry() == 0
    assert harness.storage.get(SESSION_KEY) is None


@pytest.mark.asyncio
async def test_extend_is_idempotent_under_frozen_clock(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    harness.clock.set(2 * MINUTE)

    assert await harness.manager.extend_session() is True
    first = harness.manager.get_current_session().expires_at
    assert await harness.manager.extend_session() is True
    second = harness.manager.get_current_session().expires_at

    assert first == second == 7 * MINUTE


@pytest.mark.asyncio
async def test_extend_for_action_moves_expiry_and_keeps_token(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    created = await harness.manager.create_session(manager_identity)
    harness.clock.set(3 * MINUTE)

    assert await harness.manager.extend_for_action("Sale completed") is True

    session = harness.manager.get_current_session()
    assert session.last_activity == 3 * MINUTE
    assert session.expires_at == 8 * MINUTE
    assert session.token == created.token
    assert session.login_time == created.login_time


@pytest.mark.asyncio
async def test_extend_without_session_returns_false(harness: Harness) -> None:
    assert await harness.manager.extend_session() is False
    assert await harness.manager.extend_for_action("Sale completed") is False
    assert harness.storage.keys() == []


@pytest.mark.asyncio
async def test_reads_do_not_extend_session(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    harness.clock.set(4 * MINUTE)

    harness.manager.get_auth_headers()
    harness.manager.has_permission("pos.sale")

    assert harness.manager.get_current_session().expires_at == 5 * MINUTE


@pytest.mark.asyncio
async def test_clear_session_removes_keys_and_cancels_monitor(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    assert harness.scheduler.pending

    harness.manager.clear_session()

    assert harness.storage.keys() == []
    assert harness.scheduler.pending == []
    assert harness.manager.context.monitor_handle is None


def test_auth_headers_for_anonymous_caller(harness: Harness) -> None:
    assert harness.manager.get_auth_headers() == {"X-User-Id": "0", "X-User-Name": "Unknown"}


@pytest.mark.asyncio
async def test_auth_headers_for_live_session(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    session = await harness.manager.create_session(manager_identity)

    assert harness.manager.get_auth_headers() == {
        "X-User-Id": "7",
        "X-User-Name": "Dana",
        "X-Session-Token": session.token,
    }


@pytest.mark.asyncio
async def test_auth_headers_fall_back_to_external_id(harness: Harness) -> None:
    await harness.manager.create_session(
        SessionIdentity(user_id=3, external_id="EMP003", display_name="", role="Cashier")
    )

    assert harness.manager.get_auth_headers()["X-User-Name"] == "EMP003"


@pytest.mark.asyncio
async def test_permissions_follow_role(
    harness: Harness, manager_identity: SessionIdentity, cashier_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    assert harness.manager.has_permission("inventory.adjust") is True

    await harness.manager.create_session(cashier_identity)
    assert harness.manager.has_permission("inventory.adjust") is False
    assert harness.manager.has_permission("pos.return") is True


def test_no_permissions_without_session(harness: Harness) -> None:
    assert harness.manager.has_permission("pos.sale") is False


@pytest.mark.asyncio
async def test_require_permission_raises_permission_denied(
    harness: Harness, cashier_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(cashier_identity)

    with pytest.raises(PermissionDeniedError) as exc_info:
        harness.manager.require_permission("inventory.edit", "edit products")

    assert exc_info.value.message == "Insufficient permissions to edit products. Required: inventory.edit"
    harness.manager.require_permission("pos.sale")


@pytest.mark.asyncio
async def test_timeout_is_cached_for_five_minutes(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    harness.clock.set(MINUTE)
    await harness.manager.extend_session()
    assert harness.settings.calls == 1

    harness.clock.set(5 * MINUTE)
    await harness.manager.extend_session()
    assert harness.settings.calls == 2


@pytest.mark.asyncio
async def test_timeout_minimum_is_enforced(manager_identity: SessionIdentity) -> None:
    harness = build_harness(timeout_minutes=1)

    session = await harness.manager.create_session(manager_identity)

    assert session.expires_at == 5 * MINUTE


@pytest.mark.asyncio
async def test_settings_failure_falls_back_to_default(manager_identity: SessionIdentity) -> None:
    harness = build_harness(settings_error=RuntimeError("backend down"))

    session = await harness.manager.create_session(manager_identity)

    assert session.expires_at == 30 * MINUTE


@pytest.mark.asyncio
async def test_missing_setting_uses_default(manager_identity: SessionIdentity) -> None:
    harness = build_harness(timeout_minutes=None)

    session = await harness.manager.create_session(manager_identity)

    assert session.expires_at == 30 * MINUTE


@pytest.mark.asyncio
async def test_refresh_session_timeout_retimes_from_now(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    harness.clock.set(2 * MINUTE)
    harness.settings.settings["autoLogoutMinutes"] = 15

    await harness.manager.refresh_session_timeout()

    session = harness.manager.get_current_session()
    assert session.last_activity == 2 * MINUTE
    assert session.expires_at == 17 * MINUTE
    assert harness.settings.calls == 2
    assert len(harness.scheduler.pending) == 1


@pytest.mark.asyncio
async def test_refresh_without_session_only_drops_cache(harness: Harness) -> None:
    await harness.manager.refresh_session_timeout()

    assert harness.settings.calls == 0
    assert harness.storage.keys() == []


@pytest.mark.asyncio
async def test_warning_prompt_opens_once_and_extension_dismisses_it(
    harness: Harness, manager_identity: SessionIdentity
) -> None:
    await harness.manager.create_session(manager_identity)
    harness.clock.set(MINUTE)

    first = harness.manager.poll_expiry_warning()
    second = harness.manager.poll_expiry_warning()
    assert first.decision is WarningDecision.NEEDS_CONFIRMATION
    assert second.decision is WarningDecision.NONE
    assert len(harness.signals.of(SessionSignal.EXPIRY_WARNING)) == 1

    await harness.manager.extend_session()

    assert len(harness.signals.of(SessionSignal.WARNING_DISMISSED)) == 1
    assert harness.manager.context.warning_shown is False


@pytest.mark.asyncio
async def test_check_access_outcomes(
    harness: Harness, cashier_identity: SessionIdentity
) -> None:
    decision = harness.manager.check_access(required_permission="pos.sale")
    assert decision.outcome is AccessOutcome.LOGIN_REQUIRED
    assert decision.redirect_to == "/login"

    await harness.manager.create_session(cashier_identity)

    assert harness.manager.check_access(required_permission="pos.sale").granted
    denied = harness.manager.check_access(required_permission="inventory.adjust")
    assert denied.outcome is AccessOutcome.PERMISSION_DENIED
    assert denied.redirect_to == "/manager"
    wrong_role = harness.manager.check_access(required_role="manager")
    assert wrong_role.outcome is AccessOutcome.ROLE_DENIED
