# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pos_session.domain.sessions.entities import Role

POS_SALE = "pos.sale"
POS_RETURN = "pos.return"
INVENTORY_VIEW = "inventory.view"
INVENTORY_ADD = "inventory.add"
INVENTORY_EDIT = "inventory.edit"
INVENTORY_ADJUST = "inventory.adjust"

# Managers are not listed: they hold every permission.
ROLE_PERMISSIONS: dict[Role, frozenset[str]] = {
    Role.CASHIER: frozenset({POS_SALE, POS_RETURN, INVENTORY_VIEW}),
    Role.INVENTORY: frozenset({INVENTORY_VIEW, INVENTORY_ADD, INVENTORY_EDIT, INVENTORY_ADJUST}),
}


def role_has_permission(role: str | None, permission: str) -> bool:
    parsed = Role.parse(role)
    if parsed is None:
        return False
    if parsed is Role.MANAGER:
        return True
    return permission in ROLE_PERMISSIONS.get(parsed, frozenset())
