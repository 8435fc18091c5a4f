"""
Staff roles and the capabilities each role grants.

This is the single place that decides what a role may do. Views never
compare role strings themselves; they ask for a capability through
``apps.accounts.permissions.HasCapability`` or ``User.can()``.
"""

from django.db import models


class Role(models.TextChoices):
    ADMIN = 'ADMIN', 'Admin'
    CASHIER = 'CASHIER', 'Cashier'


class Capability:
    CREATE_ORDERS = 'orders.create'
    VIEW_ORDERS = 'orders.view'
    UPDATE_ORDER_STATUS = 'orders.update_status'
    EDIT_ORDERS = 'orders.edit'
    DELETE_ORDERS = 'orders.delete'
    VIEW_REPORTS = 'orders.view_reports'
    MANAGE_CUSTOMERS = 'customers.manage'
    DELETE_CUSTOMERS = 'customers.delete'


_CASHIER_CAPABILITIES = frozenset({
    Capability.CREATE_ORDERS,
    Capability.VIEW_ORDERS,
    Capability.UPDATE_ORDER_STATUS,
    Capability.EDIT_ORDERS,
    Capability.VIEW_REPORTS,
    Capability.MANAGE_CUSTOMERS,
})

ROLE_CAPABILITIES = {
    Role.CASHIER: _CASHIER_CAPABILITIES,
    Role.ADMIN: _CASHIER_CAPABILITIES | {
        Capability.DELETE_ORDERS,
        Capability.DELETE_CUSTOMERS,
    },
}


def normalize_role(value):
    """Parse a role case-insensitively; ``None`` when unknown."""
    if not value:
        return None
    upper = str(value).strip().upper()
    return upper if upper in Role.values else None


def has_capability(role, capability):
    role = normalize_role(role)
    if role is None:
        return False
    return capability in ROLE_CAPABILITIES.get(role, frozenset())
