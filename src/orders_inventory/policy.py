"""Access policy: who may invoke which catalog, stock and order operation.

The API depends on `AccessPolicy`, never on a concrete role check, so a
deployment can swap in its own implementation through FastAPI's dependency
overrides.
"""
import abc
import enum
from typing import NamedTuple

from . import models


class Role(str, enum.Enum):
    ADMINISTRATOR = "administrator"
    EDITOR = "editor"
    USER = "user"


class Principal(NamedTuple):
    """The authenticated caller."""
    id: int
    role: Role


ROLE_PERMISSIONS = {
    Role.ADMINISTRATOR: frozenset({
        "products.view", "products.create", "products.edit", "products.delete",
        "stock.view", "stock.create", "stock.adjust", "stock.delete",
        "orders.view_all", "orders.create", "orders.process", "orders.cancel",
    }),
    Role.EDITOR: frozenset({
        "products.view", "products.edit",
        "stock.view", "stock.create", "stock.adjust",
        "orders.view_all", "orders.create", "orders.process",
    }),
    Role.USER: frozenset({
        "products.view",
        "orders.create",
    }),
}


class AccessPolicy(abc.ABC):
    """Capability checks consulted before any lifecycle operation runs."""

    @abc.abstractmethod
    def can_create_order(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_view_order(self, user: Principal, order: models.Order) -> bool:
        ...

    @abc.abstractmethod
    def can_update_order(self, user: Principal, order: models.Order) -> bool:
        ...

    @abc.abstractmethod
    def can_cancel_order(self, user: Principal, order: models.Order) -> bool:
        ...

    @abc.abstractmethod
    def can_delete_order(self, user: Principal, order: models.Order) -> bool:
        ...

    @abc.abstractmethod
    def can_list_all_orders(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_view_products(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_create_products(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_edit_products(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_delete_products(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_view_stock(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_create_stock(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_adjust_stock(self, user: Principal) -> bool:
        ...

    @abc.abstractmethod
    def can_delete_stock(self, user: Principal) -> bool:
        ...


class RoleBasedPolicy(AccessPolicy):
    """Grants permissions per role; see ROLE_PERMISSIONS."""

    def __init__(self, role_permissions=None):
        self.role_permissions = role_permissions or ROLE_PERMISSIONS

    def has_permission(self, user: Principal, permission: str) -> bool:
        return permission in self.role_permissions.get(user.role, frozenset())

    def can_create_order(self, user):
        return self.has_permission(user, "orders.create")

    def can_view_order(self, user, order):
        return order.owner_id == user.id or self.can_list_all_orders(user)

    def can_update_order(self, user, order):
        return self.has_permission(user, "orders.process")

    def can_cancel_order(self, user, order):
        return self.has_permission(user, "orders.cancel")

    def can_delete_order(self, user, order):
        # Deleting reverts stock just like cancelling
        return self.can_cancel_order(user, order)

    def can_list_all_orders(self, user):
        return self.has_permission(user, "orders.view_all")

    def can_view_products(self, user):
        return self.has_permission(user, "products.view")

    def can_create_products(self, user):
        return self.has_permission(user, "products.create")

    def can_edit_products(self, user):
        return self.has_permission(user, "products.edit")

    def can_delete_products(self, user):
        return self.has_permission(user, "products.delete")

    def can_view_stock(self, user):
        return self.has_permission(user, "stock.view")

    def can_create_stock(self, user):
        return self.has_permission(user, "stock.create")

    def can_adjust_stock(self, user):
        return self.has_permission(user, "stock.adjust")

    def can_delete_stock(self, user):
        return self.has_permission(user, "stock.delete")
