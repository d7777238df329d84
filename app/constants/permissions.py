from enum import Enum

from app.models.enums.user_role import UserRole


class Permission(str, Enum):
    view_dashboard = "view_dashboard"

    manage_vehicles = "manage_vehicles"
    view_vehicles = "view_vehicles"
    create_vehicles = "create_vehicles"
    edit_vehicles = "edit_vehicles"
    delete_vehicles = "delete_vehicles"

    manage_finances = "manage_finances"
    view_finances = "view_finances"
    create_invoices = "create_invoices"

    manage_customers = "manage_customers"
    view_customers = "view_customers"
    manage_inquiries = "manage_inquiries"
    view_inquiries = "view_inquiries"

    view_reports = "view_reports"
    export_data = "export_data"

    manage_users = "manage_users"
    manage_settings = "manage_settings"
    system_admin = "system_admin"


P = Permission

ROLE_PERMISSIONS: dict[UserRole, frozenset[Permission]] = {
    UserRole.super_admin: frozenset(Permission),
    UserRole.manager: frozenset({
        P.view_dashboard, P.view_vehicles, P.view_finances, P.view_customers,
        P.view_reports, P.export_data, P.manage_inquiries, P.view_inquiries,
    }),
    UserRole.inventory_manager: frozenset({
        P.view_dashboard, P.manage_vehicles, P.view_vehicles, P.create_vehicles,
        P.edit_vehicles, P.view_finances,
    }),
    UserRole.finance_manager: frozenset({
        P.view_dashboard, P.manage_finances, P.view_finances, P.create_invoices,
        P.view_vehicles, P.view_customers, P.view_reports, P.export_data,
    }),
    UserRole.sales_agent: frozenset({
        P.view_dashboard, P.view_vehicles, P.manage_customers, P.view_customers,
        P.manage_inquiries, P.view_inquiries, P.create_invoices,
    }),
    UserRole.viewer: frozenset({
        P.view_dashboard, P.view_vehicles, P.view_customers,
    }),
}


def has_permission(role, permission: Permission) -> bool:
    try:
        return permission in ROLE_PERMISSIONS[UserRole(role)]
    except ValueError:
        return False
