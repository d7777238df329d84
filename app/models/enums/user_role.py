import enum


class UserRole(str, enum.Enum):
    super_admin = "super_admin"
    manager = "manager"
    inventory_manager = "inventory_manager"
    finance_manager = "finance_manager"
    sales_agent = "sales_agent"
    viewer = "viewer"


ROLE_DISPLAY_NAMES = {
    UserRole.super_admin: "Super Administrator",
    UserRole.manager: "Manager",
    UserRole.inventory_manager: "Inventory Manager",
    UserRole.finance_manager: "Finance Manager",
    UserRole.sales_agent: "Sales Agent",
    UserRole.viewer: "Viewer",
}
