# core/modules_config.py

"""
Static module catalog shown on the dashboard. Each module is gated by its
permission codes; sidebar items inside a module are gated by a single code.
"""

from typing import Dict, List, Optional

from models.access import MenuNode, ModuleConfig
from models.enums import ModuleCode


def _link(id: str, label: str, path: str, permission: Optional[str] = None) -> MenuNode:
    return MenuNode(id=id, label=label, path=path, permissions=[permission] if permission else [])


MODULES: Dict[str, ModuleConfig] = {
    ModuleCode.ecommerce.value: ModuleConfig(
        key="ecommerce",
        label="E-commerce",
        description="Manage online store and orders",
        route="/ecommerce",
        permissions=["ecommerce.read"],
        sidebar_items=[
            _link("ecommerce-store", "Manage Store", "/ecommerce", "ecommerce.read"),
            _link("ecommerce-orders", "View Orders", "/ecommerce/orders", "ecommerce.read"),
        ],
    ),
    ModuleCode.sales.value: ModuleConfig(
        key="sales",
        label="Sales",
        description="Orders, invoices & customers",
        route="/sales",
        permissions=["sales.read"],
        sidebar_items=[
            _link("sales-home", "Go to Sales", "/sales", "sales.read"),
            _link("sales-create-order", "Create Order", "/sales/orders/create", "sales.write"),
        ],
    ),
    ModuleCode.inventory.value: ModuleConfig(
        key="inventory",
        label="Inventory",
        description="Stock management & warehouses",
        route="/inventory",
        permissions=["inventory.read"],
        sidebar_items=[
            _link("inventory-home", "Go to Inventory", "/inventory", "inventory.read"),
            _link("inventory-adjust", "Stock Adjustment", "/inventory/adjust", "inventory.adjust"),
            _link("inventory-transfer", "Stock Transfer", "/inventory/transfer", "inventory.transfer"),
        ],
    ),
    ModuleCode.procurement.value: ModuleConfig(
        key="procurement",
        label="Procurement",
        description="Purchase orders & suppliers",
        route="/procurement",
        permissions=["procurement.read"],
        sidebar_items=[
            _link("procurement-home", "Go to Procurement", "/procurement", "procurement.read"),
            _link("procurement-approve", "Approvals", "/procurement/approvals", "procurement.approve"),
        ],
    ),
    ModuleCode.accounting.value: ModuleConfig(
        key="accounting",
        label="Accounting",
        description="Financial management & ledgers",
        route="/accounting",
        permissions=["accounting.read"],
        sidebar_items=[
            _link("accounting-home", "Go to Accounting", "/accounting", "accounting.read"),
            _link("accounting-reconcile", "Reconciliation", "/accounting/reconcile", "accounting.reconcile"),
        ],
    ),
    ModuleCode.reports.value: ModuleConfig(
        key="reports",
        label="Reports",
        description="Analytics & business intelligence",
        route="/reports",
        permissions=["reports.read"],
        sidebar_items=[
            _link("reports-view", "View Reports", "/reports", "reports.read"),
            _link("reports-export", "Export", "/reports/export", "reports.export"),
        ],
    ),
    ModuleCode.pos.value: ModuleConfig(
        key="pos",
        label="POS",
        description="Point of Sale system",
        route="/pos",
        permissions=["pos.access"],
        sidebar_items=[
            _link("pos-open", "Open POS", "/pos", "pos.access"),
        ],
    ),
    ModuleCode.settings.value: ModuleConfig(
        key="settings",
        label="Settings",
        description="System configuration & administration",
        route="/settings",
        permissions=["settings.read"],
        sidebar_items=[
            _link("settings-home", "Go to Settings", "/settings", "settings.read"),
            _link("settings-edit", "Edit Settings", "/settings/edit", "settings.write"),
        ],
    ),
}


def all_modules() -> List[ModuleConfig]:
    return list(MODULES.values())


def get_module(key: str) -> Optional[ModuleConfig]:
    return MODULES.get(key)
