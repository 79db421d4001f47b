# core/sidebar_config.py

"""
ERP sidebar tree and the route → roles table derived from it.
``admin`` is implied everywhere by the filters; it is listed for readability.
"""

from typing import Dict, List, Optional

from models.access import MenuNode, SidebarGroup


ALL_STAFF = ["admin", "sales", "accounts", "warehouse_manager", "procurement"]
STOCK = ["admin", "warehouse_manager"]
SALES = ["admin", "sales"]
PROCUREMENT = ["admin", "procurement", "warehouse_manager"]
PROCUREMENT_ACCOUNTS = ["admin", "procurement", "warehouse_manager", "accounts"]
ADMIN = ["admin"]


def _item(id: str, label: str, path: Optional[str], roles: List[str], children: Optional[List[MenuNode]] = None) -> MenuNode:
    return MenuNode(id=id, label=label, path=path, roles=list(roles), children=children)


# ============================================================
# Dashboard (single item, rendered above the groups)
# ============================================================
DASHBOARD_ITEM = _item("dashboard", "Dashboard", "/admin", ALL_STAFF)


# ============================================================
# Groups
# ============================================================
STOCK_GROUP = SidebarGroup(
    id="stock",
    label="Stock/Inventory",
    collapsible=True,
    roles=["admin", "sales", "warehouse_manager"],
    items=[
        _item("products", "Products", "/admin/products", STOCK),
        _item("categories", "Categories", "/admin/categories", STOCK),
        _item("warehouses", "Warehouses", "/admin/warehouses", STOCK),
        _item("stock-adjustment", "Stock Adjustment", "/admin/inventory/adjust", STOCK),
        _item("stock-transfer", "Stock Transfer", "/admin/inventory/transfer", STOCK),
        _item("stock-reports", "Reports", None, STOCK, [
            _item("stock-ledger", "Stock Ledger", "/admin/inventory/movements", STOCK),
            _item("stock-balance", "Stock Balance", "/admin/inventory/balance", STOCK),
            _item("warehouse-stock-balance", "Warehouse-wise Stock Balance", "/admin/inventory/warehouse-balance", STOCK),
        ]),
    ],
)

SALES_GROUP = SidebarGroup(
    id="sales",
    label="Sales",
    collapsible=True,
    roles=SALES,
    items=[
        _item("customers", "Customers", "/admin/customers", SALES),
        _item("leads", "Leads", "/admin/leads", SALES),
        _item("quotations", "Quotations", "/admin/quotations", SALES, [
            _item("quotations-list", "All Quotations", "/admin/quotations", SALES),
        ]),
        _item("orders", "Orders", "/admin/orders", SALES),
        _item("order-invoices", "Order Invoices", "/admin/invoices", SALES, [
            _item("invoices-list", "All Invoices", "/admin/invoices", SALES),
        ]),
        _item("payments", "Payments", "/admin/payments", SALES, [
            _item("payments-list", "All Payments", "/admin/payments", SALES),
        ]),
        _item("credit-management", "Credit Management", "/admin/credit-management", SALES),
        _item("sales-targets", "Sales Target", "/admin/sales-targets", SALES),
        _item("sales-persons", "Sales Persons", "/admin/sales-persons", SALES),
        _item("pos", "POS", "/admin/pos", SALES),
        _item("sales-analysis", "Sales Analysis", "/admin/sales/analysis", ADMIN),
        _item("sales-reports", "Reports", None, SALES, [
            _item("sales-summary", "Sales Summary", "/admin/sales/reports/summary", SALES),
            _item("invoice-register", "Invoice Register", "/admin/sales/reports/invoice-register", SALES),
            _item("outstanding-receivables", "Outstanding Receivables", "/admin/sales/reports/receivables", SALES),
            _item("sales-by-person", "Sales by Sales Person", "/admin/sales/reports/by-person", SALES),
        ]),
    ],
)

PROCUREMENT_GROUP = SidebarGroup(
    id="procurement",
    label="Procurement",
    collapsible=True,
    roles=PROCUREMENT_ACCOUNTS,
    items=[
        _item("suppliers", "Suppliers", "/admin/suppliers", PROCUREMENT),
        _item("purchase-orders", "Purchase Orders", "/admin/purchase-orders", PROCUREMENT),
        _item("goods-receipts", "Goods Receipts", "/admin/goods-receipts", PROCUREMENT),
        _item("purchase-invoices", "Purchase Invoices", "/admin/purchase-invoices", PROCUREMENT_ACCOUNTS),
        _item("supplier-payments", "Supplier Payments", "/admin/supplier-payments", ["admin", "procurement", "accounts"]),
        _item("procurement-reports", "Reports", None, PROCUREMENT_ACCOUNTS, [
            _item("purchase-summary", "Purchase Summary", "/admin/procurement/reports/summary", PROCUREMENT_ACCOUNTS),
            _item("grn-pending", "GRN Pending", "/admin/procurement/reports/grn-pending", PROCUREMENT_ACCOUNTS),
            _item("supplier-outstanding", "Supplier Outstanding", "/admin/procurement/reports/supplier-outstanding", PROCUREMENT_ACCOUNTS),
        ]),
    ],
)

REPORTS_GROUP = SidebarGroup(
    id="reports",
    label="Reports",
    collapsible=True,
    roles=ALL_STAFF,
    items=[
        _item("profit-loss", "Profit & Loss", "/admin/reports/profit-loss", ["admin", "accounts"]),
        _item("inventory-valuation", "Inventory Valuation", "/admin/reports/inventory-valuation", ["admin", "warehouse_manager", "accounts"]),
        _item("tax-gst-reports", "Tax / GST Reports", "/admin/reports/tax-gst", ["admin", "accounts"]),
        _item("aging-reports", "Aging Reports", "/admin/reports/aging", ["admin", "accounts", "sales"]),
        _item("custom-reports", "Custom Reports", "/admin/reports/custom", ["admin", "accounts"]),
    ],
)

SETTINGS_GROUP = SidebarGroup(
    id="settings",
    label="Settings",
    collapsible=True,
    roles=ADMIN,
    items=[
        _item("company-profile", "Company Profile", "/admin/settings/company", ADMIN),
        _item("users-roles", "Users & Roles", "/admin/settings/users-roles", ADMIN),
        _item("taxes", "Taxes", "/admin/taxes", ADMIN),
        _item("payment-modes", "Payment Modes", "/admin/settings/payment-modes", ADMIN),
        _item("settings-warehouses", "Warehouses", "/admin/warehouses", ADMIN),
        _item("number-series", "Number Series", "/admin/settings/number-series", ADMIN),
        _item("audit-logs", "Audit Logs", "/admin/settings/audit-logs", ADMIN),
    ],
)

# Settings is rendered bottom-anchored, after the main groups
SIDEBAR_GROUPS: List[SidebarGroup] = [STOCK_GROUP, SALES_GROUP, PROCUREMENT_GROUP, REPORTS_GROUP]
BOTTOM_GROUP: SidebarGroup = SETTINGS_GROUP


def all_groups() -> List[SidebarGroup]:
    return SIDEBAR_GROUPS + [BOTTOM_GROUP]


# ============================================================
# Route → roles (used by the route guard)
# ============================================================

def _collect_routes(items: List[MenuNode], table: Dict[str, List[str]]):
    for item in items:
        if item.path:
            merged = table.setdefault(item.path, [])
            for role in item.roles:
                if role not in merged:
                    merged.append(role)
        if item.children:
            _collect_routes(item.children, table)


def build_route_roles() -> Dict[str, List[str]]:
    table: Dict[str, List[str]] = {}
    _collect_routes([DASHBOARD_ITEM], table)
    for group in all_groups():
        _collect_routes(group.items, table)
    return table


ROUTE_ROLES: Dict[str, List[str]] = build_route_roles()
