# tests/test_access_filter.py

"""
Tests for role/permission filtering of sidebar groups, menu trees and modules.
"""

from core.access_filter import (
    filter_menu_items,
    filter_modules,
    filter_sidebar_groups,
    has_menu_item_access,
)
from core.modules_config import all_modules, get_module
from core.sidebar_config import all_groups
from models.access import MenuNode, ModuleConfig


def _ids(nodes):
    return [n.id for n in nodes]


def _tree():
    return [
        MenuNode(id="public", label="Public", path="/p"),
        MenuNode(id="sales-only", label="Sales", path="/s", roles=["sales"]),
        MenuNode(id="reports", label="Reports", roles=["accounts"], children=[
            MenuNode(id="aging", label="Aging", path="/r/aging", roles=["sales"]),
            MenuNode(id="pl", label="P&L", path="/r/pl", roles=["accounts"]),
        ]),
        MenuNode(id="coded", label="Coded", path="/c", permissions=["inventory.read"]),
    ]


# -----------------------------------------------------
# Menu items
# -----------------------------------------------------
def test_parent_kept_when_a_child_survives():
    result = filter_menu_items(_tree(), ["sales"])

    assert _ids(result) == ["public", "sales-only", "reports"]
    assert _ids(result[2].children) == ["aging"]


def test_permission_code_grants_node():
    result = filter_menu_items(_tree(), ["user"], ["inventory.read"])
    assert _ids(result) == ["public", "coded"]


def test_admin_keeps_everything():
    result = filter_menu_items(_tree(), ["admin"])

    assert _ids(result) == ["public", "sales-only", "reports", "coded"]
    assert _ids(result[2].children) == ["aging", "pl"]


def test_filtering_does_not_mutate_input():
    tree = _tree()
    filter_menu_items(tree, ["sales"])
    assert _ids(tree[2].children) == ["aging", "pl"]


def test_has_menu_item_access():
    item = MenuNode(id="x", label="X", roles=["accounts"])
    assert has_menu_item_access(item, ["accounts"])
    assert has_menu_item_access(item, ["admin"])
    assert not has_menu_item_access(item, ["sales"])
    assert has_menu_item_access(MenuNode(id="y", label="Y"), [])


# -----------------------------------------------------
# Sidebar groups
# -----------------------------------------------------
def test_sales_user_sidebar():
    groups = filter_sidebar_groups(all_groups(), ["sales"])
    ids = _ids(groups)

    assert "sales" in ids
    assert "settings" not in ids
    assert "procurement" not in ids

    # stock group is visible to sales but none of its items are
    assert "stock" not in ids

    reports = next(g for g in groups if g.id == "reports")
    assert _ids(reports.items) == ["aging-reports"]

    sales = next(g for g in groups if g.id == "sales")
    assert "sales-analysis" not in _ids(sales.items)


def test_admin_sees_every_group():
    groups = filter_sidebar_groups(all_groups(), ["admin"])
    assert _ids(groups) == ["stock", "sales", "procurement", "reports", "settings"]


def test_plain_user_sees_nothing():
    assert filter_sidebar_groups(all_groups(), ["user"]) == []


# -----------------------------------------------------
# Modules
# -----------------------------------------------------
def test_modules_filtered_by_code_and_enabled_set():
    codes = ["sales.read", "inventory.read", "inventory.adjust"]

    modules = filter_modules(all_modules(), codes, ["sales", "inventory"])
    assert _ids_of_modules(modules) == ["sales", "inventory"]

    inventory = next(m for m in modules if m.key == "inventory")
    assert _ids(inventory.sidebar_items) == ["inventory-home", "inventory-adjust"]

    sales = next(m for m in modules if m.key == "sales")
    assert _ids(sales.sidebar_items) == ["sales-home"]


def test_modules_without_enabled_list_only_check_codes():
    modules = filter_modules(all_modules(), ["pos.access"])
    assert _ids_of_modules(modules) == ["pos"]


def test_disabled_module_hidden_even_with_permission():
    assert filter_modules(all_modules(), ["sales.read"], ["inventory"]) == []


def test_modules_hidden_from_dashboard_are_dropped():
    hidden = ModuleConfig(
        key="archive",
        label="Archive",
        route="/archive",
        permissions=["archive.read"],
        show_on_dashboard=False,
    )
    visible = hidden.model_copy(update={"key": "ledger", "show_on_dashboard": True})

    modules = filter_modules([hidden, visible], ["archive.read"], ["archive", "ledger"])

    assert _ids_of_modules(modules) == ["ledger"]


def test_module_lookup():
    assert get_module("inventory").route == "/inventory"
    assert get_module("unknown") is None


def _ids_of_modules(modules):
    return [m.key for m in modules]
