# core/access_filter.py

"""
Pure filtering of navigation trees by roles and permission codes.

Nothing here touches I/O and inputs are never mutated: every function
returns new model instances with sibling order preserved.
"""

from typing import Iterable, List, Optional, Sequence

from models.access import MenuNode, ModuleConfig, SidebarGroup
from models.enums import Role


def is_admin(roles: Iterable[str]) -> bool:
    return Role.admin.value in set(roles or [])


def _satisfies(node: MenuNode, roles: set, permissions: set) -> bool:
    if not node.roles and not node.permissions:
        return True
    return any(r in roles for r in node.roles) or any(p in permissions for p in node.permissions)


def _filter(items: Sequence[MenuNode], roles: set, permissions: set, admin: bool) -> List[MenuNode]:
    result = []

    for item in items:
        children = None
        if item.children is not None:
            children = _filter(item.children, roles, permissions, admin)

        if not admin and not _satisfies(item, roles, permissions) and not children:
            continue

        result.append(item.model_copy(update={"children": children}))

    return result


def filter_menu_items(
    items: Sequence[MenuNode],
    roles: Iterable[str],
    permissions: Iterable[str] = (),
) -> List[MenuNode]:
    """
    Keep the nodes a user may see.

    A node survives when it has no requirement, when the user holds any of
    its roles or permission codes, or when at least one child survives.
    Admins keep every node (children are still rebuilt recursively).
    """
    roles = set(roles or [])
    return _filter(items, roles, set(permissions or []), Role.admin.value in roles)


def filter_sidebar_groups(groups: Sequence[SidebarGroup], roles: Iterable[str]) -> List[SidebarGroup]:
    roles = set(roles or [])
    admin = Role.admin.value in roles
    result = []

    for group in groups:
        if not admin and group.roles and not any(r in roles for r in group.roles):
            continue

        items = _filter(group.items, roles, set(), admin)
        if not items:
            continue

        result.append(group.model_copy(update={"items": items}))

    return result


def has_menu_item_access(item: MenuNode, roles: Iterable[str]) -> bool:
    roles = set(roles or [])
    if Role.admin.value in roles:
        return True
    if not item.roles:
        return True
    return any(r in roles for r in item.roles)


# ============================================================
# Modules
# ============================================================

def filter_modules(
    modules: Sequence[ModuleConfig],
    permission_codes: Iterable[str],
    enabled_modules: Optional[Iterable[str]] = None,
) -> List[ModuleConfig]:
    """
    Dashboard modules whose permission list the user satisfies (any code),
    restricted to ``enabled_modules`` when given. Sidebar items are filtered
    by code.
    """
    codes = set(permission_codes or [])
    enabled = set(enabled_modules) if enabled_modules is not None else None
    result = []

    for module in modules:
        if not module.show_on_dashboard:
            continue
        if enabled is not None and module.key not in enabled:
            continue
        if module.permissions and not any(p in codes for p in module.permissions):
            continue

        items = _filter(module.sidebar_items, set(), codes, False)
        result.append(module.model_copy(update={"sidebar_items": items}))

    return result
