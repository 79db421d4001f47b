# models/access.py

from typing import List, Optional
from pydantic import BaseModel, Field

from models.enums import GuardState


class Permission(BaseModel):
    """One row of the get_user_permissions RPC."""
    permission_code: str
    module: str
    action: str


class AccessSnapshot(BaseModel):
    """What a user may do inside one company."""
    user_id: Optional[str] = None
    company_id: Optional[str] = None
    roles: List[str] = []
    permissions: List[Permission] = []
    modules: List[str] = []
    loading: bool = False

    @property
    def permission_codes(self) -> List[str]:
        return [p.permission_code for p in self.permissions]


# -----------------------------------------------------
# Menu / module trees
# -----------------------------------------------------
class MenuNode(BaseModel):
    """
    A navigation node. ``roles`` and ``permissions`` are alternative
    requirements: holding any one of them grants the node.
    """
    id: str
    label: str
    path: Optional[str] = None
    roles: List[str] = []
    permissions: List[str] = []
    children: Optional[List["MenuNode"]] = None


class SidebarGroup(BaseModel):
    id: str
    label: str
    items: List[MenuNode] = []
    roles: List[str] = []
    collapsible: bool = False


class ModuleConfig(BaseModel):
    key: str
    label: str
    description: str = ""
    route: str
    permissions: List[str] = []
    show_on_dashboard: bool = True
    sidebar_items: List[MenuNode] = []


class NavigationResponse(BaseModel):
    groups: List[SidebarGroup]
    modules: List[ModuleConfig]


class GuardDecision(BaseModel):
    state: GuardState
    redirect_to: Optional[str] = None
    required_roles: List[str] = Field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.state == GuardState.authorized


MenuNode.model_rebuild()
