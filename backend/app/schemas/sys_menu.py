"""
菜单相关的Pydantic Schemas
backend/app/schemas/sys_menu.py
"""
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.enums.sys_status import MenuStatus, MenuType
from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


class MenuBase(BaseSchema):
    parent_id: Optional[UUID] = Field(None, description="父菜单ID，为空表示顶级菜单")
    name: str = Field(..., min_length=1, max_length=64, description="菜单名称")
    path: Optional[str] = Field(None, max_length=255, description="路由路径")
    component: Optional[str] = Field(None, max_length=255, description="组件路径")
    icon: Optional[str] = Field(None, max_length=64, description="图标")
    type: MenuType = Field(MenuType.MENU, description="菜单类型")
    visible: bool = Field(True, description="是否显示")
    sort: int = Field(0, ge=0, description="排序")
    status: MenuStatus = Field(MenuStatus.ACTIVE, description="状态")
    permission_code: Optional[str] = Field(None, max_length=100, description="关联权限标识")


class MenuCreate(MenuBase):
    pass


class MenuUpdate(BaseSchema):
    parent_id: Optional[UUID] = None
    name: Optional[str] = Field(None, min_length=1, max_length=64)
    path: Optional[str] = None
    component: Optional[str] = None
    icon: Optional[str] = None
    type: Optional[MenuType] = None
    visible: Optional[bool] = None
    sort: Optional[int] = Field(None, ge=0)
    status: Optional[MenuStatus] = None
    permission_code: Optional[str] = None


class MenuOut(MenuBase, TimestampSchema, IDSchema):
    pass


class MenuNode(BaseSchema):
    """菜单树节点"""
    id: UUID
    parent_id: Optional[UUID] = None
    name: str
    path: Optional[str] = None
    icon: Optional[str] = None
    type: str
    component: Optional[str] = None
    permission_code: Optional[str] = None
    sort: int = 0
    children: List["MenuNode"] = Field(default_factory=list)


MenuNode.model_rebuild()
