"""
角色相关的Pydantic Schemas
backend/app/schemas/sys_role.py
上次更新：2026/3/2
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.enums.sys_status import RoleStatus
from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


class RoleBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=64, description="角色名称", examples=["管理员"])
    code: str = Field(..., min_length=1, max_length=32, description="角色编码", examples=["admin"])
    description: Optional[str] = Field(None, max_length=255, description="角色描述")
    sort: int = Field(0, ge=0, description="显示顺序")
    status: RoleStatus = Field(RoleStatus.ACTIVE, description="角色状态")


class RoleCreate(RoleBase):
    permission_ids: List[UUID] = Field(default_factory=list, description="权限ID列表")
    menu_ids: List[UUID] = Field(default_factory=list, description="菜单ID列表")


class RoleUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=64)
    code: Optional[str] = Field(None, min_length=1, max_length=32)
    description: Optional[str] = None
    sort: Optional[int] = Field(None, ge=0)
    status: Optional[RoleStatus] = None
    permission_ids: Optional[List[UUID]] = None
    menu_ids: Optional[List[UUID]] = None


class RoleOut(RoleBase, TimestampSchema, IDSchema):
    deleted_at: Optional[datetime] = None


class RoleDetail(RoleOut):
    permission_ids: List[UUID] = Field(default_factory=list, description="已授权权限ID")
    menu_ids: List[UUID] = Field(default_factory=list, description="已授权菜单ID")


class RoleOption(BaseSchema):
    value: UUID
    label: str
    tag: str
