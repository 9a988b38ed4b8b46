# app/schemas/sys_relationship.py
"""
关联关系相关的Pydantic Schemas（整体替换式分配）
"""
from typing import List
from uuid import UUID

from pydantic import Field

from app.schemas.base import BaseSchema


class UserRoleAssignment(BaseSchema):
    role_ids: List[UUID] = Field(..., description="角色ID列表（整体替换，空列表表示清空）")


class RolePermissionAssignment(BaseSchema):
    permission_ids: List[UUID] = Field(..., description="权限ID列表（整体替换，空列表表示清空）")


class RoleMenuAssignment(BaseSchema):
    menu_ids: List[UUID] = Field(..., description="菜单ID列表（整体替换，空列表表示清空）")
