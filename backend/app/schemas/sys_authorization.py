"""
授权结果Schema：用户的有效角色、权限码与可见菜单森林
backend/app/schemas/sys_authorization.py
"""
from typing import List
from uuid import UUID

from pydantic import Field

from app.schemas.base import BaseSchema
from app.schemas.sys_menu import MenuNode


class AuthorizationPayload(BaseSchema):
    user_id: UUID
    roles: List[str] = Field(default_factory=list, description="有效角色编码（已排序）")
    permissions: List[str] = Field(default_factory=list, description="有效权限码（已排序）")
    menus: List[MenuNode] = Field(default_factory=list, description="可见菜单森林")
