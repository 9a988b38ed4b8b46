"""
权限相关的Pydantic Schemas
backend/app/schemas/sys_permission.py
"""
from typing import List, Optional

from pydantic import Field

from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


class PermissionBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=64, description="权限名称")
    code: str = Field(..., min_length=1, max_length=100, pattern=r"^[\w\-*]+(:[\w\-*]+)*$", description="权限编码", examples=["user:read"])
    resource: Optional[str] = Field(None, max_length=50, description="资源")
    action: Optional[str] = Field(None, max_length=50, description="操作")
    category: Optional[str] = Field(None, max_length=50, description="分类")
    description: Optional[str] = Field(None, max_length=255, description="描述")


class PermissionCreate(PermissionBase):
    pass


class PermissionUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=64)
    code: Optional[str] = Field(None, min_length=1, max_length=100, pattern=r"^[\w\-*]+(:[\w\-*]+)*$")
    resource: Optional[str] = None
    action: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class PermissionOut(PermissionBase, TimestampSchema, IDSchema):
    pass


class PermissionGroup(BaseSchema):
    category: str
    permissions: List[PermissionOut] = Field(default_factory=list)
