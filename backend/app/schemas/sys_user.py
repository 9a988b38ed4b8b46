"""
用户相关的Pydantic Schemas
backend/app/schemas/sys_user.py
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import EmailStr, Field

from app.enums.sys_status import UserStatus
from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


class UserBase(BaseSchema):
    username: str = Field(..., min_length=2, max_length=64, description="用户名", examples=["john_doe"])
    nickname: Optional[str] = Field(None, max_length=64, description="昵称")
    email: Optional[EmailStr] = Field(None, description="邮箱地址")
    mobile: Optional[str] = Field(None, max_length=20, description="手机号")
    avatar: Optional[str] = Field(None, max_length=255, description="头像URL")


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=40, description="密码")
    status: UserStatus = Field(UserStatus.ACTIVE, description="状态")
    role_ids: List[UUID] = Field(default_factory=list, description="角色ID列表")


class UserUpdate(BaseSchema):
    username: Optional[str] = Field(None, min_length=2, max_length=64)
    nickname: Optional[str] = None
    email: Optional[EmailStr] = None
    mobile: Optional[str] = None
    avatar: Optional[str] = None
    status: Optional[UserStatus] = None


class UserOut(UserBase, TimestampSchema, IDSchema):
    status: UserStatus
    last_login: Optional[datetime] = None


class RoleBrief(IDSchema):
    name: str
    code: str
    status: str


class UserWithRoles(UserOut):
    roles: List[RoleBrief] = Field(default_factory=list)


class UpdatePassword(BaseSchema):
    current_password: str = Field(..., min_length=6, max_length=40, description="当前密码")
    new_password: str = Field(..., min_length=6, max_length=40, description="新密码")


class Token(BaseSchema):
    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseSchema):
    sub: Optional[str] = None


class Message(BaseSchema):
    message: str
