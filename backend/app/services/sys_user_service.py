"""
用户模块业务层
backend/app/services/sys_user_service.py
上次更新：2026/3/2
"""
import logging
from typing import List, Optional, Sequence
from uuid import UUID

from app.core.database import reject_null_columns
from app.core.exceptions import BadRequest, Conflict, ResourceNotFound, ValidationFailed
from app.core.security import get_password_hash, verify_password
from app.models import SysUser
from app.repositories.sys_role_repository import RoleRepository
from app.repositories.sys_user_repository import UserRepository
from app.schemas.base import PageQuery, PageResult
from app.schemas.sys_authorization import AuthorizationPayload
from app.schemas.sys_user import (
    Message, RoleBrief, UpdatePassword, UserCreate, UserOut, UserUpdate, UserWithRoles
)
from app.services.sys_authorization_service import AuthorizationService

logger = logging.getLogger(__name__)


class UserService:
    """用户Service层：仅管业务逻辑，事务由Repo的transaction上下文提供"""
    def __init__(
        self,
        user_repository: UserRepository,
        role_repository: RoleRepository,
        authorization_service: AuthorizationService,
    ):
        self.user_repository = user_repository
        self.role_repository = role_repository
        self.authorization_service = authorization_service

    async def _get_user_or_404(self, user_id: UUID) -> SysUser:
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise ResourceNotFound(f"用户 {user_id} 不存在")
        return user

    async def _validate_role_ids(self, role_ids: Sequence[UUID]) -> List[UUID]:
        """去重并校验角色ID全部存在且未删除"""
        unique_ids = list(dict.fromkeys(role_ids))
        existing = await self.role_repository.get_existing_ids(unique_ids)
        missing = [str(rid) for rid in unique_ids if rid not in existing]
        if missing:
            raise ValidationFailed(f"角色不存在或已删除：{', '.join(missing)}")
        return unique_ids

    async def _with_roles(self, user: SysUser) -> UserWithRoles:
        roles = await self.user_repository.get_roles(user.id)
        data = UserOut.model_validate(user).model_dump()
        return UserWithRoles(**data, roles=[RoleBrief.model_validate(role) for role in roles])

    # ------------------------------
    # 核心业务：创建用户
    # ------------------------------
    async def create_user(self, user_in: UserCreate) -> UserWithRoles:
        """创建用户（用户名唯一 + 可选分配角色，同一事务内完成）"""
        if await self.user_repository.get_by_username(user_in.username, include_deleted=True):
            raise Conflict(f"用户名 '{user_in.username}' 已存在")

        role_ids = await self._validate_role_ids(user_in.role_ids)

        user = SysUser(
            **user_in.model_dump(exclude={"password", "role_ids", "status"}),
            status=user_in.status.value,
            password=get_password_hash(user_in.password),
        )
        async with self.user_repository.transaction() as session:
            user = await self.user_repository.create(user, session)
            if role_ids:
                await self.user_repository.grant_roles(user.id, role_ids, session)
                await self.authorization_service.invalidate(session)

        logger.info(f"创建用户成功 | 用户名：{user.username} | 角色数：{len(role_ids)}")
        return await self._with_roles(user)

    # ------------------------------
    # 基础业务：查询用户
    # ------------------------------
    async def get_user(self, user_id: UUID) -> UserWithRoles:
        user = await self._get_user_or_404(user_id)
        return await self._with_roles(user)

    async def list_users(
        self,
        page_query: PageQuery,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
    ) -> PageResult[UserOut]:
        users, total = await self.user_repository.list_users(
            offset=page_query.offset, limit=page_query.size, keyword=keyword, status=status
        )
        return PageResult[UserOut](
            items=[UserOut.model_validate(u) for u in users],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def get_user_roles(self, user_id: UUID) -> List[RoleBrief]:
        await self._get_user_or_404(user_id)
        roles = await self.user_repository.get_roles(user_id)
        return [RoleBrief.model_validate(role) for role in roles]

    async def get_authorization(self, user_id: UUID) -> AuthorizationPayload:
        return await self.authorization_service.resolve(user_id)

    # ------------------------------
    # 基础业务：更新用户
    # ------------------------------
    async def update_user(self, user_id: UUID, user_update: UserUpdate) -> UserWithRoles:
        user = await self._get_user_or_404(user_id)
        update_data = user_update.model_dump(exclude_unset=True)
        reject_null_columns(SysUser.__table__, update_data)

        new_username = update_data.get("username")
        if new_username and new_username != user.username:
            if await self.user_repository.get_by_username(new_username, include_deleted=True):
                raise Conflict(f"用户名 '{new_username}' 已存在")
        if update_data.get("status") is not None:
            update_data["status"] = update_data["status"].value

        async with self.user_repository.transaction() as session:
            user = await self.user_repository.update(user_id, update_data, session)
            if not user:
                raise ResourceNotFound(f"用户 {user_id} 不存在")

        logger.info(f"更新用户成功 | 用户名：{user.username} | 字段：{sorted(update_data.keys())}")
        return await self._with_roles(user)

    async def update_password(self, user_id: UUID, body: UpdatePassword) -> Message:
        """修改个人密码（校验当前密码）"""
        user = await self._get_user_or_404(user_id)
        if not verify_password(body.current_password, user.password):
            raise BadRequest("当前密码错误")
        if body.current_password == body.new_password:
            raise BadRequest("新密码不能与当前密码相同")

        async with self.user_repository.transaction() as session:
            await self.user_repository.update(user_id, {"password": get_password_hash(body.new_password)}, session)
        return Message(message="密码修改成功")

    async def assign_roles(self, user_id: UUID, role_ids: Sequence[UUID]) -> List[RoleBrief]:
        """为用户分配角色（整体替换）"""
        await self._get_user_or_404(user_id)
        valid_ids = await self._validate_role_ids(role_ids)

        async with self.user_repository.transaction() as session:
            await self.user_repository.replace_roles(user_id, valid_ids, session)
            await self.authorization_service.invalidate(session)

        logger.info(f"用户角色已更新 | 用户ID：{user_id} | 角色数：{len(valid_ids)}")
        return await self.get_user_roles(user_id)

    # ------------------------------
    # 基础业务：删除用户（逻辑删除）
    # ------------------------------
    async def delete_user(self, user_id: UUID, current_user_id: Optional[UUID] = None) -> Message:
        if current_user_id is not None and user_id == current_user_id:
            raise BadRequest("不能删除当前登录用户")

        async with self.user_repository.transaction() as session:
            deleted = await self.user_repository.soft_delete(user_id, session)
            if not deleted:
                raise ResourceNotFound(f"用户 {user_id} 不存在")
            await self.authorization_service.invalidate(session)

        logger.info(f"删除用户成功 | 用户ID：{user_id}")
        return Message(message="用户删除成功")
