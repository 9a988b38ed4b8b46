"""
授权解析Service层
backend/app/services/sys_authorization_service.py
上次更新：2026/3/2
核心功能：
1. resolve：用户 → 有效角色 → 权限码并集 + 可见菜单森林（只读、结果与授权写入顺序无关）
2. has_permission：权限码校验，支持通配符（user:* / *）与超级管理员豁免
3. 结果按数据库中的授权版本号缓存到Redis；授权相关写操作在同一事务内调用 invalidate 递增版本号，
   Redis写入失败不会留下旧版本的缓存
"""
import logging
from typing import Optional
from uuid import UUID

from pydantic import ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.exceptions import ResourceNotFound
from app.repositories.sys_auth_version_repository import AuthVersionRepository
from app.repositories.sys_menu_repository import MenuRepository
from app.repositories.sys_permission_repository import PermissionRepository
from app.repositories.sys_role_repository import RoleRepository
from app.repositories.sys_user_repository import UserRepository
from app.schemas.sys_authorization import AuthorizationPayload
from app.services.redis_service import RedisService
from app.utils.menu_tree import build_menu_forest
from app.utils.permission_match import desensitize_user_id, match_permission

logger = logging.getLogger(__name__)


class AuthorizationService:
    """授权解析Service层：不持有全局状态，依赖全部由容器注入"""
    def __init__(
        self,
        user_repository: UserRepository,
        role_repository: RoleRepository,
        permission_repository: PermissionRepository,
        menu_repository: MenuRepository,
        redis_service: RedisService,
        auth_version_repository: AuthVersionRepository,
    ):
        self.user_repository = user_repository
        self.role_repository = role_repository
        self.permission_repository = permission_repository
        self.menu_repository = menu_repository
        self.redis_service = redis_service
        self.auth_version_repository = auth_version_repository

    # ------------------------------
    # 核心业务：解析用户授权
    # ------------------------------
    async def resolve(self, user_id: UUID, use_cache: bool = True) -> AuthorizationPayload:
        """
        解析用户的有效授权
        :raises ResourceNotFound: 用户不存在或已删除
        """
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise ResourceNotFound(f"用户 {user_id} 不存在")

        version: Optional[int] = None
        if use_cache and settings.AUTH_CACHE_TTL > 0:
            version = await self.auth_version_repository.get_version()
            cached = await self.redis_service.get_auth_payload(version, str(user_id))
            if cached:
                try:
                    return AuthorizationPayload.model_validate(cached)
                except ValidationError as e:
                    logger.warning(f"授权缓存内容无效，重新计算 | 错误：{e}")

        payload = await self._compute(user_id)

        if version is not None:
            await self.redis_service.cache_auth_payload(version, str(user_id), payload.model_dump(mode="json"))
        return payload

    async def _compute(self, user_id: UUID) -> AuthorizationPayload:
        masked_uid = desensitize_user_id(str(user_id))
        roles = await self.role_repository.get_active_roles_for_user(user_id)
        if not roles:
            logger.info(f"用户无有效角色 | 用户ID：{masked_uid}")
            return AuthorizationPayload(user_id=user_id)

        role_ids = [role.id for role in roles]
        permission_codes = await self.permission_repository.get_codes_for_roles(role_ids)
        granted_menu_ids = await self.menu_repository.get_menu_ids_for_roles(role_ids)

        # 仅启用且可见的菜单参与导航
        navigable = {menu.id: menu for menu in await self.menu_repository.list_navigable()}
        granted = [navigable[mid] for mid in granted_menu_ids if mid in navigable]
        forest = build_menu_forest(granted, settings.MENU_ORPHAN_POLICY, candidates=navigable)

        logger.info(
            f"用户授权解析完成 | 用户ID：{masked_uid} | 角色数：{len(roles)} | "
            f"权限数：{len(permission_codes)} | 菜单数：{len(granted)}"
        )
        return AuthorizationPayload(
            user_id=user_id,
            roles=sorted({role.code for role in roles}),
            permissions=sorted(permission_codes),
            menus=forest,
        )

    # ------------------------------
    # 权限判断
    # ------------------------------
    @staticmethod
    def payload_allows(payload: AuthorizationPayload, code: str) -> bool:
        """基于已解析结果判断是否拥有某权限码"""
        if settings.SUPER_ADMIN_ROLE_CODE in payload.roles:
            return True
        return match_permission(payload.permissions, code)

    async def has_permission(self, user_id: UUID, code: str) -> bool:
        payload = await self.resolve(user_id)
        return self.payload_allows(payload, code)

    async def invalidate(self, session: AsyncSession) -> int:
        """
        授权数据变更后调用：在写操作的事务内递增版本号，所有用户的缓存同时失效
        版本号与授权数据一起提交或回滚，Redis不可用也不会留下可命中的旧缓存
        """
        version = await self.auth_version_repository.bump(session)
        logger.info(f"授权版本号已更新 | version={version}")
        return version
