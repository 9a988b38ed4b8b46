"""
角色模块业务层
backend/app/services/sys_role_service.py
上次更新：2026/3/2
说明：
- 名称/编码只在未删除角色范围内唯一
- 删除为软删除，关联表保留；恢复后原有授权自动生效
- 任何影响授权结果的写操作都在同一事务内递增授权版本号
"""
import logging
from typing import List, Optional, Sequence
from uuid import UUID

from app.core.database import reject_null_columns
from app.core.exceptions import Conflict, ResourceNotFound, ValidationFailed
from app.models import SysRole
from app.repositories.sys_menu_repository import MenuRepository
from app.repositories.sys_permission_repository import PermissionRepository
from app.repositories.sys_role_repository import RoleRepository
from app.schemas.base import PageQuery, PageResult
from app.schemas.sys_role import RoleCreate, RoleDetail, RoleOption, RoleOut, RoleUpdate
from app.schemas.sys_user import Message
from app.services.sys_authorization_service import AuthorizationService

logger = logging.getLogger(__name__)


class RoleService:
    """角色Service层"""
    def __init__(
        self,
        role_repository: RoleRepository,
        permission_repository: PermissionRepository,
        menu_repository: MenuRepository,
        authorization_service: AuthorizationService,
    ):
        self.role_repository = role_repository
        self.permission_repository = permission_repository
        self.menu_repository = menu_repository
        self.authorization_service = authorization_service

    # ------------------------------
    # 内部校验
    # ------------------------------
    async def _get_role_or_404(self, role_id: UUID) -> SysRole:
        role = await self.role_repository.get_by_id(role_id)
        if not role:
            raise ResourceNotFound(f"角色 {role_id} 不存在")
        return role

    async def _check_unique(self, name: Optional[str], code: Optional[str], exclude_id: Optional[UUID] = None) -> None:
        existing = await self.role_repository.find_alive_conflict(name=name, code=code, exclude_id=exclude_id)
        if not existing:
            return
        if name and existing.name == name:
            raise Conflict(f"角色名称 '{name}' 已存在")
        raise Conflict(f"角色编码 '{code}' 已存在")

    async def _validate_permission_ids(self, permission_ids: Sequence[UUID]) -> List[UUID]:
        unique_ids = list(dict.fromkeys(permission_ids))
        existing = await self.permission_repository.get_existing_ids(unique_ids)
        missing = [str(pid) for pid in unique_ids if pid not in existing]
        if missing:
            raise ValidationFailed(f"权限不存在：{', '.join(missing)}")
        return unique_ids

    async def _validate_menu_ids(self, menu_ids: Sequence[UUID]) -> List[UUID]:
        unique_ids = list(dict.fromkeys(menu_ids))
        existing = await self.menu_repository.get_existing_ids(unique_ids)
        missing = [str(mid) for mid in unique_ids if mid not in existing]
        if missing:
            raise ValidationFailed(f"菜单不存在：{', '.join(missing)}")
        return unique_ids

    async def _to_detail(self, role: SysRole) -> RoleDetail:
        return RoleDetail(
            **RoleOut.model_validate(role).model_dump(),
            permission_ids=await self.role_repository.get_permission_ids(role.id),
            menu_ids=await self.role_repository.get_menu_ids(role.id),
        )

    # ------------------------------
    # 查询
    # ------------------------------
    async def list_roles(
        self,
        page_query: PageQuery,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
    ) -> PageResult[RoleOut]:
        roles, total = await self.role_repository.list_roles(
            offset=page_query.offset, limit=page_query.size, keyword=keyword, status=status
        )
        return PageResult[RoleOut](
            items=[RoleOut.model_validate(r) for r in roles],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def list_active_roles(self) -> List[RoleOut]:
        return [RoleOut.model_validate(r) for r in await self.role_repository.list_active()]

    async def get_role_options(self) -> List[RoleOption]:
        """角色下拉选项（仅启用角色）"""
        roles = await self.role_repository.list_active()
        return [RoleOption(value=r.id, label=r.name, tag=r.code) for r in roles]

    async def get_role(self, role_id: UUID) -> RoleDetail:
        role = await self._get_role_or_404(role_id)
        return await self._to_detail(role)

    # ------------------------------
    # 创建/更新
    # ------------------------------
    async def create_role(self, role_in: RoleCreate) -> RoleDetail:
        await self._check_unique(role_in.name, role_in.code)
        permission_ids = await self._validate_permission_ids(role_in.permission_ids)
        menu_ids = await self._validate_menu_ids(role_in.menu_ids)

        role = SysRole(
            **role_in.model_dump(exclude={"permission_ids", "menu_ids", "status"}),
            status=role_in.status.value,
        )
        async with self.role_repository.transaction() as session:
            role = await self.role_repository.create(role, session)
            await self.role_repository.grant_permissions(role.id, permission_ids, session)
            await self.role_repository.grant_menus(role.id, menu_ids, session)
            if permission_ids or menu_ids:
                await self.authorization_service.invalidate(session)

        logger.info(f"创建角色成功 | 编码：{role.code} | 权限数：{len(permission_ids)} | 菜单数：{len(menu_ids)}")
        return await self._to_detail(role)

    async def update_role(self, role_id: UUID, role_in: RoleUpdate) -> RoleDetail:
        await self._get_role_or_404(role_id)
        update_data = role_in.model_dump(exclude_unset=True, exclude={"permission_ids", "menu_ids"})
        reject_null_columns(SysRole.__table__, update_data)
        await self._check_unique(update_data.get("name"), update_data.get("code"), exclude_id=role_id)
        if update_data.get("status") is not None:
            update_data["status"] = update_data["status"].value

        permission_ids = None
        if role_in.permission_ids is not None:
            permission_ids = await self._validate_permission_ids(role_in.permission_ids)
        menu_ids = None
        if role_in.menu_ids is not None:
            menu_ids = await self._validate_menu_ids(role_in.menu_ids)

        async with self.role_repository.transaction() as session:
            role = await self.role_repository.update(role_id, update_data, session)
            if not role:
                raise ResourceNotFound(f"角色 {role_id} 不存在")
            if permission_ids is not None:
                await self.role_repository.replace_permissions(role_id, permission_ids, session)
            if menu_ids is not None:
                await self.role_repository.replace_menus(role_id, menu_ids, session)
            await self.authorization_service.invalidate(session)

        logger.info(f"更新角色成功 | 编码：{role.code} | 字段：{sorted(update_data.keys())}")
        return await self._to_detail(role)

    # ------------------------------
    # 授权
    # ------------------------------
    async def assign_permissions(self, role_id: UUID, permission_ids: Sequence[UUID]) -> RoleDetail:
        """整体替换角色权限"""
        role = await self._get_role_or_404(role_id)
        valid_ids = await self._validate_permission_ids(permission_ids)
        async with self.role_repository.transaction() as session:
            await self.role_repository.replace_permissions(role_id, valid_ids, session)
            await self.authorization_service.invalidate(session)
        return await self._to_detail(role)

    async def grant_permissions(self, role_id: UUID, permission_ids: Sequence[UUID]) -> RoleDetail:
        """追加权限，重复授权视为成功"""
        role = await self._get_role_or_404(role_id)
        valid_ids = await self._validate_permission_ids(permission_ids)
        async with self.role_repository.transaction() as session:
            added = await self.role_repository.grant_permissions(role_id, valid_ids, session)
            if added:
                await self.authorization_service.invalidate(session)
        logger.info(f"角色追加权限 | 编码：{role.code} | 新增：{added} | 请求：{len(valid_ids)}")
        return await self._to_detail(role)

    async def assign_menus(self, role_id: UUID, menu_ids: Sequence[UUID]) -> RoleDetail:
        """整体替换角色菜单"""
        role = await self._get_role_or_404(role_id)
        valid_ids = await self._validate_menu_ids(menu_ids)
        async with self.role_repository.transaction() as session:
            await self.role_repository.replace_menus(role_id, valid_ids, session)
            await self.authorization_service.invalidate(session)
        return await self._to_detail(role)

    async def grant_menus(self, role_id: UUID, menu_ids: Sequence[UUID]) -> RoleDetail:
        role = await self._get_role_or_404(role_id)
        valid_ids = await self._validate_menu_ids(menu_ids)
        async with self.role_repository.transaction() as session:
            added = await self.role_repository.grant_menus(role_id, valid_ids, session)
            if added:
                await self.authorization_service.invalidate(session)
        return await self._to_detail(role)

    # ------------------------------
    # 删除/恢复
    # ------------------------------
    async def delete_role(self, role_id: UUID) -> Message:
        """软删除：持有该角色的用户在下一次解析时即失去它"""
        async with self.role_repository.transaction() as session:
            deleted = await self.role_repository.soft_delete(role_id, session)
            if not deleted:
                raise ResourceNotFound(f"角色 {role_id} 不存在")
            await self.authorization_service.invalidate(session)

        logger.info(f"角色已删除 | 角色ID：{role_id}")
        return Message(message="角色删除成功")

    async def restore_role(self, role_id: UUID) -> RoleDetail:
        deleted_role = await self.role_repository.get_by_id(role_id, include_deleted=True)
        if not deleted_role or deleted_role.deleted_at is None:
            raise ResourceNotFound(f"已删除的角色 {role_id} 不存在")

        await self._check_unique(deleted_role.name, deleted_role.code, exclude_id=role_id)

        async with self.role_repository.transaction() as session:
            role = await self.role_repository.restore(role_id, session)
            if not role:
                raise ResourceNotFound(f"已删除的角色 {role_id} 不存在")
            await self.authorization_service.invalidate(session)

        logger.info(f"角色已恢复 | 编码：{role.code}")
        return await self._to_detail(role)
