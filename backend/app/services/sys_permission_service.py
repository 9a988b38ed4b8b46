"""
权限模块业务层
backend/app/services/sys_permission_service.py
上次更新：2026/3/2
"""
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from app.core.database import reject_null_columns
from app.core.exceptions import Conflict, ResourceNotFound
from app.models import SysPermission
from app.repositories.sys_permission_repository import PermissionRepository
from app.schemas.base import PageQuery, PageResult
from app.schemas.sys_permission import PermissionCreate, PermissionGroup, PermissionOut, PermissionUpdate
from app.schemas.sys_user import Message
from app.services.sys_authorization_service import AuthorizationService

logger = logging.getLogger(__name__)

# 未设置分类的权限归入该分组
DEFAULT_CATEGORY = "其他"


def split_code(code: str) -> tuple:
    """user:read → ('user', 'read')；无冒号时action为空"""
    resource, _, action = code.partition(":")
    return resource, (action or None)


class PermissionService:
    """权限Service层：权限元数据管理"""
    def __init__(self, permission_repository: PermissionRepository, authorization_service: AuthorizationService):
        self.permission_repository = permission_repository
        self.authorization_service = authorization_service

    async def _get_or_404(self, permission_id: UUID) -> SysPermission:
        perm = await self.permission_repository.get_by_id(permission_id)
        if not perm:
            raise ResourceNotFound(f"权限 {permission_id} 不存在")
        return perm

    # ------------------------------
    # 查询
    # ------------------------------
    async def list_permissions(
        self,
        page_query: PageQuery,
        keyword: Optional[str] = None,
        resource: Optional[str] = None,
        category: Optional[str] = None,
    ) -> PageResult[PermissionOut]:
        items, total = await self.permission_repository.list_permissions(
            offset=page_query.offset, limit=page_query.size,
            keyword=keyword, resource=resource, category=category,
        )
        return PageResult[PermissionOut](
            items=[PermissionOut.model_validate(p) for p in items],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def list_grouped(self) -> List[PermissionGroup]:
        """按分类分组，分组顺序与组内顺序均按 (category, code)"""
        groups: "OrderedDict[str, List[PermissionOut]]" = OrderedDict()
        for perm in await self.permission_repository.list_all():
            groups.setdefault(perm.category or DEFAULT_CATEGORY, []).append(PermissionOut.model_validate(perm))
        return [PermissionGroup(category=category, permissions=perms) for category, perms in groups.items()]

    async def get_permission(self, permission_id: UUID) -> PermissionOut:
        return PermissionOut.model_validate(await self._get_or_404(permission_id))

    async def list_resources(self) -> List[str]:
        return await self.permission_repository.list_distinct("resource")

    async def list_actions(self) -> List[str]:
        return await self.permission_repository.list_distinct("action")

    async def list_categories(self) -> List[str]:
        return await self.permission_repository.list_distinct("category")

    # ------------------------------
    # 写操作
    # ------------------------------
    async def create_permission(self, perm_in: PermissionCreate) -> PermissionOut:
        if await self.permission_repository.get_by_code(perm_in.code):
            raise Conflict(f"权限编码 '{perm_in.code}' 已存在")

        data = perm_in.model_dump()
        resource, action = split_code(perm_in.code)
        data["resource"] = data.get("resource") or resource
        data["action"] = data.get("action") or action

        async with self.permission_repository.transaction() as session:
            perm = await self.permission_repository.create(SysPermission(**data), session)
        logger.info(f"创建权限成功 | 编码：{perm.code}")
        return PermissionOut.model_validate(perm)

    async def update_permission(self, permission_id: UUID, perm_in: PermissionUpdate) -> PermissionOut:
        current = await self._get_or_404(permission_id)
        update_data = perm_in.model_dump(exclude_unset=True)
        reject_null_columns(SysPermission.__table__, update_data)

        new_code = update_data.get("code")
        if new_code and new_code != current.code:
            if await self.permission_repository.get_by_code(new_code):
                raise Conflict(f"权限编码 '{new_code}' 已存在")

        async with self.permission_repository.transaction() as session:
            perm = await self.permission_repository.update(permission_id, update_data, session)
            if not perm:
                raise ResourceNotFound(f"权限 {permission_id} 不存在")
            # 编码变化会影响已缓存的授权结果
            if new_code and new_code != current.code:
                await self.authorization_service.invalidate(session)
        return PermissionOut.model_validate(perm)

    async def delete_permission(self, permission_id: UUID) -> Message:
        perm = await self._get_or_404(permission_id)
        role_count = await self.permission_repository.count_roles(permission_id)
        if role_count:
            raise Conflict(f"权限 '{perm.code}' 仍被 {role_count} 个角色使用，无法删除")

        async with self.permission_repository.transaction() as session:
            await self.permission_repository.delete(permission_id, session)
        logger.info(f"删除权限成功 | 编码：{perm.code}")
        return Message(message="权限删除成功")

    async def sync_declared(self, declared: Sequence[Dict[str, Any]]) -> List[str]:
        """
        将代码中声明的权限写入权限表，已存在的编码跳过（不覆盖人工修改）
        :return: 新增的权限编码
        """
        codes = [item["code"] for item in declared]
        existing = await self.permission_repository.get_existing_codes(codes)

        new_permissions = []
        for item in declared:
            if item["code"] in existing:
                continue
            resource, action = split_code(item["code"])
            new_permissions.append(SysPermission(
                name=item["name"],
                code=item["code"],
                resource=resource,
                action=action,
                category=item.get("category"),
                description=item.get("description"),
            ))
            existing.add(item["code"])

        if new_permissions:
            async with self.permission_repository.transaction() as session:
                await self.permission_repository.create_many(new_permissions, session)
        created = [p.code for p in new_permissions]
        logger.info(f"声明权限同步完成 | 声明：{len(codes)} | 新增：{len(created)}")
        return created
