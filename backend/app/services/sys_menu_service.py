"""
菜单模块业务层
backend/app/services/sys_menu_service.py
上次更新：2026/3/2
说明：
- 每次写入parent_id都做成环校验：不能指向自身，也不能指向自己的后代
- 删除含子菜单的菜单由 MENU_DELETE_POLICY 决定：block / reparent / cascade
"""
import logging
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.core.database import reject_null_columns
from app.core.exceptions import Conflict, ResourceNotFound, ValidationFailed
from app.models import SysMenu
from app.repositories.sys_menu_repository import MenuRepository
from app.schemas.base import PageQuery, PageResult
from app.schemas.sys_authorization import AuthorizationPayload
from app.schemas.sys_menu import MenuCreate, MenuNode, MenuOut, MenuUpdate
from app.schemas.sys_user import Message
from app.services.sys_authorization_service import AuthorizationService
from app.utils.menu_tree import ORPHAN_PROMOTE, build_menu_forest, collect_descendants, would_create_cycle

logger = logging.getLogger(__name__)

DELETE_BLOCK = "block"
DELETE_REPARENT = "reparent"
DELETE_CASCADE = "cascade"


class MenuService:
    """菜单Service层"""
    def __init__(self, menu_repository: MenuRepository, authorization_service: AuthorizationService):
        self.menu_repository = menu_repository
        self.authorization_service = authorization_service

    async def _get_or_404(self, menu_id: UUID) -> SysMenu:
        menu = await self.menu_repository.get_by_id(menu_id)
        if not menu:
            raise ResourceNotFound(f"菜单 {menu_id} 不存在")
        return menu

    async def _check_parent(self, menu_id: Optional[UUID], parent_id: Optional[UUID]) -> None:
        """父菜单必须存在，且挂载后不能成环"""
        if parent_id is None:
            return
        if menu_id is not None and parent_id == menu_id:
            raise Conflict("菜单不能以自身作为父菜单")
        if not await self.menu_repository.get_by_id(parent_id):
            raise ResourceNotFound(f"父菜单 {parent_id} 不存在")
        if menu_id is not None:
            parent_map = await self.menu_repository.get_parent_map()
            if would_create_cycle(parent_map, menu_id, parent_id):
                raise Conflict("不能将菜单移动到其子菜单下")

    # ------------------------------
    # 查询
    # ------------------------------
    async def list_menus(
        self,
        page_query: PageQuery,
        keyword: Optional[str] = None,
        menu_type: Optional[str] = None,
        status: Optional[str] = None,
        parent_id: Optional[UUID] = None,
    ) -> PageResult[MenuOut]:
        items, total = await self.menu_repository.list_menus(
            offset=page_query.offset, limit=page_query.size,
            keyword=keyword, status=status, menu_type=menu_type, parent_id=parent_id,
        )
        return PageResult[MenuOut](
            items=[MenuOut.model_validate(m) for m in items],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def get_menu_tree(self, status: Optional[str] = None) -> List[MenuNode]:
        """管理端完整菜单树（含停用/隐藏菜单），排序规则与授权解析一致"""
        menus = await self.menu_repository.list_all(status=status)
        return build_menu_forest(menus, ORPHAN_PROMOTE)

    async def get_user_menu_tree(self, user_id: UUID) -> List[MenuNode]:
        payload: AuthorizationPayload = await self.authorization_service.resolve(user_id)
        return payload.menus

    async def get_menu(self, menu_id: UUID) -> MenuOut:
        return MenuOut.model_validate(await self._get_or_404(menu_id))

    # ------------------------------
    # 写操作
    # ------------------------------
    async def create_menu(self, menu_in: MenuCreate) -> MenuOut:
        await self._check_parent(None, menu_in.parent_id)

        data = menu_in.model_dump(exclude={"type", "status"})
        menu = SysMenu(**data, type=menu_in.type.value, status=menu_in.status.value)
        async with self.menu_repository.transaction() as session:
            menu = await self.menu_repository.create(menu, session)

        logger.info(f"创建菜单成功 | 名称：{menu.name} | 父菜单：{menu.parent_id}")
        return MenuOut.model_validate(menu)

    async def update_menu(self, menu_id: UUID, menu_in: MenuUpdate) -> MenuOut:
        await self._get_or_404(menu_id)
        update_data = menu_in.model_dump(exclude_unset=True)
        reject_null_columns(SysMenu.__table__, update_data)
        if "parent_id" in update_data:
            await self._check_parent(menu_id, update_data["parent_id"])
        for key in ("type", "status"):
            if update_data.get(key) is not None:
                update_data[key] = update_data[key].value

        async with self.menu_repository.transaction() as session:
            menu = await self.menu_repository.update(menu_id, update_data, session)
            if not menu:
                raise ResourceNotFound(f"菜单 {menu_id} 不存在")
            await self.authorization_service.invalidate(session)

        logger.info(f"更新菜单成功 | 名称：{menu.name} | 字段：{sorted(update_data.keys())}")
        return MenuOut.model_validate(menu)

    async def delete_menu(self, menu_id: UUID, policy: Optional[str] = None) -> Message:
        menu = await self._get_or_404(menu_id)
        policy = policy or settings.MENU_DELETE_POLICY
        if policy not in (DELETE_BLOCK, DELETE_REPARENT, DELETE_CASCADE):
            raise ValidationFailed(f"未知的菜单删除策略：{policy}")
        child_count = await self.menu_repository.count_children(menu_id)
        if child_count and policy == DELETE_BLOCK:
            raise Conflict(f"菜单 '{menu.name}' 存在 {child_count} 个子菜单，无法删除")
        descendants = []
        if child_count and policy == DELETE_CASCADE:
            descendants = collect_descendants(await self.menu_repository.get_parent_map(), menu_id)

        async with self.menu_repository.transaction() as session:
            if child_count and policy == DELETE_REPARENT:
                await self.menu_repository.reparent_children_to_root(menu_id, session)
                removed = await self.menu_repository.delete_many([menu_id], session)
            elif child_count and policy == DELETE_CASCADE:
                removed = await self.menu_repository.delete_many([menu_id, *descendants], session)
            else:
                removed = await self.menu_repository.delete_many([menu_id], session)
            await self.authorization_service.invalidate(session)

        logger.info(f"删除菜单成功 | 名称：{menu.name} | 策略：{policy} | 删除数量：{removed}")
        return Message(message=f"菜单删除成功，共删除 {removed} 个菜单")
