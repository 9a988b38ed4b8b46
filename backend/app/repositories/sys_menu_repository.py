"""
菜单模块数据访问层
backend/app/repositories/sys_menu_repository.py
说明：菜单树的组装、成环校验在服务层完成，这里只提供扁平数据
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Set, Tuple
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.orm import sessionmaker
from sqlmodel import delete, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import get_now
from app.models import SysMenu, sys_role_menu


class MenuRepository:
    """菜单Repo层：标准事务上下文实现"""
    def __init__(self, async_session_factory: sessionmaker):
        self.async_session_factory = async_session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        session: AsyncSession = self.async_session_factory()
        try:
            await session.begin()
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            raise e
        finally:
            await session.close()

    # ------------------------------
    # 查询类方法
    # ------------------------------
    async def get_by_id(self, menu_id: UUID) -> Optional[SysMenu]:
        async with self.transaction() as session:
            stmt = select(SysMenu).where(SysMenu.id == menu_id)
            return (await session.execute(stmt)).scalars().first()

    async def list_all(self, status: Optional[str] = None) -> List[SysMenu]:
        async with self.transaction() as session:
            stmt = select(SysMenu)
            if status:
                stmt = stmt.where(SysMenu.status == status)
            stmt = stmt.order_by(SysMenu.sort, SysMenu.name)
            return list((await session.execute(stmt)).scalars().all())

    async def list_menus(
        self,
        offset: int = 0,
        limit: int = 10,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
        menu_type: Optional[str] = None,
        parent_id: Optional[UUID] = None,
    ) -> Tuple[List[SysMenu], int]:
        async with self.transaction() as session:
            stmt = select(SysMenu, func.count(SysMenu.id).over().label('total_count'))
            if keyword:
                like = f"%{keyword}%"
                stmt = stmt.where(or_(SysMenu.name.ilike(like), SysMenu.path.ilike(like)))
            if status:
                stmt = stmt.where(SysMenu.status == status)
            if menu_type:
                stmt = stmt.where(SysMenu.type == menu_type)
            if parent_id is not None:
                stmt = stmt.where(SysMenu.parent_id == parent_id)

            stmt = stmt.order_by(SysMenu.sort, SysMenu.name).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    async def list_navigable(self) -> List[SysMenu]:
        """启用且可见的菜单（导航树的候选节点）"""
        async with self.transaction() as session:
            stmt = (
                select(SysMenu)
                .where(SysMenu.status == 'active', SysMenu.visible.is_(True))
                .order_by(SysMenu.sort, SysMenu.name)
            )
            return list((await session.execute(stmt)).scalars().all())

    async def get_existing_ids(self, menu_ids: Sequence[UUID]) -> Set[UUID]:
        if not menu_ids:
            return set()
        async with self.transaction() as session:
            stmt = select(SysMenu.id).where(SysMenu.id.in_(list(menu_ids)))
            return set((await session.execute(stmt)).scalars().all())

    async def get_parent_map(self) -> Dict[UUID, Optional[UUID]]:
        """全量 {菜单ID: 父ID}，用于成环校验和后代收集"""
        async with self.transaction() as session:
            rows = (await session.execute(select(SysMenu.id, SysMenu.parent_id))).all()
            return {row.id: row.parent_id for row in rows}

    async def count_children(self, menu_id: UUID) -> int:
        async with self.transaction() as session:
            stmt = select(func.count(SysMenu.id)).where(SysMenu.parent_id == menu_id)
            return (await session.execute(stmt)).scalar_one()

    async def get_menu_ids_for_roles(self, role_ids: Sequence[UUID]) -> Set[UUID]:
        """角色集合直接授权的菜单ID并集"""
        if not role_ids:
            return set()
        async with self.transaction() as session:
            stmt = (
                select(sys_role_menu.c.menu_id)
                .where(sys_role_menu.c.role_id.in_(list(role_ids)))
                .distinct()
            )
            return set((await session.execute(stmt)).scalars().all())

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, menu: SysMenu, session: AsyncSession) -> SysMenu:
        session.add(menu)
        await session.flush()
        return menu

    async def update(self, menu_id: UUID, values: Dict[str, Any], session: AsyncSession) -> Optional[SysMenu]:
        stmt = select(SysMenu).where(SysMenu.id == menu_id)
        menu = (await session.execute(stmt)).scalars().first()
        if not menu:
            return None
        for key, value in values.items():
            setattr(menu, key, value)
        await session.flush()
        return menu

    async def reparent_children_to_root(self, menu_id: UUID, session: AsyncSession) -> int:
        """直接子节点挂到顶级"""
        stmt = (
            update(SysMenu)
            .where(SysMenu.parent_id == menu_id)
            .values(parent_id=None, update_time=get_now())
        )
        return (await session.execute(stmt)).rowcount

    async def delete_many(self, menu_ids: Sequence[UUID], session: AsyncSession) -> int:
        """删除菜单及其角色授权行，子节点需由调用方先处理"""
        ids = list(menu_ids)
        if not ids:
            return 0
        await session.execute(delete(sys_role_menu).where(sys_role_menu.c.menu_id.in_(ids)))
        # 自引用外键：先断开待删集合内部的父子引用
        await session.execute(update(SysMenu).where(SysMenu.id.in_(ids)).values(parent_id=None))
        result = await session.execute(delete(SysMenu).where(SysMenu.id.in_(ids)))
        return result.rowcount
