"""
角色模块数据访问层
backend/app/repositories/sys_role_repository.py
上次更新：2026/3/2
说明：
- 所有查询默认过滤 deleted_at IS NULL，仅恢复场景显式查询已删除角色
- 关联表写入统一走幂等写入，重复授权不报错
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.orm import sessionmaker
from sqlmodel import delete, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import get_now
from app.core.database import insert_ignore_conflicts
from app.models import SysRole, sys_role_menu, sys_role_permission, sys_user_role


class RoleRepository:
    """角色Repo层：标准事务上下文实现"""
    def __init__(self, async_session_factory: sessionmaker):
        self.async_session_factory = async_session_factory

    # ------------------------------
    # 标准异步事务上下文
    # ------------------------------
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
    async def get_by_id(self, role_id: UUID, include_deleted: bool = False) -> Optional[SysRole]:
        async with self.transaction() as session:
            stmt = select(SysRole).where(SysRole.id == role_id)
            if not include_deleted:
                stmt = stmt.where(SysRole.deleted_at.is_(None))
            return (await session.execute(stmt)).scalars().first()

    async def find_alive_conflict(
        self,
        name: Optional[str] = None,
        code: Optional[str] = None,
        exclude_id: Optional[UUID] = None,
    ) -> Optional[SysRole]:
        """按名称或编码查找未删除的同名角色（用于唯一性校验）"""
        conditions = []
        if name:
            conditions.append(SysRole.name == name)
        if code:
            conditions.append(SysRole.code == code)
        if not conditions:
            return None
        async with self.transaction() as session:
            stmt = select(SysRole).where(SysRole.deleted_at.is_(None), or_(*conditions))
            if exclude_id is not None:
                stmt = stmt.where(SysRole.id != exclude_id)
            return (await session.execute(stmt)).scalars().first()

    async def list_roles(
        self,
        offset: int = 0,
        limit: int = 10,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[SysRole], int]:
        """分页查询角色列表，keyword匹配名称/编码/描述"""
        async with self.transaction() as session:
            stmt = select(SysRole, func.count(SysRole.id).over().label('total_count')).where(
                SysRole.deleted_at.is_(None)
            )
            if keyword:
                like = f"%{keyword}%"
                stmt = stmt.where(or_(
                    SysRole.name.ilike(like),
                    SysRole.code.ilike(like),
                    SysRole.description.ilike(like),
                ))
            if status:
                stmt = stmt.where(SysRole.status == status)

            stmt = stmt.order_by(SysRole.sort, SysRole.create_time).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    async def list_active(self) -> List[SysRole]:
        """启用且未删除的角色（下拉选项）"""
        async with self.transaction() as session:
            stmt = (
                select(SysRole)
                .where(SysRole.status == 'active', SysRole.deleted_at.is_(None))
                .order_by(SysRole.sort, SysRole.create_time)
            )
            return list((await session.execute(stmt)).scalars().all())

    async def get_existing_ids(self, role_ids: Sequence[UUID]) -> set:
        """返回存在且未删除的角色ID"""
        if not role_ids:
            return set()
        async with self.transaction() as session:
            stmt = select(SysRole.id).where(SysRole.id.in_(list(role_ids)), SysRole.deleted_at.is_(None))
            return set((await session.execute(stmt)).scalars().all())

    async def get_active_roles_for_user(self, user_id: UUID) -> List[SysRole]:
        """用户经UserRole关联、状态启用且未删除的角色"""
        async with self.transaction() as session:
            stmt = (
                select(SysRole)
                .join(sys_user_role, sys_user_role.c.role_id == SysRole.id)
                .where(
                    sys_user_role.c.user_id == user_id,
                    SysRole.status == 'active',
                    SysRole.deleted_at.is_(None),
                )
                .distinct()
            )
            return list((await session.execute(stmt)).scalars().all())

    async def get_permission_ids(self, role_id: UUID) -> List[UUID]:
        async with self.transaction() as session:
            stmt = select(sys_role_permission.c.permission_id).where(sys_role_permission.c.role_id == role_id)
            return list((await session.execute(stmt)).scalars().all())

    async def get_menu_ids(self, role_id: UUID) -> List[UUID]:
        async with self.transaction() as session:
            stmt = select(sys_role_menu.c.menu_id).where(sys_role_menu.c.role_id == role_id)
            return list((await session.execute(stmt)).scalars().all())

    async def count_users(self, role_id: UUID) -> int:
        async with self.transaction() as session:
            stmt = select(func.count()).select_from(sys_user_role).where(sys_user_role.c.role_id == role_id)
            return (await session.execute(stmt)).scalar_one()

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, role: SysRole, session: AsyncSession) -> SysRole:
        session.add(role)
        await session.flush()
        return role

    async def update(self, role_id: UUID, values: Dict[str, Any], session: AsyncSession) -> Optional[SysRole]:
        """在当前Session内查询角色再更新，避免实例归属错误"""
        stmt = select(SysRole).where(SysRole.id == role_id, SysRole.deleted_at.is_(None))
        role = (await session.execute(stmt)).scalars().first()
        if not role:
            return None
        for key, value in values.items():
            setattr(role, key, value)
        await session.flush()
        return role

    async def soft_delete(self, role_id: UUID, session: AsyncSession) -> bool:
        """软删除：仅写deleted_at，关联表保留"""
        stmt = (
            update(SysRole)
            .where(SysRole.id == role_id, SysRole.deleted_at.is_(None))
            .values(deleted_at=get_now(), update_time=get_now())
        )
        return (await session.execute(stmt)).rowcount > 0

    async def restore(self, role_id: UUID, session: AsyncSession) -> Optional[SysRole]:
        stmt = select(SysRole).where(SysRole.id == role_id, SysRole.deleted_at.is_not(None))
        role = (await session.execute(stmt)).scalars().first()
        if not role:
            return None
        role.deleted_at = None
        await session.flush()
        return role

    async def replace_permissions(self, role_id: UUID, permission_ids: Sequence[UUID], session: AsyncSession) -> None:
        """整体替换角色权限：先清空再写入"""
        await session.execute(delete(sys_role_permission).where(sys_role_permission.c.role_id == role_id))
        await self.grant_permissions(role_id, permission_ids, session)

    async def grant_permissions(self, role_id: UUID, permission_ids: Sequence[UUID], session: AsyncSession) -> int:
        rows = [{"role_id": role_id, "permission_id": pid} for pid in permission_ids]
        return await insert_ignore_conflicts(session, sys_role_permission, rows, ("role_id", "permission_id"))

    async def replace_menus(self, role_id: UUID, menu_ids: Sequence[UUID], session: AsyncSession) -> None:
        """整体替换角色菜单：先清空再写入"""
        await session.execute(delete(sys_role_menu).where(sys_role_menu.c.role_id == role_id))
        await self.grant_menus(role_id, menu_ids, session)

    async def grant_menus(self, role_id: UUID, menu_ids: Sequence[UUID], session: AsyncSession) -> int:
        rows = [{"role_id": role_id, "menu_id": mid} for mid in menu_ids]
        return await insert_ignore_conflicts(session, sys_role_menu, rows, ("role_id", "menu_id"))
