"""
权限模块数据访问层
backend/app/repositories/sys_permission_repository.py
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Set, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import sessionmaker
from sqlmodel import delete, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models import SysPermission, sys_role_permission


class PermissionRepository:
    """权限Repo层：标准事务上下文实现"""
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
    async def get_by_id(self, permission_id: UUID) -> Optional[SysPermission]:
        async with self.transaction() as session:
            stmt = select(SysPermission).where(SysPermission.id == permission_id)
            return (await session.execute(stmt)).scalars().first()

    async def get_by_code(self, code: str) -> Optional[SysPermission]:
        async with self.transaction() as session:
            stmt = select(SysPermission).where(SysPermission.code == code)
            return (await session.execute(stmt)).scalars().first()

    async def list_permissions(
        self,
        offset: int = 0,
        limit: int = 10,
        keyword: Optional[str] = None,
        resource: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Tuple[List[SysPermission], int]:
        async with self.transaction() as session:
            stmt = select(SysPermission, func.count(SysPermission.id).over().label('total_count'))
            if keyword:
                like = f"%{keyword}%"
                stmt = stmt.where(or_(
                    SysPermission.name.ilike(like),
                    SysPermission.code.ilike(like),
                    SysPermission.description.ilike(like),
                ))
            if resource:
                stmt = stmt.where(SysPermission.resource == resource)
            if category:
                stmt = stmt.where(SysPermission.category == category)

            stmt = stmt.order_by(SysPermission.category, SysPermission.code).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    async def list_all(self) -> List[SysPermission]:
        async with self.transaction() as session:
            stmt = select(SysPermission).order_by(SysPermission.category, SysPermission.code)
            return list((await session.execute(stmt)).scalars().all())

    async def list_distinct(self, column_name: str) -> List[str]:
        """某一列的去重非空值（resource/action/category）"""
        column = getattr(SysPermission, column_name)
        async with self.transaction() as session:
            stmt = select(column).where(column.is_not(None)).distinct().order_by(column)
            return list((await session.execute(stmt)).scalars().all())

    async def get_existing_ids(self, permission_ids: Sequence[UUID]) -> Set[UUID]:
        if not permission_ids:
            return set()
        async with self.transaction() as session:
            stmt = select(SysPermission.id).where(SysPermission.id.in_(list(permission_ids)))
            return set((await session.execute(stmt)).scalars().all())

    async def get_existing_codes(self, codes: Sequence[str]) -> Set[str]:
        if not codes:
            return set()
        async with self.transaction() as session:
            stmt = select(SysPermission.code).where(SysPermission.code.in_(list(codes)))
            return set((await session.execute(stmt)).scalars().all())

    async def get_codes_for_roles(self, role_ids: Sequence[UUID]) -> Set[str]:
        """角色集合可达的权限码并集"""
        if not role_ids:
            return set()
        async with self.transaction() as session:
            stmt = (
                select(SysPermission.code)
                .join(sys_role_permission, sys_role_permission.c.permission_id == SysPermission.id)
                .where(sys_role_permission.c.role_id.in_(list(role_ids)))
                .distinct()
            )
            return set((await session.execute(stmt)).scalars().all())

    async def count_roles(self, permission_id: UUID) -> int:
        async with self.transaction() as session:
            stmt = (
                select(func.count())
                .select_from(sys_role_permission)
                .where(sys_role_permission.c.permission_id == permission_id)
            )
            return (await session.execute(stmt)).scalar_one()

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, permission: SysPermission, session: AsyncSession) -> SysPermission:
        session.add(permission)
        await session.flush()
        return permission

    async def create_many(self, permissions: Sequence[SysPermission], session: AsyncSession) -> None:
        session.add_all(list(permissions))
        await session.flush()

    async def update(self, permission_id: UUID, values: Dict[str, Any], session: AsyncSession) -> Optional[SysPermission]:
        stmt = select(SysPermission).where(SysPermission.id == permission_id)
        permission = (await session.execute(stmt)).scalars().first()
        if not permission:
            return None
        for key, value in values.items():
            setattr(permission, key, value)
        await session.flush()
        return permission

    async def delete(self, permission_id: UUID, session: AsyncSession) -> bool:
        await session.execute(
            delete(sys_role_permission).where(sys_role_permission.c.permission_id == permission_id)
        )
        result = await session.execute(delete(SysPermission).where(SysPermission.id == permission_id))
        return result.rowcount > 0
