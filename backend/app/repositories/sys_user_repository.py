"""
用户模块数据访问层
backend/app/repositories/sys_user_repository.py
上次更新：2026/3/2
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Set, Tuple
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.orm import sessionmaker
from sqlmodel import delete, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import get_now
from app.core.database import insert_ignore_conflicts
from app.models import SysRole, SysUser, sys_user_role


class UserRepository:
    """用户Repo层：标准事务上下文实现，读方法自开事务，写方法复用调用方事务"""
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
    async def get_by_id(self, user_id: UUID, include_deleted: bool = False) -> Optional[SysUser]:
        async with self.transaction() as session:
            stmt = select(SysUser).where(SysUser.id == user_id)
            if not include_deleted:
                stmt = stmt.where(SysUser.is_deleted == 0)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_by_username(self, username: str, include_deleted: bool = False) -> Optional[SysUser]:
        async with self.transaction() as session:
            stmt = select(SysUser).where(SysUser.username == username)
            if not include_deleted:
                stmt = stmt.where(SysUser.is_deleted == 0)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def list_users(
        self,
        offset: int = 0,
        limit: int = 10,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[SysUser], int]:
        """分页查询用户列表，keyword匹配用户名/昵称/邮箱"""
        async with self.transaction() as session:
            stmt = select(SysUser, func.count(SysUser.id).over().label('total_count')).where(
                SysUser.is_deleted == 0
            )
            if keyword:
                like = f"%{keyword}%"
                stmt = stmt.where(or_(
                    SysUser.username.ilike(like),
                    SysUser.nickname.ilike(like),
                    SysUser.email.ilike(like),
                ))
            if status:
                stmt = stmt.where(SysUser.status == status)

            stmt = stmt.order_by(SysUser.create_time.desc(), SysUser.username).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    async def list_active_user_ids(self) -> List[UUID]:
        async with self.transaction() as session:
            stmt = select(SysUser.id).where(SysUser.is_deleted == 0, SysUser.status == 'active')
            return list((await session.execute(stmt)).scalars().all())

    async def get_existing_ids(self, user_ids: Sequence[UUID]) -> Set[UUID]:
        """返回存在且未删除的用户ID"""
        if not user_ids:
            return set()
        async with self.transaction() as session:
            stmt = select(SysUser.id).where(SysUser.id.in_(list(user_ids)), SysUser.is_deleted == 0)
            return set((await session.execute(stmt)).scalars().all())

    async def get_user_ids_by_role_code(self, role_code: str) -> List[UUID]:
        """查询持有指定有效角色的正常用户"""
        async with self.transaction() as session:
            stmt = (
                select(SysUser.id)
                .join(sys_user_role, sys_user_role.c.user_id == SysUser.id)
                .join(SysRole, SysRole.id == sys_user_role.c.role_id)
                .where(
                    SysRole.code == role_code,
                    SysRole.status == 'active',
                    SysRole.deleted_at.is_(None),
                    SysUser.is_deleted == 0,
                    SysUser.status == 'active',
                )
                .distinct()
            )
            return list((await session.execute(stmt)).scalars().all())

    async def get_roles(self, user_id: UUID) -> List[SysRole]:
        """用户已分配且未删除的角色（含停用角色）"""
        async with self.transaction() as session:
            stmt = (
                select(SysRole)
                .join(sys_user_role, sys_user_role.c.role_id == SysRole.id)
                .where(sys_user_role.c.user_id == user_id, SysRole.deleted_at.is_(None))
                .order_by(SysRole.sort, SysRole.code)
            )
            return list((await session.execute(stmt)).scalars().all())

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, user: SysUser, session: AsyncSession) -> SysUser:
        session.add(user)
        await session.flush()
        return user

    async def update(self, user_id: UUID, values: Dict[str, Any], session: AsyncSession) -> Optional[SysUser]:
        """在当前Session内查询并更新，避免实例归属错误"""
        stmt = select(SysUser).where(SysUser.id == user_id, SysUser.is_deleted == 0)
        user = (await session.execute(stmt)).scalars().first()
        if not user:
            return None
        for key, value in values.items():
            setattr(user, key, value)
        await session.flush()
        return user

    async def soft_delete(self, user_id: UUID, session: AsyncSession) -> bool:
        stmt = (
            update(SysUser)
            .where(SysUser.id == user_id, SysUser.is_deleted == 0)
            .values(is_deleted=1, update_time=get_now())
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def update_last_login(self, user_id: UUID, session: AsyncSession) -> None:
        await session.execute(update(SysUser).where(SysUser.id == user_id).values(last_login=get_now()))

    async def replace_roles(self, user_id: UUID, role_ids: Sequence[UUID], session: AsyncSession) -> None:
        """整体替换用户角色：先清空再幂等写入"""
        await session.execute(delete(sys_user_role).where(sys_user_role.c.user_id == user_id))
        await self.grant_roles(user_id, role_ids, session)

    async def grant_roles(self, user_id: UUID, role_ids: Sequence[UUID], session: AsyncSession) -> int:
        """追加角色，重复授权视为成功"""
        rows = [{"user_id": user_id, "role_id": role_id} for role_id in role_ids]
        return await insert_ignore_conflicts(session, sys_user_role, rows, ("user_id", "role_id"))
