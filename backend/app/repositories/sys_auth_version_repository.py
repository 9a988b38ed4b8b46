"""
授权版本号仓库层
backend/app/repositories/sys_auth_version_repository.py
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import update
from sqlalchemy.orm import sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import insert_ignore_conflicts
from app.models.sys_auth_version import AUTH_VERSION_ROW_ID, SysAuthVersion


class AuthVersionRepository:
    """授权版本号仓库层：单行计数器，与授权写操作同事务提交"""

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

    async def get_version(self) -> int:
        """当前版本号，计数行不存在时为0"""
        async with self.transaction() as session:
            stmt = select(SysAuthVersion.version).where(SysAuthVersion.id == AUTH_VERSION_ROW_ID)
            version = (await session.execute(stmt)).scalar_one_or_none()
            return int(version or 0)

    async def bump(self, session: AsyncSession) -> int:
        """版本号+1并返回新值；随调用方事务提交或回滚"""
        await insert_ignore_conflicts(
            session,
            SysAuthVersion.__table__,
            [{"id": AUTH_VERSION_ROW_ID, "version": 0}],
            ("id",),
        )
        await session.execute(
            update(SysAuthVersion)
            .where(SysAuthVersion.id == AUTH_VERSION_ROW_ID)
            .values(version=SysAuthVersion.version + 1)
        )
        stmt = select(SysAuthVersion.version).where(SysAuthVersion.id == AUTH_VERSION_ROW_ID)
        return int((await session.execute(stmt)).scalar_one())
