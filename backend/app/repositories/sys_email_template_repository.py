"""
邮件模板仓库层
backend/app/repositories/sys_email_template_repository.py
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import sessionmaker
from sqlmodel import delete, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models import SysEmailTemplate


class EmailTemplateRepository:
    """邮件模板仓库层"""

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
    async def get_by_id(self, template_id: UUID) -> Optional[SysEmailTemplate]:
        async with self.transaction() as session:
            stmt = select(SysEmailTemplate).where(SysEmailTemplate.id == template_id)
            return (await session.execute(stmt)).scalars().first()

    async def get_by_name(self, name: str) -> Optional[SysEmailTemplate]:
        async with self.transaction() as session:
            stmt = select(SysEmailTemplate).where(SysEmailTemplate.name == name)
            return (await session.execute(stmt)).scalars().first()

    async def list_templates(
        self,
        offset: int = 0,
        limit: int = 20,
        keyword: Optional[str] = None,
        template_type: Optional[str] = None,
    ) -> Tuple[List[SysEmailTemplate], int]:
        """分页查询，按创建时间倒序"""
        async with self.transaction() as session:
            stmt = select(SysEmailTemplate, func.count(SysEmailTemplate.id).over().label('total_count'))
            if keyword:
                like = f"%{keyword}%"
                stmt = stmt.where(or_(SysEmailTemplate.name.ilike(like), SysEmailTemplate.subject.ilike(like)))
            if template_type:
                stmt = stmt.where(SysEmailTemplate.template_type == template_type)

            stmt = stmt.order_by(SysEmailTemplate.create_time.desc(), SysEmailTemplate.name).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, template: SysEmailTemplate, session: AsyncSession) -> SysEmailTemplate:
        session.add(template)
        await session.flush()
        return template

    async def update(
        self, template_id: UUID, values: Dict[str, Any], session: AsyncSession
    ) -> Optional[SysEmailTemplate]:
        stmt = select(SysEmailTemplate).where(SysEmailTemplate.id == template_id)
        template = (await session.execute(stmt)).scalars().first()
        if not template:
            return None
        for key, value in values.items():
            setattr(template, key, value)
        await session.flush()
        return template

    async def delete(self, template_id: UUID, session: AsyncSession) -> bool:
        result = await session.execute(delete(SysEmailTemplate).where(SysEmailTemplate.id == template_id))
        return result.rowcount > 0
