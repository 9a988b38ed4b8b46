"""
数据字典仓库层
backend/app/repositories/sys_dict_repository.py
"""
from sqlmodel import select, delete, func
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import or_
from sqlalchemy.orm import sessionmaker
from contextlib import asynccontextmanager
from typing import Optional, List, AsyncGenerator, Tuple, Dict, Any, Sequence
from uuid import UUID

from app.models import SysDict


class DictRepository:
    """
    数据字典仓库层
    单表存储，dict_type 分组，parent_code 形成层级
    """

    def __init__(self, async_session_factory: sessionmaker):
        self.async_session_factory = async_session_factory

    # ------------------------------
    # 核心：标准异步事务上下文
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
    async def get_by_id(self, dict_id: UUID) -> Optional[SysDict]:
        async with self.transaction() as session:
            stmt = select(SysDict).where(SysDict.id == dict_id)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_by_type_and_code(self, dict_type: str, dict_code: str) -> Optional[SysDict]:
        async with self.transaction() as session:
            stmt = select(SysDict).where(SysDict.dict_type == dict_type, SysDict.dict_code == dict_code)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def list_dicts(
        self,
        offset: int = 0,
        limit: int = 100,
        dict_type: Optional[str] = None,
        keyword: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[SysDict], int]:
        """分页查询字典列表"""
        async with self.transaction() as session:
            stmt = select(SysDict, func.count(SysDict.id).over().label('total_count'))

            if dict_type:
                stmt = stmt.where(SysDict.dict_type == dict_type)
            if keyword:
                like = f"%{keyword}%"
                stmt = stmt.where(or_(SysDict.dict_name.ilike(like), SysDict.dict_code.ilike(like)))
            if is_active is not None:
                stmt = stmt.where(SysDict.is_active.is_(is_active))

            stmt = stmt.order_by(SysDict.dict_type, SysDict.sort_order, SysDict.dict_code).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    async def list_active_by_types(self, dict_types: Sequence[str]) -> List[SysDict]:
        """批量查询多个类型的启用字典项"""
        if not dict_types:
            return []
        async with self.transaction() as session:
            stmt = (
                select(SysDict)
                .where(SysDict.dict_type.in_(list(dict_types)), SysDict.is_active.is_(True))
                .order_by(SysDict.dict_type, SysDict.sort_order, SysDict.dict_code)
            )
            return list((await session.execute(stmt)).scalars().all())

    async def list_children(self, dict_type: str, parent_code: Optional[str]) -> List[SysDict]:
        """指定父编码下的启用子项，parent_code为空时返回顶级项"""
        async with self.transaction() as session:
            stmt = select(SysDict).where(SysDict.dict_type == dict_type, SysDict.is_active.is_(True))
            if parent_code is None:
                stmt = stmt.where(SysDict.parent_code.is_(None))
            else:
                stmt = stmt.where(SysDict.parent_code == parent_code)
            stmt = stmt.order_by(SysDict.sort_order, SysDict.dict_code)
            return list((await session.execute(stmt)).scalars().all())

    async def list_types(self) -> List[str]:
        async with self.transaction() as session:
            stmt = select(SysDict.dict_type).distinct().order_by(SysDict.dict_type)
            return list((await session.execute(stmt)).scalars().all())

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, item: SysDict, session: AsyncSession) -> SysDict:
        session.add(item)
        await session.flush()
        return item

    async def update(self, dict_id: UUID, values: Dict[str, Any], session: AsyncSession) -> Optional[SysDict]:
        stmt = select(SysDict).where(SysDict.id == dict_id)
        item = (await session.execute(stmt)).scalars().first()
        if not item:
            return None
        for key, value in values.items():
            setattr(item, key, value)
        await session.flush()
        return item

    async def delete(self, dict_id: UUID, session: AsyncSession) -> bool:
        result = await session.execute(delete(SysDict).where(SysDict.id == dict_id))
        return result.rowcount > 0
