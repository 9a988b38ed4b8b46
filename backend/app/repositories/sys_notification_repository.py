"""
通知模块数据访问层
backend/app/repositories/sys_notification_repository.py
说明：所有查询都带 user_id 条件，用户只能访问自己的通知
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import sessionmaker
from sqlmodel import delete, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import get_now
from app.models import SysNotification


class NotificationRepository:
    """通知Repo层：标准事务上下文实现"""
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
    async def get_for_user(self, user_id: UUID, notification_id: UUID) -> Optional[SysNotification]:
        async with self.transaction() as session:
            stmt = select(SysNotification).where(
                SysNotification.id == notification_id,
                SysNotification.user_id == user_id,
            )
            return (await session.execute(stmt)).scalars().first()

    async def list_for_user(
        self,
        user_id: UUID,
        offset: int = 0,
        limit: int = 20,
        notification_type: Optional[str] = None,
        is_read: Optional[bool] = None,
    ) -> Tuple[List[SysNotification], int]:
        """分页查询，按创建时间倒序"""
        async with self.transaction() as session:
            stmt = select(
                SysNotification, func.count(SysNotification.id).over().label('total_count')
            ).where(SysNotification.user_id == user_id)
            if notification_type:
                stmt = stmt.where(SysNotification.type == notification_type)
            if is_read is not None:
                stmt = stmt.where(SysNotification.is_read.is_(is_read))

            stmt = stmt.order_by(SysNotification.created_at.desc()).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    async def count_unread(self, user_id: UUID) -> int:
        async with self.transaction() as session:
            stmt = select(func.count(SysNotification.id)).where(
                SysNotification.user_id == user_id,
                SysNotification.is_read.is_(False),
            )
            return (await session.execute(stmt)).scalar_one()

    async def stats(self, user_id: UUID) -> Dict[str, Any]:
        """按 (type, is_read) 分组计数，服务层再汇总"""
        async with self.transaction() as session:
            stmt = (
                select(SysNotification.type, SysNotification.is_read, func.count(SysNotification.id))
                .where(SysNotification.user_id == user_id)
                .group_by(SysNotification.type, SysNotification.is_read)
            )
            rows = (await session.execute(stmt)).all()

        total, unread = 0, 0
        by_type: Dict[str, int] = {}
        for notification_type, is_read, count in rows:
            total += count
            if not is_read:
                unread += count
            by_type[notification_type] = by_type.get(notification_type, 0) + count
        return {"total": total, "unread": unread, "read": total - unread, "by_type": by_type}

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create_many(self, notifications: Sequence[SysNotification], session: AsyncSession) -> None:
        session.add_all(list(notifications))
        await session.flush()

    async def mark_as_read(self, user_id: UUID, notification_id: UUID, session: AsyncSession) -> Optional[SysNotification]:
        """单向置为已读；已读通知原样返回，read_at不变"""
        stmt = select(SysNotification).where(
            SysNotification.id == notification_id,
            SysNotification.user_id == user_id,
        )
        notification = (await session.execute(stmt)).scalars().first()
        if not notification:
            return None
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = get_now()
            await session.flush()
        return notification

    async def mark_all_as_read(self, user_id: UUID, session: AsyncSession) -> int:
        stmt = (
            update(SysNotification)
            .where(SysNotification.user_id == user_id, SysNotification.is_read.is_(False))
            .values(is_read=True, read_at=get_now())
        )
        return (await session.execute(stmt)).rowcount

    async def delete_for_user(self, user_id: UUID, notification_id: UUID, session: AsyncSession) -> bool:
        stmt = delete(SysNotification).where(
            SysNotification.id == notification_id,
            SysNotification.user_id == user_id,
        )
        return (await session.execute(stmt)).rowcount > 0

    async def delete_read(self, user_id: UUID, session: AsyncSession) -> int:
        stmt = delete(SysNotification).where(
            SysNotification.user_id == user_id,
            SysNotification.is_read.is_(True),
        )
        return (await session.execute(stmt)).rowcount
