"""
通知模块业务层
backend/app/services/sys_notification_service.py
说明：通知状态只能"未读→已读"，不提供标记未读
"""
import logging
from typing import List, Optional, Sequence
from uuid import UUID

from app.core.exceptions import ResourceNotFound, ValidationFailed
from app.enums.sys_status import NotificationType
from app.models import SysNotification
from app.repositories.sys_notification_repository import NotificationRepository
from app.repositories.sys_user_repository import UserRepository
from app.schemas.base import PageQuery, PageResult
from app.schemas.sys_notification import (
    NotificationBroadcast, NotificationContent, NotificationOut, NotificationSend, NotificationStats
)
from app.schemas.sys_user import Message

logger = logging.getLogger(__name__)


class NotificationService:
    """通知Service层"""
    def __init__(self, notification_repository: NotificationRepository, user_repository: UserRepository):
        self.notification_repository = notification_repository
        self.user_repository = user_repository

    @staticmethod
    def _build(user_id: UUID, content: NotificationContent) -> SysNotification:
        return SysNotification(
            user_id=user_id,
            title=content.title,
            content=content.content,
            type=NotificationType(content.type).value,
            link=content.link,
            is_read=False,
            read_at=None,
        )

    async def notify_users(self, user_ids: Sequence[UUID], content: NotificationContent) -> List[NotificationOut]:
        notifications = [self._build(uid, content) for uid in user_ids]
        if not notifications:
            return []
        async with self.notification_repository.transaction() as session:
            await self.notification_repository.create_many(notifications, session)
        return [NotificationOut.model_validate(n) for n in notifications]

    # ------------------------------
    # 创建/发送
    # ------------------------------
    async def create_notification(
        self,
        user_id: UUID,
        title: str,
        content: Optional[str] = None,
        notification_type: str = NotificationType.INFO.value,
        link: Optional[str] = None,
    ) -> NotificationOut:
        """给单个用户创建通知（其他模块内部调用，如告警）"""
        body = NotificationContent(title=title, content=content, type=notification_type, link=link)
        created = await self.notify_users([user_id], body)
        return created[0]

    async def send_to_users(self, body: NotificationSend) -> List[NotificationOut]:
        user_ids = list(dict.fromkeys(body.user_ids))
        existing = await self.user_repository.get_existing_ids(user_ids)
        missing = [str(uid) for uid in user_ids if uid not in existing]
        if missing:
            raise ValidationFailed(f"用户不存在：{', '.join(missing)}")

        created = await self.notify_users(user_ids, body)
        logger.info(f"通知发送完成 | 标题：{body.title} | 接收人数：{len(created)}")
        return created

    async def broadcast(self, body: NotificationBroadcast) -> int:
        """发送给全部正常状态的用户，返回发送数量"""
        user_ids = await self.user_repository.list_active_user_ids()
        created = await self.notify_users(user_ids, body)
        logger.info(f"广播通知完成 | 标题：{body.title} | 接收人数：{len(created)}")
        return len(created)

    # ------------------------------
    # 查询
    # ------------------------------
    async def list_notifications(
        self,
        user_id: UUID,
        page_query: PageQuery,
        notification_type: Optional[str] = None,
        is_read: Optional[bool] = None,
    ) -> PageResult[NotificationOut]:
        items, total = await self.notification_repository.list_for_user(
            user_id, offset=page_query.offset, limit=page_query.size,
            notification_type=notification_type, is_read=is_read,
        )
        return PageResult[NotificationOut](
            items=[NotificationOut.model_validate(n) for n in items],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def get_notification(self, user_id: UUID, notification_id: UUID) -> NotificationOut:
        notification = await self.notification_repository.get_for_user(user_id, notification_id)
        if not notification:
            raise ResourceNotFound(f"通知 {notification_id} 不存在")
        return NotificationOut.model_validate(notification)

    async def unread_count(self, user_id: UUID) -> int:
        return await self.notification_repository.count_unread(user_id)

    async def stats(self, user_id: UUID) -> NotificationStats:
        return NotificationStats(**await self.notification_repository.stats(user_id))

    # ------------------------------
    # 状态变更/删除
    # ------------------------------
    async def mark_as_read(self, user_id: UUID, notification_id: UUID) -> NotificationOut:
        """幂等：已读通知再次标记直接返回，read_at保持首次阅读时间"""
        async with self.notification_repository.transaction() as session:
            notification = await self.notification_repository.mark_as_read(user_id, notification_id, session)
        if not notification:
            raise ResourceNotFound(f"通知 {notification_id} 不存在")
        return NotificationOut.model_validate(notification)

    async def mark_all_as_read(self, user_id: UUID) -> int:
        async with self.notification_repository.transaction() as session:
            return await self.notification_repository.mark_all_as_read(user_id, session)

    async def delete_notification(self, user_id: UUID, notification_id: UUID) -> Message:
        async with self.notification_repository.transaction() as session:
            deleted = await self.notification_repository.delete_for_user(user_id, notification_id, session)
        if not deleted:
            raise ResourceNotFound(f"通知 {notification_id} 不存在")
        return Message(message="通知删除成功")

    async def clear_read(self, user_id: UUID) -> int:
        async with self.notification_repository.transaction() as session:
            return await self.notification_repository.delete_read(user_id, session)
