"""
通知相关的Pydantic Schemas
backend/app/schemas/sys_notification.py
"""
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import Field

from app.enums.sys_status import NotificationType
from app.schemas.base import BaseSchema, IDSchema


class NotificationContent(BaseSchema):
    title: str = Field(..., min_length=1, max_length=255, description="标题")
    content: Optional[str] = Field(None, description="内容")
    type: NotificationType = Field(NotificationType.INFO, description="类型")
    link: Optional[str] = Field(None, max_length=500, description="跳转链接")


class NotificationSend(NotificationContent):
    user_ids: List[UUID] = Field(..., min_length=1, description="接收用户ID列表")


class NotificationBroadcast(NotificationContent):
    type: NotificationType = Field(NotificationType.SYSTEM, description="类型")


class NotificationOut(NotificationContent, IDSchema):
    user_id: UUID
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationStats(BaseSchema):
    total: int = 0
    unread: int = 0
    read: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
