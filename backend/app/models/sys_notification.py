"""
系统通知模型
backend/app/models/sys_notification.py
说明：通知只有"未读→已读"单向状态，read_at仅在is_read置为True时写入
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, Uuid

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysNotification(Base):
    __tablename__ = 'sys_notification'
    __table_args__ = (
        Index('ix_sys_notification_user_read', 'user_id', 'is_read'),
        Index('ix_sys_notification_created_at', 'created_at'),
        {'comment': '系统通知表'},
    )

    id = uuid_pk_column()
    user_id = Column(Uuid(as_uuid=True), ForeignKey('sys_user.id', ondelete='CASCADE'), nullable=False, comment='接收用户ID')
    title = Column(String(255), nullable=False, comment='通知标题')
    content = Column(Text, nullable=True, comment='通知内容')
    type = Column(String(16), nullable=False, default='info', comment='通知类型(info/system/warning/error/success)')
    link = Column(String(500), nullable=True, comment='跳转链接')
    is_read = Column(Boolean, nullable=False, default=False, comment='是否已读')
    read_at = Column(DateTime, nullable=True, comment='阅读时间')
    created_at = Column(DateTime, nullable=False, default=get_now, comment='创建时间')

    def __repr__(self):
        return f"<SysNotification(id={self.id}, user_id={self.user_id}, title={self.title}, is_read={self.is_read})>"
