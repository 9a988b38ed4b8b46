"""
系统用户模型
backend/app/models/sys_user.py
"""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, SmallInteger, String, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysUser(Base):
    __tablename__ = 'sys_user'
    __table_args__ = {'comment': '系统用户表'}

    id = uuid_pk_column()
    username = Column(String(64), nullable=False, unique=True, index=True, comment='用户名')
    nickname = Column(String(64), comment='昵称')
    password = Column(String(100), nullable=False, comment='密码哈希')
    email = Column(String(128), comment='用户邮箱')
    mobile = Column(String(20), comment='联系方式')
    avatar = Column(String(255), comment='用户头像')
    status = Column(String(16), nullable=False, default='active', comment='状态(active-正常 disabled-禁用)')

    # 时间戳和审计字段
    create_time = Column(DateTime, nullable=False, default=get_now, comment='创建时间')
    update_time = Column(DateTime, nullable=False, default=get_now, onupdate=get_now, comment='更新时间')
    last_login = Column(DateTime, nullable=True, comment='最后登录时间')
    is_deleted = Column(SmallInteger, nullable=False, default=0, comment='逻辑删除标识(0-未删除 1-已删除)')

    # 只读关系，授权变更统一走关联表
    roles = relationship('SysRole', secondary='sys_user_role', viewonly=True)

    @property
    def is_active(self) -> bool:
        return self.status == 'active' and not self.is_deleted

    def __repr__(self):
        return f"<SysUser(id={self.id}, username={self.username}, nickname={self.nickname})>"


# 用户角色关联表（多对多），(user_id, role_id)唯一，重复授权按成功处理
sys_user_role = Table(
    'sys_user_role',
    Base.metadata,
    Column('id', Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4),
    Column('user_id', Uuid(as_uuid=True), ForeignKey('sys_user.id', ondelete='CASCADE'), nullable=False, index=True, comment='用户ID'),
    Column('role_id', Uuid(as_uuid=True), ForeignKey('sys_role.id', ondelete='CASCADE'), nullable=False, index=True, comment='角色ID'),
    Column('created_at', DateTime, nullable=False, default=get_now, comment='授权时间'),
    UniqueConstraint('user_id', 'role_id', name='uq_sys_user_role'),
    comment='用户角色关联表'
)
