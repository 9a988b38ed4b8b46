"""
系统权限模型
backend/app/models/sys_permission.py
上次更新：2026/3/2
"""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysPermission(Base):
    __tablename__ = "sys_permission"
    __table_args__ = {'comment': '系统权限表'}

    id = uuid_pk_column()
    name = Column(String(64), nullable=False, comment='权限名称')
    code = Column(String(100), nullable=False, unique=True, index=True, comment='权限编码（resource:action）')
    resource = Column(String(50), nullable=True, index=True, comment='资源名称')
    action = Column(String(50), nullable=True, comment='操作类型')
    category = Column(String(50), nullable=True, comment='权限分类')
    description = Column(String(255), nullable=True, comment='权限描述')

    create_time = Column(DateTime, nullable=False, default=get_now, comment='创建时间')
    update_time = Column(DateTime, nullable=False, default=get_now, onupdate=get_now, comment='更新时间')

    roles = relationship("SysRole", secondary="sys_role_permission", viewonly=True)

    def __repr__(self):
        return f"<SysPermission(id={self.id}, name={self.name}, code={self.code})>"
