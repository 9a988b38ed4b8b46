"""
系统菜单模型
backend/app/models/sys_menu.py
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, SmallInteger, String, Uuid
from sqlalchemy.orm import relationship

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysMenu(Base):
    __tablename__ = 'sys_menu'
    __table_args__ = {'comment': '系统菜单表'}

    id = uuid_pk_column()
    parent_id = Column(
        Uuid(as_uuid=True),
        ForeignKey('sys_menu.id'),
        nullable=True,
        default=None,
        index=True,
        comment='父菜单ID（NULL表示顶级菜单）'
    )
    name = Column(String(64), nullable=False, comment='菜单名称')
    path = Column(String(255), nullable=True, comment='路由路径')
    component = Column(String(255), nullable=True, comment='组件路径')
    icon = Column(String(64), nullable=True, comment='菜单图标')
    type = Column(String(16), nullable=False, default='menu', comment='菜单类型（catalog-目录 menu-菜单 button-按钮 link-外链）')
    visible = Column(Boolean, nullable=False, default=True, comment='是否显示')
    sort = Column(SmallInteger, nullable=False, default=0, comment='排序')
    status = Column(String(16), nullable=False, default='active', comment='状态(active-正常 inactive-停用)')
    permission_code = Column(String(100), nullable=True, comment='关联权限标识')

    create_time = Column(DateTime, nullable=False, default=get_now, comment='创建时间')
    update_time = Column(DateTime, nullable=False, default=get_now, onupdate=get_now, comment='更新时间')

    roles = relationship('SysRole', secondary='sys_role_menu', viewonly=True)

    def __repr__(self):
        return f"<SysMenu(id={self.id}, name={self.name}, type={self.type})>"
