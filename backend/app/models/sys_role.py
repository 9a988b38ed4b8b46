"""
系统角色模型
backend/app/models/sys_role.py
上次更新：2026/3/2
说明：
- 角色采用软删除（deleted_at非空即已删除），关联表数据保留，恢复角色后原有授权自动生效
- name/code 仅在未删除的角色之间唯一（部分唯一索引）
"""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, SmallInteger, String, Table, UniqueConstraint, Uuid, text
from sqlalchemy.orm import relationship

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysRole(Base):
    __tablename__ = 'sys_role'
    __table_args__ = (
        Index(
            'uq_sys_role_name_alive', 'name', unique=True,
            postgresql_where=text('deleted_at IS NULL'),
            sqlite_where=text('deleted_at IS NULL'),
        ),
        Index(
            'uq_sys_role_code_alive', 'code', unique=True,
            postgresql_where=text('deleted_at IS NULL'),
            sqlite_where=text('deleted_at IS NULL'),
        ),
        {'comment': '系统角色表'},
    )

    id = uuid_pk_column()
    name = Column(String(64), nullable=False, comment='角色名称')
    code = Column(String(32), nullable=False, comment='角色编码')
    description = Column(String(255), nullable=True, comment='角色描述')
    sort = Column(SmallInteger, nullable=False, default=0, comment='显示顺序')
    status = Column(String(16), nullable=False, default='active', comment='角色状态(active-正常 inactive-停用)')

    # 审计字段
    create_time = Column(DateTime, nullable=False, default=get_now, comment='创建时间')
    update_time = Column(DateTime, nullable=False, default=get_now, onupdate=get_now, comment='更新时间')
    deleted_at = Column(DateTime, nullable=True, comment='软删除时间（NULL表示未删除）')

    # 关系定义（只读，写操作统一走关联表）
    permissions = relationship('SysPermission', secondary='sys_role_permission', viewonly=True)
    menus = relationship('SysMenu', secondary='sys_role_menu', viewonly=True)

    def __repr__(self):
        return f"<SysRole(id={self.id}, name={self.name}, code={self.code})>"


# 角色菜单关联表（多对多），(role_id, menu_id)唯一
sys_role_menu = Table(
    'sys_role_menu',
    Base.metadata,
    Column('id', Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4),
    Column('role_id', Uuid(as_uuid=True), ForeignKey('sys_role.id', ondelete='CASCADE'), nullable=False, index=True, comment='角色ID'),
    Column('menu_id', Uuid(as_uuid=True), ForeignKey('sys_menu.id', ondelete='CASCADE'), nullable=False, index=True, comment='菜单ID'),
    Column('created_at', DateTime, nullable=False, default=get_now, comment='授权时间'),
    UniqueConstraint('role_id', 'menu_id', name='uq_sys_role_menu'),
    comment='角色菜单关联表'
)

# 角色权限关联表（多对多），(role_id, permission_id)唯一
sys_role_permission = Table(
    'sys_role_permission',
    Base.metadata,
    Column('id', Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4),
    Column('role_id', Uuid(as_uuid=True), ForeignKey('sys_role.id', ondelete='CASCADE'), nullable=False, index=True, comment='角色ID'),
    Column('permission_id', Uuid(as_uuid=True), ForeignKey('sys_permission.id', ondelete='CASCADE'), nullable=False, index=True, comment='权限ID'),
    Column('created_at', DateTime, nullable=False, default=get_now, comment='授权时间'),
    UniqueConstraint('role_id', 'permission_id', name='uq_sys_role_permission'),
    comment='角色权限关联表'
)
