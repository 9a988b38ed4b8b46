"""
数据字典模型（单表，parent_code自引用形成层级）
backend/app/models/sys_dict.py
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysDict(Base):
    __tablename__ = 'sys_dict'
    __table_args__ = (
        UniqueConstraint('dict_type', 'dict_code', name='uq_sys_dict_type_code'),
        {'comment': '数据字典表'},
    )

    id = uuid_pk_column()
    dict_type = Column(String(50), nullable=False, index=True, comment='字典类型')
    dict_code = Column(String(50), nullable=False, comment='字典编码')
    dict_name = Column(String(100), nullable=False, comment='字典名称')
    dict_value = Column(String(255), nullable=True, comment='字典值')
    parent_code = Column(String(50), nullable=True, comment='父级编码')
    sort_order = Column(Integer, nullable=False, default=0, comment='排序')
    is_active = Column(Boolean, nullable=False, default=True, comment='是否启用')
    remark = Column(String(255), nullable=True, comment='备注')

    create_time = Column(DateTime, nullable=False, default=get_now, comment='创建时间')
    update_time = Column(DateTime, nullable=False, default=get_now, onupdate=get_now, comment='更新时间')

    def __repr__(self):
        return f"<SysDict(id={self.id}, dict_type={self.dict_type}, dict_code={self.dict_code})>"
