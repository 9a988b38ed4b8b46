"""
邮件模板模型
backend/app/models/sys_email_template.py
"""
from sqlalchemy import JSON, Column, DateTime, String, Text

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysEmailTemplate(Base):
    __tablename__ = 'sys_email_template'
    __table_args__ = {'comment': '邮件模板表'}

    id = uuid_pk_column()
    name = Column(String(100), nullable=False, unique=True, comment='模板名称（唯一）')
    subject = Column(String(255), nullable=False, comment='邮件主题模板')
    content = Column(Text, nullable=False, comment='HTML内容模板')
    template_type = Column(String(50), nullable=False, default='GENERAL_NOTIFICATION', index=True, comment='模板类型')
    # [{name, label, description, type, required, default_value, example}]
    variable_schema = Column(JSON, nullable=False, default=list, comment='变量定义')
    tags = Column(JSON, nullable=False, default=list, comment='标签列表')
    description = Column(Text, nullable=True, comment='模板描述')

    create_time = Column(DateTime, nullable=False, default=get_now, comment='创建时间')
    update_time = Column(DateTime, nullable=False, default=get_now, onupdate=get_now, comment='更新时间')

    def __repr__(self):
        return f"<SysEmailTemplate(id={self.id}, name={self.name}, template_type={self.template_type})>"
