"""
告警规则与告警历史模型
backend/app/models/sys_alert.py
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysAlertRule(Base):
    __tablename__ = 'sys_alert_rule'
    __table_args__ = {'comment': '告警规则表'}

    id = uuid_pk_column()
    name = Column(String(100), nullable=False, comment='规则名称')
    metric_type = Column(String(16), nullable=False, comment='指标类型')
    metric_name = Column(String(100), nullable=False, comment='指标名称')
    condition = Column(String(2), nullable=False, comment='比较条件(> < >= <= == !=)')
    threshold = Column(Numeric(10, 2), nullable=False, comment='阈值')
    level = Column(String(16), nullable=False, default='warning', comment='告警级别(info/warning/error/critical)')
    enabled = Column(Boolean, nullable=False, default=True, comment='是否启用')
    alert_interval = Column(Integer, nullable=False, default=1800, comment='重复告警间隔(秒)')
    description = Column(String(255), nullable=True, comment='规则描述')

    create_time = Column(DateTime, nullable=False, default=get_now, comment='创建时间')
    update_time = Column(DateTime, nullable=False, default=get_now, onupdate=get_now, comment='更新时间')

    def __repr__(self):
        return f"<SysAlertRule(id={self.id}, name={self.name}, {self.metric_name} {self.condition} {self.threshold})>"


class SysAlertHistory(Base):
    __tablename__ = 'sys_alert_history'
    __table_args__ = (
        Index('ix_sys_alert_history_rule_status', 'rule_id', 'status'),
        {'comment': '告警历史表'},
    )

    id = uuid_pk_column()
    rule_id = Column(Uuid(as_uuid=True), ForeignKey('sys_alert_rule.id', ondelete='CASCADE'), nullable=False, comment='规则ID')
    metric_value = Column(Numeric(10, 2), nullable=False, comment='触发时指标值')
    threshold = Column(Numeric(10, 2), nullable=False, comment='触发时阈值')
    level = Column(String(16), nullable=False, comment='告警级别')
    status = Column(String(16), nullable=False, default='firing', comment='状态(firing-告警中 resolved-已恢复)')
    message = Column(Text, nullable=True, comment='告警信息')
    fired_at = Column(DateTime, nullable=False, default=get_now, comment='触发时间')
    resolved_at = Column(DateTime, nullable=True, comment='恢复时间')

    def __repr__(self):
        return f"<SysAlertHistory(id={self.id}, rule_id={self.rule_id}, status={self.status})>"
