"""
监控指标模型（只追加的时序数据）
backend/app/models/sys_monitor_metric.py
"""
from sqlalchemy import JSON, Column, DateTime, Index, Numeric, String

from app.core.config import get_now
from app.models.base import Base, uuid_pk_column


class SysMonitorMetric(Base):
    __tablename__ = 'sys_monitor_metric'
    __table_args__ = (
        Index('ix_sys_monitor_metric_type', 'metric_type'),
        Index('ix_sys_monitor_metric_created_at', 'created_at'),
        Index('ix_sys_monitor_metric_type_name_time', 'metric_type', 'metric_name', 'created_at'),
        {'comment': '监控指标表'},
    )

    id = uuid_pk_column()
    metric_type = Column(String(16), nullable=False, comment='指标类型(system/application/database/cache)')
    metric_name = Column(String(100), nullable=False, comment='指标名称')
    value = Column(Numeric(10, 2), nullable=False, comment='指标值')
    unit = Column(String(20), nullable=True, comment='单位')
    tags = Column(JSON, nullable=True, comment='标签')
    created_at = Column(DateTime, nullable=False, default=get_now, comment='采集时间')

    def __repr__(self):
        return f"<SysMonitorMetric(metric_type={self.metric_type}, metric_name={self.metric_name}, value={self.value})>"
