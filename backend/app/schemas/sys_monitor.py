"""
监控指标与告警相关的Pydantic Schemas
backend/app/schemas/sys_monitor.py
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import Field

from app.enums.sys_status import AlertCondition, AlertLevel, AlertStatus, MetricType
from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


# ==================== 监控指标 ====================
class MetricCreate(BaseSchema):
    metric_type: MetricType = Field(..., description="指标类型")
    metric_name: str = Field(..., min_length=1, max_length=100, description="指标名称", examples=["cpu_usage"])
    value: Decimal = Field(..., max_digits=10, decimal_places=2, description="指标值")
    unit: Optional[str] = Field(None, max_length=20, description="单位", examples=["%"])
    tags: Optional[Dict[str, Any]] = Field(None, description="标签")


class MetricOut(MetricCreate, IDSchema):
    created_at: datetime


class MetricSummary(BaseSchema):
    metric_type: MetricType
    metric_name: str
    count: int = 0
    min: Optional[Decimal] = None
    max: Optional[Decimal] = None
    avg: Optional[Decimal] = None


# ==================== 告警规则 ====================
class AlertRuleBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100, description="规则名称")
    metric_type: MetricType = Field(..., description="指标类型")
    metric_name: str = Field(..., min_length=1, max_length=100, description="指标名称")
    condition: AlertCondition = Field(..., description="比较条件")
    threshold: Decimal = Field(..., max_digits=10, decimal_places=2, description="阈值")
    level: AlertLevel = Field(AlertLevel.WARNING, description="告警级别")
    enabled: bool = Field(True, description="是否启用")
    alert_interval: int = Field(1800, ge=60, le=86400, description="重复告警间隔(秒)")
    description: Optional[str] = Field(None, max_length=255, description="规则描述")


class AlertRuleCreate(AlertRuleBase):
    pass


class AlertRuleUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    metric_type: Optional[MetricType] = None
    metric_name: Optional[str] = Field(None, min_length=1, max_length=100)
    condition: Optional[AlertCondition] = None
    threshold: Optional[Decimal] = Field(None, max_digits=10, decimal_places=2)
    level: Optional[AlertLevel] = None
    enabled: Optional[bool] = None
    alert_interval: Optional[int] = Field(None, ge=60, le=86400)
    description: Optional[str] = None


class AlertRuleOut(AlertRuleBase, TimestampSchema, IDSchema):
    pass


class AlertHistoryOut(IDSchema):
    rule_id: UUID
    metric_value: Decimal
    threshold: Decimal
    level: AlertLevel
    status: AlertStatus
    message: Optional[str] = None
    fired_at: datetime
    resolved_at: Optional[datetime] = None


class AlertCheckResult(BaseSchema):
    rule_id: UUID
    triggered: bool = Field(..., description="当前指标是否满足告警条件")
    action: str = Field(..., description="none/fired/resolved/skipped")
    metric_value: Optional[Decimal] = None
    history_id: Optional[UUID] = None
