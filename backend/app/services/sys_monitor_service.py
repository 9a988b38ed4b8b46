"""
监控指标服务层（只追加写入 + 查询统计）
backend/app/services/sys_monitor_service.py
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from app.core.config import to_local_naive
from app.core.exceptions import ValidationFailed
from app.models import SysMonitorMetric
from app.repositories.sys_monitor_metric_repository import MonitorMetricRepository
from app.schemas.sys_monitor import MetricCreate, MetricOut, MetricSummary

logger = logging.getLogger(__name__)


class MonitorService:
    def __init__(self, metric_repository: MonitorMetricRepository):
        self.metric_repository = metric_repository

    @staticmethod
    def _check_range(start: Optional[datetime], end: Optional[datetime]):
        start, end = to_local_naive(start), to_local_naive(end)
        if start and end and start > end:
            raise ValidationFailed("开始时间不能晚于结束时间")
        return start, end

    async def record_metrics(self, batch: Sequence[MetricCreate]) -> List[MetricOut]:
        metrics = [
            SysMonitorMetric(
                metric_type=item.metric_type.value,
                metric_name=item.metric_name,
                value=item.value,
                unit=item.unit,
                tags=item.tags,
            )
            for item in batch
        ]
        if not metrics:
            return []
        async with self.metric_repository.transaction() as session:
            await self.metric_repository.create_many(metrics, session)
        logger.debug(f"写入监控指标 | 数量：{len(metrics)}")
        return [MetricOut.model_validate(m) for m in metrics]

    async def record_metric(self, data: MetricCreate) -> MetricOut:
        return (await self.record_metrics([data]))[0]

    async def query_metrics(
        self,
        metric_type: Optional[str] = None,
        metric_name: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 1000,
    ) -> List[MetricOut]:
        start, end = self._check_range(start, end)
        items = await self.metric_repository.query(metric_type, metric_name, start, end, limit)
        return [MetricOut.model_validate(m) for m in items]

    async def latest_metric(self, metric_type: str, metric_name: str) -> Optional[MetricOut]:
        metric = await self.metric_repository.latest(metric_type, metric_name)
        return MetricOut.model_validate(metric) if metric else None

    async def summarize(
        self,
        metric_type: str,
        metric_name: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> MetricSummary:
        start, end = self._check_range(start, end)
        stats = await self.metric_repository.summarize(metric_type, metric_name, start, end)
        avg = stats["avg"]
        return MetricSummary(
            metric_type=metric_type,
            metric_name=metric_name,
            count=stats["count"] or 0,
            min=stats["min"],
            max=stats["max"],
            avg=round(avg, 2) if avg is not None else None,
        )
