"""
测试监控指标Service：批量写入、范围查询、统计
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.core.exceptions import ValidationFailed
from app.enums.sys_status import MetricType
from app.schemas.sys_monitor import MetricCreate


def metric(value, name="cpu_usage", metric_type=MetricType.SYSTEM):
    return MetricCreate(metric_type=metric_type, metric_name=name, value=Decimal(str(value)), unit="%")


class TestMonitorService:

    async def test_record_and_latest(self, monitor_service):
        await monitor_service.record_metrics([metric(10), metric(20)])
        await monitor_service.record_metric(metric(30))

        latest = await monitor_service.latest_metric("system", "cpu_usage")

        assert latest.value == Decimal("30")
        assert await monitor_service.latest_metric("system", "memory") is None

    async def test_query_filters(self, monitor_service):
        await monitor_service.record_metrics([metric(10), metric(5, name="memory"), metric(1, metric_type=MetricType.CACHE)])

        items = await monitor_service.query_metrics(metric_type="system", metric_name="cpu_usage")
        future = await monitor_service.query_metrics(start=datetime.now() + timedelta(days=1))

        assert [i.value for i in items] == [Decimal("10")]
        assert future == []

    async def test_invalid_range(self, monitor_service):
        now = datetime.now()

        with pytest.raises(ValidationFailed):
            await monitor_service.query_metrics(start=now, end=now - timedelta(hours=1))

    async def test_summary(self, monitor_service):
        await monitor_service.record_metrics([metric(10), metric(20), metric(40)])

        summary = await monitor_service.summarize("system", "cpu_usage")
        empty = await monitor_service.summarize("system", "memory")

        assert summary.count == 3
        assert summary.min == Decimal("10")
        assert summary.max == Decimal("40")
        assert summary.avg == Decimal("23.33")
        assert empty.count == 0 and empty.avg is None
