"""
监控指标数据访问层（只追加，不提供更新和删除）
backend/app/repositories/sys_monitor_metric_repository.py
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence

from sqlalchemy.orm import sessionmaker
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models import SysMonitorMetric


class MonitorMetricRepository:
    def __init__(self, async_session_factory: sessionmaker):
        self.async_session_factory = async_session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        session: AsyncSession = self.async_session_factory()
        try:
            await session.begin()
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            raise e
        finally:
            await session.close()

    @staticmethod
    def _apply_filters(stmt, metric_type, metric_name, start, end):
        if metric_type:
            stmt = stmt.where(SysMonitorMetric.metric_type == metric_type)
        if metric_name:
            stmt = stmt.where(SysMonitorMetric.metric_name == metric_name)
        if start is not None:
            stmt = stmt.where(SysMonitorMetric.created_at >= start)
        if end is not None:
            stmt = stmt.where(SysMonitorMetric.created_at <= end)
        return stmt

    async def query(
        self,
        metric_type: Optional[str] = None,
        metric_name: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 1000,
    ) -> List[SysMonitorMetric]:
        """时间范围查询，按采集时间升序"""
        async with self.transaction() as session:
            stmt = self._apply_filters(select(SysMonitorMetric), metric_type, metric_name, start, end)
            stmt = stmt.order_by(SysMonitorMetric.created_at, SysMonitorMetric.id).limit(limit)
            return list((await session.execute(stmt)).scalars().all())

    async def latest(self, metric_type: str, metric_name: str) -> Optional[SysMonitorMetric]:
        async with self.transaction() as session:
            stmt = (
                select(SysMonitorMetric)
                .where(SysMonitorMetric.metric_type == metric_type, SysMonitorMetric.metric_name == metric_name)
                .order_by(SysMonitorMetric.created_at.desc())
                .limit(1)
            )
            return (await session.execute(stmt)).scalars().first()

    async def summarize(
        self,
        metric_type: str,
        metric_name: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        async with self.transaction() as session:
            stmt = select(
                func.count(SysMonitorMetric.id),
                func.min(SysMonitorMetric.value),
                func.max(SysMonitorMetric.value),
                func.avg(SysMonitorMetric.value),
            )
            stmt = self._apply_filters(stmt, metric_type, metric_name, start, end)
            count, min_value, max_value, avg_value = (await session.execute(stmt)).one()
            return {"count": count, "min": min_value, "max": max_value, "avg": avg_value}

    async def create_many(self, metrics: Sequence[SysMonitorMetric], session: AsyncSession) -> None:
        session.add_all(list(metrics))
        await session.flush()
