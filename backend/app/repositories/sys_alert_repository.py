"""
告警规则与告警历史数据访问层
backend/app/repositories/sys_alert_repository.py
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import sessionmaker
from sqlmodel import delete, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import get_now
from app.models import SysAlertHistory, SysAlertRule


class AlertRepository:
    """告警Repo层：规则与历史共用一个事务上下文"""
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

    # ------------------------------
    # 规则
    # ------------------------------
    async def get_rule(self, rule_id: UUID) -> Optional[SysAlertRule]:
        async with self.transaction() as session:
            stmt = select(SysAlertRule).where(SysAlertRule.id == rule_id)
            return (await session.execute(stmt)).scalars().first()

    async def list_rules(
        self,
        offset: int = 0,
        limit: int = 20,
        keyword: Optional[str] = None,
        enabled: Optional[bool] = None,
        metric_type: Optional[str] = None,
    ) -> Tuple[List[SysAlertRule], int]:
        async with self.transaction() as session:
            stmt = select(SysAlertRule, func.count(SysAlertRule.id).over().label('total_count'))
            if keyword:
                like = f"%{keyword}%"
                stmt = stmt.where(or_(SysAlertRule.name.ilike(like), SysAlertRule.metric_name.ilike(like)))
            if enabled is not None:
                stmt = stmt.where(SysAlertRule.enabled.is_(enabled))
            if metric_type:
                stmt = stmt.where(SysAlertRule.metric_type == metric_type)

            stmt = stmt.order_by(SysAlertRule.create_time.desc(), SysAlertRule.name).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    async def list_enabled_rules(self) -> List[SysAlertRule]:
        async with self.transaction() as session:
            stmt = select(SysAlertRule).where(SysAlertRule.enabled.is_(True)).order_by(SysAlertRule.name)
            return list((await session.execute(stmt)).scalars().all())

    async def create_rule(self, rule: SysAlertRule, session: AsyncSession) -> SysAlertRule:
        session.add(rule)
        await session.flush()
        return rule

    async def update_rule(self, rule_id: UUID, values: Dict[str, Any], session: AsyncSession) -> Optional[SysAlertRule]:
        stmt = select(SysAlertRule).where(SysAlertRule.id == rule_id)
        rule = (await session.execute(stmt)).scalars().first()
        if not rule:
            return None
        for key, value in values.items():
            setattr(rule, key, value)
        await session.flush()
        return rule

    async def delete_rule(self, rule_id: UUID, session: AsyncSession) -> bool:
        await session.execute(delete(SysAlertHistory).where(SysAlertHistory.rule_id == rule_id))
        result = await session.execute(delete(SysAlertRule).where(SysAlertRule.id == rule_id))
        return result.rowcount > 0

    # ------------------------------
    # 历史
    # ------------------------------
    async def get_history(self, history_id: UUID) -> Optional[SysAlertHistory]:
        async with self.transaction() as session:
            stmt = select(SysAlertHistory).where(SysAlertHistory.id == history_id)
            return (await session.execute(stmt)).scalars().first()

    async def list_history(
        self,
        offset: int = 0,
        limit: int = 20,
        rule_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[SysAlertHistory], int]:
        async with self.transaction() as session:
            stmt = select(SysAlertHistory, func.count(SysAlertHistory.id).over().label('total_count'))
            if rule_id is not None:
                stmt = stmt.where(SysAlertHistory.rule_id == rule_id)
            if status:
                stmt = stmt.where(SysAlertHistory.status == status)

            stmt = stmt.order_by(SysAlertHistory.fired_at.desc()).offset(offset).limit(limit)
            rows = (await session.execute(stmt)).all()
            if not rows:
                return [], 0
            return [row[0] for row in rows], rows[0].total_count

    async def get_firing(self, rule_id: UUID, session: AsyncSession) -> Optional[SysAlertHistory]:
        """规则当前处于告警中的记录（同一规则最多一条）"""
        stmt = (
            select(SysAlertHistory)
            .where(SysAlertHistory.rule_id == rule_id, SysAlertHistory.status == 'firing')
            .order_by(SysAlertHistory.fired_at.desc())
        )
        return (await session.execute(stmt)).scalars().first()

    async def get_last_fired(self, rule_id: UUID, session: AsyncSession) -> Optional[SysAlertHistory]:
        stmt = (
            select(SysAlertHistory)
            .where(SysAlertHistory.rule_id == rule_id)
            .order_by(SysAlertHistory.fired_at.desc())
            .limit(1)
        )
        return (await session.execute(stmt)).scalars().first()

    async def create_history(self, history: SysAlertHistory, session: AsyncSession) -> SysAlertHistory:
        session.add(history)
        await session.flush()
        return history

    async def resolve_history(self, history_id: UUID, session: AsyncSession) -> Optional[SysAlertHistory]:
        """firing → resolved，已恢复的记录原样返回"""
        stmt = select(SysAlertHistory).where(SysAlertHistory.id == history_id)
        history = (await session.execute(stmt)).scalars().first()
        if not history:
            return None
        if history.status == 'firing':
            history.status = 'resolved'
            history.resolved_at = get_now()
            await session.flush()
        return history
