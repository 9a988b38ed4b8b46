"""
告警规则服务层
backend/app/services/sys_alert_service.py
上次更新：2026/3/2
检查流程（check_rule）：
1. 读取规则对应指标的最新值，无数据则不处理
2. 满足条件且无告警中记录 → 新建firing记录，并通知超级管理员
   （距上次触发不足alert_interval秒时跳过，避免指标抖动反复告警）
3. 不满足条件且存在告警中记录 → 置为resolved
"""
import logging
import operator
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from app.core.config import get_now, settings
from app.core.database import reject_null_columns
from app.core.exceptions import ResourceNotFound, ValidationFailed
from app.enums.sys_status import AlertCondition, AlertStatus, NotificationType
from app.models import SysAlertHistory, SysAlertRule
from app.repositories.sys_alert_repository import AlertRepository
from app.repositories.sys_monitor_metric_repository import MonitorMetricRepository
from app.repositories.sys_user_repository import UserRepository
from app.schemas.base import PageQuery, PageResult
from app.schemas.sys_monitor import (
    AlertCheckResult, AlertHistoryOut, AlertRuleCreate, AlertRuleOut, AlertRuleUpdate
)
from app.schemas.sys_notification import NotificationContent
from app.schemas.sys_user import Message
from app.services.sys_notification_service import NotificationService

logger = logging.getLogger(__name__)

_OPERATORS = {
    AlertCondition.GT.value: operator.gt,
    AlertCondition.LT.value: operator.lt,
    AlertCondition.GE.value: operator.ge,
    AlertCondition.LE.value: operator.le,
    AlertCondition.EQ.value: operator.eq,
    AlertCondition.NE.value: operator.ne,
}

ACTION_NONE = "none"
ACTION_FIRED = "fired"
ACTION_RESOLVED = "resolved"
ACTION_SKIPPED = "skipped"


def evaluate_condition(value, condition: str, threshold) -> bool:
    """value <condition> threshold，数值统一转为Decimal比较"""
    op = _OPERATORS.get(condition.value if isinstance(condition, AlertCondition) else condition)
    if op is None:
        raise ValidationFailed(f"不支持的比较条件：{condition}")
    return op(Decimal(str(value)), Decimal(str(threshold)))


class AlertService:
    """告警Service层"""
    def __init__(
        self,
        alert_repository: AlertRepository,
        metric_repository: MonitorMetricRepository,
        user_repository: UserRepository,
        notification_service: NotificationService,
    ):
        self.alert_repository = alert_repository
        self.metric_repository = metric_repository
        self.user_repository = user_repository
        self.notification_service = notification_service

    async def _get_rule_or_404(self, rule_id: UUID) -> SysAlertRule:
        rule = await self.alert_repository.get_rule(rule_id)
        if not rule:
            raise ResourceNotFound(f"告警规则 {rule_id} 不存在")
        return rule

    # ==================== 规则管理 ====================

    async def list_rules(
        self,
        page_query: PageQuery,
        keyword: Optional[str] = None,
        enabled: Optional[bool] = None,
        metric_type: Optional[str] = None,
    ) -> PageResult[AlertRuleOut]:
        items, total = await self.alert_repository.list_rules(
            offset=page_query.offset, limit=page_query.size,
            keyword=keyword, enabled=enabled, metric_type=metric_type,
        )
        return PageResult[AlertRuleOut](
            items=[AlertRuleOut.model_validate(r) for r in items],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def get_rule(self, rule_id: UUID) -> AlertRuleOut:
        return AlertRuleOut.model_validate(await self._get_rule_or_404(rule_id))

    async def create_rule(self, rule_in: AlertRuleCreate) -> AlertRuleOut:
        data = rule_in.model_dump()
        for key in ("metric_type", "condition", "level"):
            data[key] = data[key].value
        async with self.alert_repository.transaction() as session:
            rule = await self.alert_repository.create_rule(SysAlertRule(**data), session)
        logger.info(f"创建告警规则 | 名称：{rule.name} | 条件：{rule.metric_name} {rule.condition} {rule.threshold}")
        return AlertRuleOut.model_validate(rule)

    async def update_rule(self, rule_id: UUID, rule_in: AlertRuleUpdate) -> AlertRuleOut:
        await self._get_rule_or_404(rule_id)
        update_data = rule_in.model_dump(exclude_unset=True)
        reject_null_columns(SysAlertRule.__table__, update_data)
        for key in ("metric_type", "condition", "level"):
            if update_data.get(key) is not None:
                update_data[key] = update_data[key].value

        async with self.alert_repository.transaction() as session:
            rule = await self.alert_repository.update_rule(rule_id, update_data, session)
            if not rule:
                raise ResourceNotFound(f"告警规则 {rule_id} 不存在")
        return AlertRuleOut.model_validate(rule)

    async def delete_rule(self, rule_id: UUID) -> Message:
        async with self.alert_repository.transaction() as session:
            deleted = await self.alert_repository.delete_rule(rule_id, session)
        if not deleted:
            raise ResourceNotFound(f"告警规则 {rule_id} 不存在")
        return Message(message="告警规则删除成功")

    # ==================== 规则检查 ====================

    async def check_rule(self, rule_id: UUID) -> AlertCheckResult:
        rule = await self._get_rule_or_404(rule_id)
        if not rule.enabled:
            return AlertCheckResult(rule_id=rule.id, triggered=False, action=ACTION_SKIPPED)

        metric = await self.metric_repository.latest(rule.metric_type, rule.metric_name)
        if metric is None:
            return AlertCheckResult(rule_id=rule.id, triggered=False, action=ACTION_NONE)

        triggered = evaluate_condition(metric.value, rule.condition, rule.threshold)
        action = ACTION_NONE
        history: Optional[SysAlertHistory] = None

        async with self.alert_repository.transaction() as session:
            firing = await self.alert_repository.get_firing(rule.id, session)
            if triggered and firing:
                history = firing
            elif triggered:
                last = await self.alert_repository.get_last_fired(rule.id, session)
                if last and get_now() - last.fired_at < timedelta(seconds=rule.alert_interval):
                    action = ACTION_SKIPPED
                else:
                    history = await self.alert_repository.create_history(SysAlertHistory(
                        rule_id=rule.id,
                        metric_value=metric.value,
                        threshold=rule.threshold,
                        level=rule.level,
                        status=AlertStatus.FIRING.value,
                        message=(
                            f"{rule.name}：{rule.metric_name} 当前值 {metric.value}"
                            f" {rule.condition} 阈值 {rule.threshold}"
                        ),
                    ), session)
                    action = ACTION_FIRED
            elif firing:
                history = await self.alert_repository.resolve_history(firing.id, session)
                action = ACTION_RESOLVED

        if action == ACTION_FIRED:
            logger.warning(f"告警触发 | 规则：{rule.name} | 级别：{rule.level} | 指标值：{metric.value}")
            await self._notify_super_admins(rule, history)
        elif action == ACTION_RESOLVED:
            logger.info(f"告警恢复 | 规则：{rule.name} | 指标值：{metric.value}")

        return AlertCheckResult(
            rule_id=rule.id,
            triggered=triggered,
            action=action,
            metric_value=metric.value,
            history_id=history.id if history else None,
        )

    async def check_all_rules(self) -> List[AlertCheckResult]:
        results = []
        for rule in await self.alert_repository.list_enabled_rules():
            results.append(await self.check_rule(rule.id))
        return results

    async def _notify_super_admins(self, rule: SysAlertRule, history: SysAlertHistory) -> None:
        user_ids = await self.user_repository.get_user_ids_by_role_code(settings.SUPER_ADMIN_ROLE_CODE)
        if not user_ids:
            logger.info(f"无超级管理员可接收告警通知 | 规则：{rule.name}")
            return
        await self.notification_service.notify_users(user_ids, NotificationContent(
            title=f"[{rule.level}] {rule.name}",
            content=history.message,
            type=NotificationType.SYSTEM,
        ))

    # ==================== 告警历史 ====================

    async def list_history(
        self,
        page_query: PageQuery,
        rule_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> PageResult[AlertHistoryOut]:
        items, total = await self.alert_repository.list_history(
            offset=page_query.offset, limit=page_query.size, rule_id=rule_id, status=status,
        )
        return PageResult[AlertHistoryOut](
            items=[AlertHistoryOut.model_validate(h) for h in items],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def resolve_alert(self, history_id: UUID) -> AlertHistoryOut:
        """手动恢复告警，已恢复的记录原样返回"""
        async with self.alert_repository.transaction() as session:
            history = await self.alert_repository.resolve_history(history_id, session)
        if not history:
            raise ResourceNotFound(f"告警记录 {history_id} 不存在")
        return AlertHistoryOut.model_validate(history)
