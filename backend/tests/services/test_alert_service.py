"""
测试告警Service：条件判断、触发/恢复/重复告警间隔、通知超级管理员
"""
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.exceptions import ResourceNotFound, ValidationFailed
from app.enums.sys_status import AlertCondition, AlertStatus, MetricType
from app.schemas.base import PageQuery
from app.schemas.sys_monitor import AlertRuleCreate, AlertRuleUpdate, MetricCreate
from app.services.sys_alert_service import evaluate_condition


def test_evaluate_condition():
    assert evaluate_condition(Decimal("90.5"), ">", 90)
    assert evaluate_condition(90, AlertCondition.GE, Decimal("90.00"))
    assert not evaluate_condition(10, "==", 11)
    with pytest.raises(ValidationFailed):
        evaluate_condition(1, "~", 1)


class TestAlertService:

    @pytest.fixture
    async def rule(self, alert_service):
        return await alert_service.create_rule(AlertRuleCreate(
            name="CPU过高",
            metric_type=MetricType.SYSTEM,
            metric_name="cpu_usage",
            condition=AlertCondition.GT,
            threshold=Decimal("80"),
        ))

    @pytest.fixture
    def record(self, monitor_service):
        async def _record(value):
            await monitor_service.record_metric(MetricCreate(
                metric_type=MetricType.SYSTEM, metric_name="cpu_usage", value=Decimal(str(value))
            ))
        return _record

    async def test_no_metric(self, alert_service, rule):
        result = await alert_service.check_rule(rule.id)

        assert result.action == "none"
        assert result.triggered is False

    async def test_fire_notifies_super_admins(
        self, alert_service, notification_service, rule, record, make_role, make_user
    ):
        admin_role = await make_role("super_admin")
        admin = await make_user("root", role_ids=[admin_role.id])
        bystander = await make_user("guest")
        await record(95)

        result = await alert_service.check_rule(rule.id)

        assert result.action == "fired"
        assert result.history_id is not None
        assert await notification_service.unread_count(admin.id) == 1
        assert await notification_service.unread_count(bystander.id) == 0

    async def test_still_firing_then_resolve(self, alert_service, rule, record):
        await record(95)
        fired = await alert_service.check_rule(rule.id)
        await record(96)
        again = await alert_service.check_rule(rule.id)

        assert again.action == "none"
        assert again.history_id == fired.history_id

        await record(50)
        resolved = await alert_service.check_rule(rule.id)

        assert resolved.action == "resolved"
        history = await alert_service.list_history(PageQuery(), rule_id=rule.id)
        assert history.total == 1
        assert history.items[0].status == AlertStatus.RESOLVED

    async def test_refire_within_interval_skipped(self, alert_service, rule, record):
        await record(95)
        await alert_service.check_rule(rule.id)
        await record(50)
        await alert_service.check_rule(rule.id)
        await record(99)

        result = await alert_service.check_rule(rule.id)

        assert result.action == "skipped"
        assert result.triggered is True

    async def test_disabled_rule_skipped(self, alert_service, rule, record):
        await alert_service.update_rule(rule.id, AlertRuleUpdate(enabled=False))
        await record(95)

        assert (await alert_service.check_rule(rule.id)).action == "skipped"
        assert await alert_service.check_all_rules() == []

    async def test_manual_resolve(self, alert_service, rule, record):
        await record(95)
        fired = await alert_service.check_rule(rule.id)

        history = await alert_service.resolve_alert(fired.history_id)
        again = await alert_service.resolve_alert(fired.history_id)

        assert history.status == AlertStatus.RESOLVED
        assert again.resolved_at == history.resolved_at

    async def test_unknown_rule_and_delete(self, alert_service, rule):
        with pytest.raises(ResourceNotFound):
            await alert_service.check_rule(uuid4())

        await alert_service.delete_rule(rule.id)

        with pytest.raises(ResourceNotFound):
            await alert_service.get_rule(rule.id)
