"""
告警接口文件
backend/app/api/v1/endpoints/alerts.py
上次更新：2026/3/2
"""
from typing import Any, Optional
from uuid import UUID

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from app.api.deps import AlertServiceDep, PageQueryDep
from app.enums.sys_permissions import PermissionCode
from app.enums.sys_status import AlertStatus, MetricType
from app.schemas.responses import ApiResponse
from app.schemas.sys_monitor import AlertRuleCreate, AlertRuleUpdate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/alerts", tags=["alerts"])


# ==================== 告警规则 ====================

@router.get("/rules", response_model=ApiResponse, summary="分页获取告警规则")
@permission(code=PermissionCode.ALERT_READ.value, name="查看告警")
@inject
async def list_rules(
    page_query: PageQueryDep,
    alert_service: AlertServiceDep,
    keyword: Optional[str] = Query(None, description="规则名称/指标名称关键字"),
    enabled: Optional[bool] = Query(None, description="是否启用"),
    metric_type: Optional[MetricType] = Query(None, description="指标类型"),
    _=Depends(permission_checker(PermissionCode.ALERT_READ.value)),
) -> Any:
    result = await alert_service.list_rules(
        page_query, keyword=keyword, enabled=enabled,
        metric_type=metric_type.value if metric_type else None,
    )
    return ApiResponse.success(data=result)


@router.post("/rules", response_model=ApiResponse, summary="创建告警规则")
@permission(code=PermissionCode.ALERT_MANAGE.value, name="管理告警规则")
@inject
async def create_rule(
    rule_in: AlertRuleCreate,
    alert_service: AlertServiceDep,
    _=Depends(permission_checker(PermissionCode.ALERT_MANAGE.value)),
) -> Any:
    rule = await alert_service.create_rule(rule_in)
    return ApiResponse.success(data=rule, msg="告警规则创建成功")


@router.post(
    "/rules/check",
    response_model=ApiResponse,
    summary="检查全部启用的规则",
    description="逐条读取最新指标，触发或恢复告警"
)
@permission(code=PermissionCode.ALERT_MANAGE.value, name="管理告警规则")
@inject
async def check_all_rules(
    alert_service: AlertServiceDep,
    _=Depends(permission_checker(PermissionCode.ALERT_MANAGE.value)),
) -> Any:
    return ApiResponse.success(data=await alert_service.check_all_rules())


@router.get("/rules/{rule_id}", response_model=ApiResponse, summary="告警规则详情")
@inject
async def get_rule(
    rule_id: UUID,
    alert_service: AlertServiceDep,
    _=Depends(permission_checker(PermissionCode.ALERT_READ.value)),
) -> Any:
    return ApiResponse.success(data=await alert_service.get_rule(rule_id))


@router.put("/rules/{rule_id}", response_model=ApiResponse, summary="更新告警规则")
@inject
async def update_rule(
    rule_id: UUID,
    rule_in: AlertRuleUpdate,
    alert_service: AlertServiceDep,
    _=Depends(permission_checker(PermissionCode.ALERT_MANAGE.value)),
) -> Any:
    rule = await alert_service.update_rule(rule_id, rule_in)
    return ApiResponse.success(data=rule, msg="告警规则更新成功")


@router.delete("/rules/{rule_id}", response_model=ApiResponse, summary="删除告警规则")
@inject
async def delete_rule(
    rule_id: UUID,
    alert_service: AlertServiceDep,
    _=Depends(permission_checker(PermissionCode.ALERT_MANAGE.value)),
) -> Any:
    result = await alert_service.delete_rule(rule_id)
    return ApiResponse.success(data=result, msg=result.message)


@router.post("/rules/{rule_id}/check", response_model=ApiResponse, summary="检查单条规则")
@inject
async def check_rule(
    rule_id: UUID,
    alert_service: AlertServiceDep,
    _=Depends(permission_checker(PermissionCode.ALERT_MANAGE.value)),
) -> Any:
    return ApiResponse.success(data=await alert_service.check_rule(rule_id))


# ==================== 告警历史 ====================

@router.get("/history", response_model=ApiResponse, summary="告警历史")
@inject
async def list_history(
    page_query: PageQueryDep,
    alert_service: AlertServiceDep,
    rule_id: Optional[UUID] = Query(None, description="规则ID"),
    status: Optional[AlertStatus] = Query(None, description="告警状态"),
    _=Depends(permission_checker(PermissionCode.ALERT_READ.value)),
) -> Any:
    result = await alert_service.list_history(page_query, rule_id=rule_id, status=status.value if status else None)
    return ApiResponse.success(data=result)


@router.put("/history/{history_id}/resolve", response_model=ApiResponse, summary="手动恢复告警")
@inject
async def resolve_alert(
    history_id: UUID,
    alert_service: AlertServiceDep,
    _=Depends(permission_checker(PermissionCode.ALERT_MANAGE.value)),
) -> Any:
    history = await alert_service.resolve_alert(history_id)
    return ApiResponse.success(data=history, msg="告警已恢复")
