"""
监控指标接口文件
backend/app/api/v1/endpoints/monitor.py
上次更新：2026/3/2
说明：指标只追加写入，不提供修改/删除
"""
from datetime import datetime
from typing import Any, List, Optional

from dependency_injector.wiring import inject
from fastapi import APIRouter, Body, Depends, Query

from app.api.deps import MonitorServiceDep
from app.enums.sys_permissions import PermissionCode
from app.enums.sys_status import MetricType
from app.schemas.responses import ApiResponse
from app.schemas.sys_monitor import MetricCreate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/monitor", tags=["monitor"])


@router.post("/metrics", response_model=ApiResponse, summary="批量上报监控指标")
@permission(code=PermissionCode.MONITOR_WRITE.value, name="上报监控指标")
@inject
async def record_metrics(
    monitor_service: MonitorServiceDep,
    batch: List[MetricCreate] = Body(..., min_length=1),
    _=Depends(permission_checker(PermissionCode.MONITOR_WRITE.value)),
) -> Any:
    metrics = await monitor_service.record_metrics(batch)
    return ApiResponse.success(data=metrics, msg=f"写入 {len(metrics)} 条指标")


@router.get(
    "/metrics",
    response_model=ApiResponse,
    summary="按时间范围查询指标",
    description="按创建时间升序返回，start晚于end时返回422"
)
@permission(code=PermissionCode.MONITOR_READ.value, name="查看监控指标")
@inject
async def query_metrics(
    monitor_service: MonitorServiceDep,
    metric_type: Optional[MetricType] = Query(None, description="指标类型"),
    metric_name: Optional[str] = Query(None, description="指标名称"),
    start: Optional[datetime] = Query(None, description="开始时间"),
    end: Optional[datetime] = Query(None, description="结束时间"),
    limit: int = Query(1000, ge=1, le=10000, description="最多返回条数"),
    _=Depends(permission_checker(PermissionCode.MONITOR_READ.value)),
) -> Any:
    metrics = await monitor_service.query_metrics(
        metric_type.value if metric_type else None, metric_name, start, end, limit
    )
    return ApiResponse.success(data=metrics)


@router.get("/metrics/latest", response_model=ApiResponse, summary="指标最新值")
@inject
async def latest_metric(
    monitor_service: MonitorServiceDep,
    metric_type: MetricType = Query(..., description="指标类型"),
    metric_name: str = Query(..., description="指标名称"),
    _=Depends(permission_checker(PermissionCode.MONITOR_READ.value)),
) -> Any:
    metric = await monitor_service.latest_metric(metric_type.value, metric_name)
    return ApiResponse.success(data=metric, msg="操作成功" if metric else "暂无数据")


@router.get("/metrics/summary", response_model=ApiResponse, summary="指标统计")
@inject
async def summarize(
    monitor_service: MonitorServiceDep,
    metric_type: MetricType = Query(..., description="指标类型"),
    metric_name: str = Query(..., description="指标名称"),
    start: Optional[datetime] = Query(None, description="开始时间"),
    end: Optional[datetime] = Query(None, description="结束时间"),
    _=Depends(permission_checker(PermissionCode.MONITOR_READ.value)),
) -> Any:
    summary = await monitor_service.summarize(metric_type.value, metric_name, start, end)
    return ApiResponse.success(data=summary)
