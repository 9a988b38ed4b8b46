"""
通知模块接口文件
backend/app/api/v1/endpoints/notifications.py
上次更新：2026/3/2
说明：除发送/广播外，所有接口只作用于当前登录用户自己的通知
"""
from typing import Any, Optional
from uuid import UUID

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from app.api.deps import CurrentUser, NotificationServiceDep, PageQueryDep
from app.enums.sys_permissions import PermissionCode
from app.enums.sys_status import NotificationType
from app.schemas.responses import ApiResponse
from app.schemas.sys_notification import NotificationBroadcast, NotificationSend
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=ApiResponse, summary="我的通知列表", description="按创建时间倒序")
@inject
async def list_notifications(
    current_user: CurrentUser,
    page_query: PageQueryDep,
    notification_service: NotificationServiceDep,
    notification_type: Optional[NotificationType] = Query(None, alias="type", description="通知类型"),
    is_read: Optional[bool] = Query(None, description="是否已读"),
) -> Any:
    result = await notification_service.list_notifications(
        current_user.id,
        page_query,
        notification_type=notification_type.value if notification_type else None,
        is_read=is_read,
    )
    return ApiResponse.success(data=result)


@router.get("/unread-count", response_model=ApiResponse, summary="未读通知数")
@inject
async def unread_count(current_user: CurrentUser, notification_service: NotificationServiceDep) -> Any:
    return ApiResponse.success(data={"count": await notification_service.unread_count(current_user.id)})


@router.get("/stats", response_model=ApiResponse, summary="通知统计")
@inject
async def stats(current_user: CurrentUser, notification_service: NotificationServiceDep) -> Any:
    return ApiResponse.success(data=await notification_service.stats(current_user.id))


@router.put("/read-all", response_model=ApiResponse, summary="全部标记为已读")
@inject
async def mark_all_as_read(current_user: CurrentUser, notification_service: NotificationServiceDep) -> Any:
    count = await notification_service.mark_all_as_read(current_user.id)
    return ApiResponse.success(data={"count": count}, msg=f"已将 {count} 条通知标记为已读")


@router.delete("/clear", response_model=ApiResponse, summary="清空已读通知")
@inject
async def clear_read(current_user: CurrentUser, notification_service: NotificationServiceDep) -> Any:
    count = await notification_service.clear_read(current_user.id)
    return ApiResponse.success(data={"count": count}, msg=f"已清除 {count} 条已读通知")


@router.post("/send", response_model=ApiResponse, summary="发送通知给指定用户")
@permission(code=PermissionCode.NOTIFICATION_SEND.value, name="发送通知")
@inject
async def send_notification(
    body: NotificationSend,
    notification_service: NotificationServiceDep,
    _=Depends(permission_checker(PermissionCode.NOTIFICATION_SEND.value)),
) -> Any:
    created = await notification_service.send_to_users(body)
    return ApiResponse.success(data={"count": len(created)}, msg="通知发送成功")


@router.post("/broadcast", response_model=ApiResponse, summary="广播通知给所有正常用户")
@permission(code=PermissionCode.NOTIFICATION_SEND.value, name="发送通知")
@inject
async def broadcast(
    body: NotificationBroadcast,
    notification_service: NotificationServiceDep,
    _=Depends(permission_checker(PermissionCode.NOTIFICATION_SEND.value)),
) -> Any:
    count = await notification_service.broadcast(body)
    return ApiResponse.success(data={"count": count}, msg="广播发送成功")


@router.get("/{notification_id}", response_model=ApiResponse, summary="通知详情")
@inject
async def get_notification(
    notification_id: UUID,
    current_user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> Any:
    return ApiResponse.success(data=await notification_service.get_notification(current_user.id, notification_id))


@router.put("/{notification_id}/read", response_model=ApiResponse, summary="标记为已读")
@inject
async def mark_as_read(
    notification_id: UUID,
    current_user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> Any:
    notification = await notification_service.mark_as_read(current_user.id, notification_id)
    return ApiResponse.success(data=notification)


@router.delete("/{notification_id}", response_model=ApiResponse, summary="删除通知")
@inject
async def delete_notification(
    notification_id: UUID,
    current_user: CurrentUser,
    notification_service: NotificationServiceDep,
) -> Any:
    result = await notification_service.delete_notification(current_user.id, notification_id)
    return ApiResponse.success(data=result, msg=result.message)
