"""
权限模块接口文件
backend/app/api/v1/endpoints/permissions.py
上次更新：2026/3/2
"""
from typing import Any, Optional
from uuid import UUID

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from app.api.deps import PageQueryDep, PermissionServiceDep
from app.enums.sys_permissions import PermissionCode
from app.schemas.responses import ApiResponse
from app.schemas.sys_permission import PermissionCreate, PermissionUpdate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import get_declared_permissions, permission

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("", response_model=ApiResponse, summary="分页获取权限列表")
@permission(code=PermissionCode.PERMISSION_READ.value, name="查看权限")
@inject
async def list_permissions(
    page_query: PageQueryDep,
    permission_service: PermissionServiceDep,
    keyword: Optional[str] = Query(None, description="名称/编码关键字"),
    resource: Optional[str] = Query(None, description="资源"),
    category: Optional[str] = Query(None, description="分类"),
    _=Depends(permission_checker(PermissionCode.PERMISSION_READ.value)),
) -> Any:
    result = await permission_service.list_permissions(
        page_query, keyword=keyword, resource=resource, category=category
    )
    return ApiResponse.success(data=result, msg="获取权限列表成功")


@router.get("/grouped", response_model=ApiResponse, summary="按分类分组的权限")
@permission(code=PermissionCode.PERMISSION_READ.value, name="查看权限")
@inject
async def list_grouped(
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_READ.value)),
) -> Any:
    return ApiResponse.success(data=await permission_service.list_grouped())


@router.get("/resources", response_model=ApiResponse, summary="权限资源列表")
@inject
async def list_resources(
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_READ.value)),
) -> Any:
    return ApiResponse.success(data=await permission_service.list_resources())


@router.get("/actions", response_model=ApiResponse, summary="权限操作列表")
@inject
async def list_actions(
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_READ.value)),
) -> Any:
    return ApiResponse.success(data=await permission_service.list_actions())


@router.get("/categories", response_model=ApiResponse, summary="权限分类列表")
@inject
async def list_categories(
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_READ.value)),
) -> Any:
    return ApiResponse.success(data=await permission_service.list_categories())


@router.post(
    "/sync",
    response_model=ApiResponse,
    summary="同步系统声明的权限",
    description="将代码中声明的权限码写入权限表，已存在的编码不覆盖"
)
@permission(code=PermissionCode.PERMISSION_CREATE.value, name="创建权限")
@inject
async def sync_permissions(
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_CREATE.value)),
) -> Any:
    created = await permission_service.sync_declared(get_declared_permissions())
    return ApiResponse.success(data=created, msg=f"同步完成，新增 {len(created)} 个权限")


@router.post("", response_model=ApiResponse, summary="创建权限")
@permission(code=PermissionCode.PERMISSION_CREATE.value, name="创建权限")
@inject
async def create_permission(
    perm_in: PermissionCreate,
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_CREATE.value)),
) -> Any:
    perm = await permission_service.create_permission(perm_in)
    return ApiResponse.success(data=perm, msg="权限创建成功")


@router.get("/{permission_id}", response_model=ApiResponse, summary="获取权限详情")
@inject
async def get_permission(
    permission_id: UUID,
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_READ.value)),
) -> Any:
    return ApiResponse.success(data=await permission_service.get_permission(permission_id))


@router.put("/{permission_id}", response_model=ApiResponse, summary="更新权限")
@permission(code=PermissionCode.PERMISSION_UPDATE.value, name="更新权限")
@inject
async def update_permission(
    permission_id: UUID,
    perm_in: PermissionUpdate,
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_UPDATE.value)),
) -> Any:
    perm = await permission_service.update_permission(permission_id, perm_in)
    return ApiResponse.success(data=perm, msg="权限更新成功")


@router.delete(
    "/{permission_id}",
    response_model=ApiResponse,
    summary="删除权限",
    description="仍被角色使用的权限不可删除"
)
@permission(code=PermissionCode.PERMISSION_DELETE.value, name="删除权限")
@inject
async def delete_permission(
    permission_id: UUID,
    permission_service: PermissionServiceDep,
    _=Depends(permission_checker(PermissionCode.PERMISSION_DELETE.value)),
) -> Any:
    result = await permission_service.delete_permission(permission_id)
    return ApiResponse.success(data=result, msg=result.message)
