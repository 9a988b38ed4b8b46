"""
数据字典API端点
backend/app/api/v1/endpoints/dicts.py
上次更新：2026/3/2
"""
from typing import Any, List, Optional
from uuid import UUID

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Path, Query

from app.api.deps import CurrentUser, DictServiceDep, PageQueryDep
from app.enums.sys_permissions import PermissionCode
from app.schemas.responses import ApiResponse
from app.schemas.sys_dict import DictCreate, DictUpdate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/dicts", tags=["dicts"])


# ==================== 字典项公共接口（登录即可访问） ====================

@router.get(
    "/type/{dict_type}",
    response_model=ApiResponse,
    summary="按类型获取字典项",
    description="只返回启用的字典项，按sort_order排序"
)
@inject
async def list_by_type(
    _current_user: CurrentUser,
    dict_service: DictServiceDep,
    dict_type: str = Path(..., description="字典类型", examples=["user_status"]),
) -> Any:
    """
    用于前端下拉框等场景

    响应格式：
    {
        "code": "00000",
        "data": [{"dict_code": "active", "dict_name": "正常", ...}],
        "msg": "操作成功"
    }
    """
    return ApiResponse.success(data=await dict_service.list_by_type(dict_type))


@router.get("/batch", response_model=ApiResponse, summary="批量按类型获取字典项")
@inject
async def list_by_types(
    _current_user: CurrentUser,
    dict_service: DictServiceDep,
    types: List[str] = Query(..., description="字典类型列表"),
) -> Any:
    return ApiResponse.success(data=await dict_service.list_by_types(types))


@router.get("/types", response_model=ApiResponse, summary="字典类型列表")
@inject
async def list_types(_current_user: CurrentUser, dict_service: DictServiceDep) -> Any:
    return ApiResponse.success(data=await dict_service.list_types())


@router.get("/children", response_model=ApiResponse, summary="获取子级字典项")
@inject
async def list_children(
    _current_user: CurrentUser,
    dict_service: DictServiceDep,
    dict_type: str = Query(..., description="字典类型"),
    parent_code: Optional[str] = Query(None, description="父级编码，为空返回顶级项"),
) -> Any:
    return ApiResponse.success(data=await dict_service.list_children(dict_type, parent_code))


# ==================== 字典管理接口 ====================

@router.get("", response_model=ApiResponse, summary="分页获取字典列表")
@permission(code=PermissionCode.DICT_READ.value, name="查看数据字典")
@inject
async def list_dicts(
    page_query: PageQueryDep,
    dict_service: DictServiceDep,
    dict_type: Optional[str] = Query(None, description="字典类型"),
    keyword: Optional[str] = Query(None, description="编码/名称关键字"),
    is_active: Optional[bool] = Query(None, description="是否启用"),
    _=Depends(permission_checker(PermissionCode.DICT_READ.value)),
) -> Any:
    result = await dict_service.list_dicts(page_query, dict_type=dict_type, keyword=keyword, is_active=is_active)
    return ApiResponse.success(data=result, msg="获取字典列表成功")


@router.post("", response_model=ApiResponse, summary="创建字典项")
@permission(code=PermissionCode.DICT_CREATE.value, name="创建数据字典")
@inject
async def create_dict(
    dict_in: DictCreate,
    dict_service: DictServiceDep,
    _=Depends(permission_checker(PermissionCode.DICT_CREATE.value)),
) -> Any:
    item = await dict_service.create_dict(dict_in)
    return ApiResponse.success(data=item, msg="字典项创建成功")


@router.get("/{dict_id}", response_model=ApiResponse, summary="获取字典项详情")
@permission(code=PermissionCode.DICT_READ.value, name="查看数据字典")
@inject
async def get_dict(
    dict_id: UUID,
    dict_service: DictServiceDep,
    _=Depends(permission_checker(PermissionCode.DICT_READ.value)),
) -> Any:
    return ApiResponse.success(data=await dict_service.get_dict(dict_id))


@router.put("/{dict_id}", response_model=ApiResponse, summary="更新字典项")
@permission(code=PermissionCode.DICT_UPDATE.value, name="更新数据字典")
@inject
async def update_dict(
    dict_id: UUID,
    dict_in: DictUpdate,
    dict_service: DictServiceDep,
    _=Depends(permission_checker(PermissionCode.DICT_UPDATE.value)),
) -> Any:
    item = await dict_service.update_dict(dict_id, dict_in)
    return ApiResponse.success(data=item, msg="字典项更新成功")


@router.delete("/{dict_id}", response_model=ApiResponse, summary="删除字典项")
@permission(code=PermissionCode.DICT_DELETE.value, name="删除数据字典")
@inject
async def delete_dict(
    dict_id: UUID,
    dict_service: DictServiceDep,
    _=Depends(permission_checker(PermissionCode.DICT_DELETE.value)),
) -> Any:
    result = await dict_service.delete_dict(dict_id)
    return ApiResponse.success(data=result, msg=result.message)
