"""
角色模块接口文件
backend/app/api/v1/endpoints/roles.py
上次更新：2026/3/2
"""
from typing import Any, Optional
from uuid import UUID

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from app.api.deps import PageQueryDep, RoleServiceDep
from app.enums.sys_permissions import PermissionCode
from app.enums.sys_status import RoleStatus
from app.schemas.responses import ApiResponse
from app.schemas.sys_relationship import RoleMenuAssignment, RolePermissionAssignment
from app.schemas.sys_role import RoleCreate, RoleUpdate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get(
    "/options",
    response_model=ApiResponse,
    summary="角色下拉选项",
    description="仅返回启用状态的角色"
)
@permission(code=PermissionCode.ROLE_READ.value, name="查看角色")
@inject
async def get_role_options(
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_READ.value)),
) -> Any:
    """
    返回格式：
    {
        "code": "00000",
        "data": [{"value": "角色ID", "label": "角色名称", "tag": "角色编码"}],
        "msg": "获取角色选项成功"
    }
    """
    options = await role_service.get_role_options()
    return ApiResponse.success(data=options, msg="获取角色选项成功")


# ============ 基础CRUD操作 ============
@router.get("", response_model=ApiResponse, summary="分页获取角色列表")
@permission(code=PermissionCode.ROLE_READ.value, name="查看角色")
@inject
async def list_roles(
    page_query: PageQueryDep,
    role_service: RoleServiceDep,
    keyword: Optional[str] = Query(None, description="名称/编码关键字"),
    status: Optional[RoleStatus] = Query(None, description="角色状态"),
    _=Depends(permission_checker(PermissionCode.ROLE_READ.value)),
) -> Any:
    result = await role_service.list_roles(page_query, keyword=keyword, status=status.value if status else None)
    return ApiResponse.success(data=result, msg="获取角色列表成功")


@router.post(
    "",
    response_model=ApiResponse,
    summary="创建角色",
    description="""
    创建新角色：
    - 角色名称（name）与编码（code）在未删除角色中唯一
    - permission_ids / menu_ids 中的ID必须全部存在
    """
)
@permission(code=PermissionCode.ROLE_CREATE.value, name="创建角色")
@inject
async def create_role(
    role_in: RoleCreate,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_CREATE.value)),
) -> Any:
    role = await role_service.create_role(role_in)
    return ApiResponse.success(data=role, msg="角色创建成功")


@router.get("/{role_id}", response_model=ApiResponse, summary="获取角色详情")
@permission(code=PermissionCode.ROLE_READ.value, name="查看角色")
@inject
async def get_role(
    role_id: UUID,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_READ.value)),
) -> Any:
    return ApiResponse.success(data=await role_service.get_role(role_id))


@router.put("/{role_id}", response_model=ApiResponse, summary="更新角色")
@permission(code=PermissionCode.ROLE_UPDATE.value, name="更新角色")
@inject
async def update_role(
    role_id: UUID,
    role_in: RoleUpdate,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_UPDATE.value)),
) -> Any:
    role = await role_service.update_role(role_id, role_in)
    return ApiResponse.success(data=role, msg="角色更新成功")


@router.delete(
    "/{role_id}",
    response_model=ApiResponse,
    summary="删除角色",
    description="软删除，持有该角色的用户立即失去其授权，授权关系保留以便恢复"
)
@permission(code=PermissionCode.ROLE_DELETE.value, name="删除角色")
@inject
async def delete_role(
    role_id: UUID,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_DELETE.value)),
) -> Any:
    result = await role_service.delete_role(role_id)
    return ApiResponse.success(data=result, msg=result.message)


@router.post("/{role_id}/restore", response_model=ApiResponse, summary="恢复已删除角色")
@permission(code=PermissionCode.ROLE_UPDATE.value, name="更新角色")
@inject
async def restore_role(
    role_id: UUID,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_UPDATE.value)),
) -> Any:
    role = await role_service.restore_role(role_id)
    return ApiResponse.success(data=role, msg="角色恢复成功")


# ============ 权限/菜单授权 ============
@router.put(
    "/{role_id}/permissions",
    response_model=ApiResponse,
    summary="分配角色权限",
    description="整体替换角色的权限集合"
)
@permission(code=PermissionCode.ROLE_UPDATE.value, name="更新角色")
@inject
async def assign_permissions(
    role_id: UUID,
    assignment: RolePermissionAssignment,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_UPDATE.value)),
) -> Any:
    role = await role_service.assign_permissions(role_id, assignment.permission_ids)
    return ApiResponse.success(data=role, msg="权限分配成功")


@router.post(
    "/{role_id}/permissions",
    response_model=ApiResponse,
    summary="追加角色权限",
    description="已授权的权限重复提交视为成功"
)
@permission(code=PermissionCode.ROLE_UPDATE.value, name="更新角色")
@inject
async def grant_permissions(
    role_id: UUID,
    assignment: RolePermissionAssignment,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_UPDATE.value)),
) -> Any:
    role = await role_service.grant_permissions(role_id, assignment.permission_ids)
    return ApiResponse.success(data=role, msg="权限授权成功")


@router.put(
    "/{role_id}/menus",
    response_model=ApiResponse,
    summary="分配角色菜单",
    description="整体替换角色的菜单集合"
)
@permission(code=PermissionCode.ROLE_UPDATE.value, name="更新角色")
@inject
async def assign_menus(
    role_id: UUID,
    assignment: RoleMenuAssignment,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_UPDATE.value)),
) -> Any:
    role = await role_service.assign_menus(role_id, assignment.menu_ids)
    return ApiResponse.success(data=role, msg="菜单分配成功")


@router.post("/{role_id}/menus", response_model=ApiResponse, summary="追加角色菜单")
@permission(code=PermissionCode.ROLE_UPDATE.value, name="更新角色")
@inject
async def grant_menus(
    role_id: UUID,
    assignment: RoleMenuAssignment,
    role_service: RoleServiceDep,
    _=Depends(permission_checker(PermissionCode.ROLE_UPDATE.value)),
) -> Any:
    role = await role_service.grant_menus(role_id, assignment.menu_ids)
    return ApiResponse.success(data=role, msg="菜单授权成功")
