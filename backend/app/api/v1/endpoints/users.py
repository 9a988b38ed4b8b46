"""
backend/app/api/v1/endpoints/users.py
更新时间：2026/3/2
用户API端点

设计原则：
1. 最小API逻辑：只处理HTTP相关逻辑，业务校验在Service层
2. 依赖注入：通过依赖获取服务实例
3. 统一响应：所有接口返回ApiResponse，异常由全局处理器转换
"""
from typing import Any, Optional
from uuid import UUID

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from app.api.deps import CurrentUser, PageQueryDep, UserServiceDep
from app.enums.sys_permissions import PermissionCode
from app.enums.sys_status import UserStatus
from app.schemas.responses import ApiResponse
from app.schemas.sys_relationship import UserRoleAssignment
from app.schemas.sys_user import UpdatePassword, UserCreate, UserUpdate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/users", tags=["users"])


# ============ 个人相关接口 ============
@router.get("/me", response_model=ApiResponse, summary="获取当前用户信息")
@inject
async def read_me(current_user: CurrentUser, user_service: UserServiceDep) -> Any:
    user = await user_service.get_user(current_user.id)
    return ApiResponse.success(data=user, msg="获取用户信息成功")


@router.get(
    "/me/authorization",
    response_model=ApiResponse,
    summary="获取当前用户授权信息",
    description="返回有效角色编码、权限码与可见菜单树"
)
@inject
async def read_my_authorization(current_user: CurrentUser, user_service: UserServiceDep) -> Any:
    payload = await user_service.get_authorization(current_user.id)
    return ApiResponse.success(data=payload, msg="获取授权信息成功")


@router.put("/me", response_model=ApiResponse, summary="更新个人信息")
@inject
async def update_me(user_update: UserUpdate, current_user: CurrentUser, user_service: UserServiceDep) -> Any:
    # 不允许修改自己的状态
    data = user_update.model_dump(exclude_unset=True, exclude={"status"})
    user = await user_service.update_user(current_user.id, UserUpdate(**data))
    return ApiResponse.success(data=user, msg="个人信息更新成功")


@router.put("/me/password", response_model=ApiResponse, summary="修改个人密码")
@inject
async def update_my_password(body: UpdatePassword, current_user: CurrentUser, user_service: UserServiceDep) -> Any:
    result = await user_service.update_password(current_user.id, body)
    return ApiResponse.success(data=result, msg=result.message)


# ============ 基础CRUD操作 ============
@router.get("", response_model=ApiResponse, summary="分页获取用户列表")
@permission(code=PermissionCode.USER_READ.value, name="查看用户")
@inject
async def list_users(
    page_query: PageQueryDep,
    user_service: UserServiceDep,
    keyword: Optional[str] = Query(None, description="用户名/昵称/邮箱关键字"),
    status: Optional[UserStatus] = Query(None, description="用户状态"),
    _=Depends(permission_checker(PermissionCode.USER_READ.value)),
) -> Any:
    result = await user_service.list_users(page_query, keyword=keyword, status=status.value if status else None)
    return ApiResponse.success(data=result, msg="获取用户列表成功")


@router.post("", response_model=ApiResponse, summary="创建用户")
@permission(code=PermissionCode.USER_CREATE.value, name="创建用户")
@inject
async def create_user(
    user_in: UserCreate,
    user_service: UserServiceDep,
    _=Depends(permission_checker(PermissionCode.USER_CREATE.value)),
) -> Any:
    user = await user_service.create_user(user_in)
    return ApiResponse.success(data=user, msg="用户创建成功")


@router.get("/{user_id}", response_model=ApiResponse, summary="获取用户详情")
@permission(code=PermissionCode.USER_READ.value, name="查看用户")
@inject
async def get_user(
    user_id: UUID,
    user_service: UserServiceDep,
    _=Depends(permission_checker(PermissionCode.USER_READ.value)),
) -> Any:
    return ApiResponse.success(data=await user_service.get_user(user_id))


@router.put("/{user_id}", response_model=ApiResponse, summary="更新用户")
@permission(code=PermissionCode.USER_UPDATE.value, name="更新用户")
@inject
async def update_user(
    user_id: UUID,
    user_update: UserUpdate,
    user_service: UserServiceDep,
    _=Depends(permission_checker(PermissionCode.USER_UPDATE.value)),
) -> Any:
    user = await user_service.update_user(user_id, user_update)
    return ApiResponse.success(data=user, msg="用户更新成功")


@router.delete("/{user_id}", response_model=ApiResponse, summary="删除用户")
@permission(code=PermissionCode.USER_DELETE.value, name="删除用户")
@inject
async def delete_user(
    user_id: UUID,
    current_user: CurrentUser,
    user_service: UserServiceDep,
    _=Depends(permission_checker(PermissionCode.USER_DELETE.value)),
) -> Any:
    result = await user_service.delete_user(user_id, current_user_id=current_user.id)
    return ApiResponse.success(data=result, msg=result.message)


# ============ 角色分配 ============
@router.get("/{user_id}/roles", response_model=ApiResponse, summary="获取用户角色")
@permission(code=PermissionCode.USER_READ.value, name="查看用户")
@inject
async def get_user_roles(
    user_id: UUID,
    user_service: UserServiceDep,
    _=Depends(permission_checker(PermissionCode.USER_READ.value)),
) -> Any:
    return ApiResponse.success(data=await user_service.get_user_roles(user_id))


@router.put(
    "/{user_id}/roles",
    response_model=ApiResponse,
    summary="分配用户角色",
    description="整体替换用户的角色集合，空列表表示清空"
)
@permission(code=PermissionCode.USER_ASSIGN_ROLE.value, name="分配角色")
@inject
async def assign_user_roles(
    user_id: UUID,
    assignment: UserRoleAssignment,
    user_service: UserServiceDep,
    _=Depends(permission_checker(PermissionCode.USER_ASSIGN_ROLE.value)),
) -> Any:
    roles = await user_service.assign_roles(user_id, assignment.role_ids)
    return ApiResponse.success(data=roles, msg="角色分配成功")
