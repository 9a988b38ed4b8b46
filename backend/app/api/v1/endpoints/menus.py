"""
菜单模块接口文件
backend/app/api/v1/endpoints/menus.py
上次更新：2026/3/2
"""
from typing import Any, Literal, Optional
from uuid import UUID

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from app.api.deps import CurrentUser, MenuServiceDep, PageQueryDep
from app.enums.sys_permissions import PermissionCode
from app.enums.sys_status import MenuStatus, MenuType
from app.schemas.responses import ApiResponse
from app.schemas.sys_menu import MenuCreate, MenuUpdate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/menus", tags=["menus"])


@router.get(
    "/user-tree",
    response_model=ApiResponse,
    summary="当前用户的菜单树",
    description="只包含当前用户角色授权、启用且可见的菜单"
)
@inject
async def get_user_menu_tree(current_user: CurrentUser, menu_service: MenuServiceDep) -> Any:
    tree = await menu_service.get_user_menu_tree(current_user.id)
    return ApiResponse.success(data=tree, msg="获取菜单成功")


@router.get("/tree", response_model=ApiResponse, summary="完整菜单树（管理端）")
@permission(code=PermissionCode.MENU_READ.value, name="查看菜单")
@inject
async def get_menu_tree(
    menu_service: MenuServiceDep,
    status: Optional[MenuStatus] = Query(None, description="菜单状态"),
    _=Depends(permission_checker(PermissionCode.MENU_READ.value)),
) -> Any:
    tree = await menu_service.get_menu_tree(status=status.value if status else None)
    return ApiResponse.success(data=tree, msg="获取菜单树成功")


# ============ 基础CRUD操作 ============
@router.get("", response_model=ApiResponse, summary="分页获取菜单列表")
@permission(code=PermissionCode.MENU_READ.value, name="查看菜单")
@inject
async def list_menus(
    page_query: PageQueryDep,
    menu_service: MenuServiceDep,
    keyword: Optional[str] = Query(None, description="名称/路径关键字"),
    menu_type: Optional[MenuType] = Query(None, alias="type", description="菜单类型"),
    status: Optional[MenuStatus] = Query(None, description="菜单状态"),
    parent_id: Optional[UUID] = Query(None, description="父菜单ID"),
    _=Depends(permission_checker(PermissionCode.MENU_READ.value)),
) -> Any:
    result = await menu_service.list_menus(
        page_query,
        keyword=keyword,
        menu_type=menu_type.value if menu_type else None,
        status=status.value if status else None,
        parent_id=parent_id,
    )
    return ApiResponse.success(data=result, msg="获取菜单列表成功")


@router.post("", response_model=ApiResponse, summary="创建菜单")
@permission(code=PermissionCode.MENU_CREATE.value, name="创建菜单")
@inject
async def create_menu(
    menu_in: MenuCreate,
    menu_service: MenuServiceDep,
    _=Depends(permission_checker(PermissionCode.MENU_CREATE.value)),
) -> Any:
    menu = await menu_service.create_menu(menu_in)
    return ApiResponse.success(data=menu, msg="菜单创建成功")


@router.get("/{menu_id}", response_model=ApiResponse, summary="获取菜单详情")
@permission(code=PermissionCode.MENU_READ.value, name="查看菜单")
@inject
async def get_menu(
    menu_id: UUID,
    menu_service: MenuServiceDep,
    _=Depends(permission_checker(PermissionCode.MENU_READ.value)),
) -> Any:
    return ApiResponse.success(data=await menu_service.get_menu(menu_id))


@router.put(
    "/{menu_id}",
    response_model=ApiResponse,
    summary="更新菜单",
    description="修改父菜单时校验父菜单存在且不会形成环"
)
@permission(code=PermissionCode.MENU_UPDATE.value, name="更新菜单")
@inject
async def update_menu(
    menu_id: UUID,
    menu_in: MenuUpdate,
    menu_service: MenuServiceDep,
    _=Depends(permission_checker(PermissionCode.MENU_UPDATE.value)),
) -> Any:
    menu = await menu_service.update_menu(menu_id, menu_in)
    return ApiResponse.success(data=menu, msg="菜单更新成功")


@router.delete(
    "/{menu_id}",
    response_model=ApiResponse,
    summary="删除菜单",
    description="""
    policy 指定存在子菜单时的处理方式，未指定时取配置 MENU_DELETE_POLICY：
    - block：存在子菜单时拒绝删除
    - reparent：子菜单提升为顶级菜单
    - cascade：删除整棵子树
    """
)
@permission(code=PermissionCode.MENU_DELETE.value, name="删除菜单")
@inject
async def delete_menu(
    menu_id: UUID,
    menu_service: MenuServiceDep,
    policy: Optional[Literal["block", "reparent", "cascade"]] = Query(None, description="子菜单处理方式"),
    _=Depends(permission_checker(PermissionCode.MENU_DELETE.value)),
) -> Any:
    result = await menu_service.delete_menu(menu_id, policy=policy)
    return ApiResponse.success(data=result, msg=result.message)
