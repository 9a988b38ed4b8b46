"""
邮件模板API端点
backend/app/api/v1/endpoints/email_templates.py
"""
from typing import Any, Optional
from uuid import UUID

from dependency_injector.wiring import inject
from fastapi import APIRouter, Depends, Query

from app.api.deps import EmailTemplateServiceDep, PageQueryDep
from app.enums.sys_permissions import PermissionCode
from app.enums.sys_status import EmailTemplateType
from app.schemas.responses import ApiResponse
from app.schemas.sys_email_template import EmailTemplateCreate, EmailTemplateUpdate, TemplateRenderRequest
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/email-templates", tags=["email-templates"])


@router.get("", response_model=ApiResponse, summary="分页获取邮件模板列表")
@permission(code=PermissionCode.EMAIL_TEMPLATE_READ.value, name="查看邮件模板")
@inject
async def list_templates(
    page_query: PageQueryDep,
    email_template_service: EmailTemplateServiceDep,
    keyword: Optional[str] = Query(None, description="名称/主题关键字"),
    template_type: Optional[EmailTemplateType] = Query(None, description="模板类型"),
    _=Depends(permission_checker(PermissionCode.EMAIL_TEMPLATE_READ.value)),
) -> Any:
    result = await email_template_service.list_templates(
        page_query, keyword=keyword, template_type=template_type.value if template_type else None
    )
    return ApiResponse.success(data=result, msg="获取邮件模板列表成功")


@router.get("/types", response_model=ApiResponse, summary="模板类型及其标准变量")
@permission(code=PermissionCode.EMAIL_TEMPLATE_READ.value, name="查看邮件模板")
@inject
async def list_template_types(
    email_template_service: EmailTemplateServiceDep,
    _=Depends(permission_checker(PermissionCode.EMAIL_TEMPLATE_READ.value)),
) -> Any:
    return ApiResponse.success(data=email_template_service.list_template_types())


@router.post("", response_model=ApiResponse, summary="创建邮件模板")
@permission(code=PermissionCode.EMAIL_TEMPLATE_CREATE.value, name="创建邮件模板")
@inject
async def create_template(
    template_in: EmailTemplateCreate,
    email_template_service: EmailTemplateServiceDep,
    _=Depends(permission_checker(PermissionCode.EMAIL_TEMPLATE_CREATE.value)),
) -> Any:
    """
    variable_schema 为空时按 template_type 填充标准变量；
    主题与内容只能引用已声明的变量，否则返回422
    """
    template = await email_template_service.create_template(template_in)
    return ApiResponse.success(data=template, msg="邮件模板创建成功")


@router.get("/{template_id}", response_model=ApiResponse, summary="获取邮件模板详情")
@permission(code=PermissionCode.EMAIL_TEMPLATE_READ.value, name="查看邮件模板")
@inject
async def get_template(
    template_id: UUID,
    email_template_service: EmailTemplateServiceDep,
    _=Depends(permission_checker(PermissionCode.EMAIL_TEMPLATE_READ.value)),
) -> Any:
    return ApiResponse.success(data=await email_template_service.get_template(template_id))


@router.put("/{template_id}", response_model=ApiResponse, summary="更新邮件模板")
@permission(code=PermissionCode.EMAIL_TEMPLATE_UPDATE.value, name="更新邮件模板")
@inject
async def update_template(
    template_id: UUID,
    template_in: EmailTemplateUpdate,
    email_template_service: EmailTemplateServiceDep,
    _=Depends(permission_checker(PermissionCode.EMAIL_TEMPLATE_UPDATE.value)),
) -> Any:
    template = await email_template_service.update_template(template_id, template_in)
    return ApiResponse.success(data=template, msg="邮件模板更新成功")


@router.delete("/{template_id}", response_model=ApiResponse, summary="删除邮件模板")
@permission(code=PermissionCode.EMAIL_TEMPLATE_DELETE.value, name="删除邮件模板")
@inject
async def delete_template(
    template_id: UUID,
    email_template_service: EmailTemplateServiceDep,
    _=Depends(permission_checker(PermissionCode.EMAIL_TEMPLATE_DELETE.value)),
) -> Any:
    result = await email_template_service.delete_template(template_id)
    return ApiResponse.success(data=result, msg=result.message)


@router.post("/{template_id}/render", response_model=ApiResponse, summary="渲染邮件模板")
@permission(code=PermissionCode.EMAIL_TEMPLATE_READ.value, name="查看邮件模板")
@inject
async def render_template(
    template_id: UUID,
    render_in: TemplateRenderRequest,
    email_template_service: EmailTemplateServiceDep,
    _=Depends(permission_checker(PermissionCode.EMAIL_TEMPLATE_READ.value)),
) -> Any:
    """缺少必填变量返回422"""
    rendered = await email_template_service.render_template(template_id, render_in.variables)
    return ApiResponse.success(data=rendered)


@router.post("/{template_id}/preview", response_model=ApiResponse, summary="预览邮件模板")
@permission(code=PermissionCode.EMAIL_TEMPLATE_READ.value, name="查看邮件模板")
@inject
async def preview_template(
    template_id: UUID,
    email_template_service: EmailTemplateServiceDep,
    render_in: Optional[TemplateRenderRequest] = None,
    _=Depends(permission_checker(PermissionCode.EMAIL_TEMPLATE_READ.value)),
) -> Any:
    variables = render_in.variables if render_in else {}
    rendered = await email_template_service.preview_template(template_id, variables)
    return ApiResponse.success(data=rendered)
