"""
登录接口文件
backend/app/api/v1/endpoints/login.py
上次更新：2026/3/2
"""
from typing import Any

from dependency_injector.wiring import inject
from pydantic import BaseModel, Field

from fastapi import APIRouter

from app.api.deps import AuthServiceDep, CurrentUser, OAuth2FormDep
from app.schemas.responses import ApiResponse
from app.schemas.sys_user import Token, UserOut

router = APIRouter(tags=["login"])


# 前端登录请求模型（JSON方式）
class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=40)


@router.post("/login/access-token", response_model=Token)
@inject
async def login_access_token(
    form_data: OAuth2FormDep,
    auth_service: AuthServiceDep,
) -> Token:
    """OAuth2 表单登录（供Swagger授权使用），直接返回Token"""
    return await auth_service.login(form_data.username, form_data.password)


@router.post("/login", response_model=ApiResponse)
@inject
async def login(
    login_request: LoginRequest,
    auth_service: AuthServiceDep,
) -> Any:
    """
    前端登录接口
    用户名或密码错误返回400，账号停用返回403
    """
    token = await auth_service.login(login_request.username, login_request.password)
    return ApiResponse.success(data=token, msg="登录成功")


@router.post("/login/test-token", response_model=ApiResponse)
async def test_token(current_user: CurrentUser) -> Any:
    """测试Token有效性"""
    return ApiResponse.success(data=UserOut.model_validate(current_user))
