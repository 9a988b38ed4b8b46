"""
API 依赖项配置文件
backend/app/api/deps.py
"""
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import OAuth2PasswordRequestForm

from app.core.security import reusable_oauth2
from app.di.container import Container
from app.models import SysUser
from app.schemas.base import PageQuery
from app.services.sys_alert_service import AlertService
from app.services.sys_auth_service import AuthService
from app.services.sys_authorization_service import AuthorizationService
from app.services.sys_dict_service import DictService
from app.services.sys_email_template_service import EmailTemplateService
from app.services.sys_menu_service import MenuService
from app.services.sys_monitor_service import MonitorService
from app.services.sys_notification_service import NotificationService
from app.services.sys_permission_service import PermissionService
from app.services.sys_role_service import RoleService
from app.services.sys_user_service import UserService


# ------------------------------
# 认证依赖：获取当前用户（OAuth2）
# ------------------------------
@inject
async def get_current_user(
    token: str | None = Depends(reusable_oauth2),
    auth_service: AuthService = Depends(Provide[Container.auth_service]),
) -> SysUser:
    """从Token中解析用户：无效令牌401，账号停用403"""
    return await auth_service.get_current_user(token)


@inject
async def get_authorization_service(
    authorization_service: AuthorizationService = Depends(Provide[Container.authorization_service]),
) -> AuthorizationService:
    """供permission_checker等非端点依赖使用"""
    return authorization_service


# ------------------------------
# 类型别名（简化API层代码）
# ------------------------------
CurrentUser = Annotated[SysUser, Depends(get_current_user)]
PageQueryDep = Annotated[PageQuery, Depends()]
OAuth2FormDep = Annotated[OAuth2PasswordRequestForm, Depends()]
AuthorizationServiceDep = Annotated[AuthorizationService, Depends(get_authorization_service)]

# 依赖类型注解（端点需加 @inject）
AuthServiceDep = Annotated[AuthService, Depends(Provide[Container.auth_service])]
UserServiceDep = Annotated[UserService, Depends(Provide[Container.user_service])]
RoleServiceDep = Annotated[RoleService, Depends(Provide[Container.role_service])]
PermissionServiceDep = Annotated[PermissionService, Depends(Provide[Container.permission_service])]
MenuServiceDep = Annotated[MenuService, Depends(Provide[Container.menu_service])]
NotificationServiceDep = Annotated[NotificationService, Depends(Provide[Container.notification_service])]
DictServiceDep = Annotated[DictService, Depends(Provide[Container.dict_service])]
MonitorServiceDep = Annotated[MonitorService, Depends(Provide[Container.monitor_service])]
AlertServiceDep = Annotated[AlertService, Depends(Provide[Container.alert_service])]
EmailTemplateServiceDep = Annotated[EmailTemplateService, Depends(Provide[Container.email_template_service])]
