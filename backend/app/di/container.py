"""
DI容器
项目核心框架文件
backend/app/di/container.py
上次更新：2026/3/2
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import redis.asyncio as redis
from dependency_injector import containers, providers
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.database import create_async_engine_safe
from app.repositories.sys_alert_repository import AlertRepository
from app.repositories.sys_auth_version_repository import AuthVersionRepository
from app.repositories.sys_dict_repository import DictRepository
from app.repositories.sys_email_template_repository import EmailTemplateRepository
from app.repositories.sys_menu_repository import MenuRepository
from app.repositories.sys_monitor_metric_repository import MonitorMetricRepository
from app.repositories.sys_notification_repository import NotificationRepository
from app.repositories.sys_permission_repository import PermissionRepository
from app.repositories.sys_role_repository import RoleRepository
from app.repositories.sys_user_repository import UserRepository
from app.services.redis_service import RedisService
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

logger = logging.getLogger(__name__)


# Redis连接工厂：连接失败时返回None，缓存整体降级
@asynccontextmanager
async def redis_client_factory() -> AsyncGenerator[Optional[redis.Redis], None]:
    """Redis客户端工厂（异步）"""
    redis_client = redis.from_url(
        settings.REDIS_URL,
        encoding=settings.REDIS_ENCODING,
        decode_responses=settings.REDIS_DECODE_RESPONSES,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        socket_keepalive=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_CONNECT_TIMEOUT,
    )
    try:
        await redis_client.ping()
    except (RedisError, OSError) as e:
        logger.warning(f"Redis连接失败，授权缓存已禁用 | 地址：{settings.REDIS_HOST}:{settings.REDIS_PORT} | 错误：{e}")
        await redis_client.aclose()
        yield None
        return

    try:
        yield redis_client
    finally:
        await redis_client.aclose()


class Container(containers.DeclarativeContainer):
    # 1. 底层：数据库引擎（单例，全局唯一）
    async_engine = providers.Singleton(
        create_async_engine_safe,
        settings.SQLALCHEMY_DATABASE_URI,
        echo=settings.DB_ECHO,
    )

    # 2. 异步Redis客户端（Resource）与Redis服务
    redis_client = providers.Resource(redis_client_factory)
    redis_service = providers.Singleton(RedisService, redis_client=redis_client)

    # 3. 中层：会话工厂（单例，全局唯一），Repo在自己的事务上下文中创建会话
    async_session_factory = providers.Singleton(
        sessionmaker,
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )

    # 4. Repo层：注入会话工厂
    user_repository = providers.Factory(UserRepository, async_session_factory=async_session_factory)
    role_repository = providers.Factory(RoleRepository, async_session_factory=async_session_factory)
    permission_repository = providers.Factory(PermissionRepository, async_session_factory=async_session_factory)
    menu_repository = providers.Factory(MenuRepository, async_session_factory=async_session_factory)
    notification_repository = providers.Factory(NotificationRepository, async_session_factory=async_session_factory)
    dict_repository = providers.Factory(DictRepository, async_session_factory=async_session_factory)
    metric_repository = providers.Factory(MonitorMetricRepository, async_session_factory=async_session_factory)
    alert_repository = providers.Factory(AlertRepository, async_session_factory=async_session_factory)
    auth_version_repository = providers.Factory(AuthVersionRepository, async_session_factory=async_session_factory)
    email_template_repository = providers.Factory(EmailTemplateRepository, async_session_factory=async_session_factory)

    # 5. Service层
    authorization_service = providers.Factory(
        AuthorizationService,
        user_repository=user_repository,
        role_repository=role_repository,
        permission_repository=permission_repository,
        menu_repository=menu_repository,
        redis_service=redis_service,
        auth_version_repository=auth_version_repository,
    )
    auth_service = providers.Factory(AuthService, user_repository=user_repository)
    user_service = providers.Factory(
        UserService,
        user_repository=user_repository,
        role_repository=role_repository,
        authorization_service=authorization_service,
    )
    role_service = providers.Factory(
        RoleService,
        role_repository=role_repository,
        permission_repository=permission_repository,
        menu_repository=menu_repository,
        authorization_service=authorization_service,
    )
    permission_service = providers.Factory(
        PermissionService,
        permission_repository=permission_repository,
        authorization_service=authorization_service,
    )
    menu_service = providers.Factory(
        MenuService,
        menu_repository=menu_repository,
        authorization_service=authorization_service,
    )
    notification_service = providers.Factory(
        NotificationService,
        notification_repository=notification_repository,
        user_repository=user_repository,
    )
    dict_service = providers.Factory(DictService, dict_repository=dict_repository, redis_service=redis_service)
    email_template_service = providers.Factory(EmailTemplateService, email_template_repository=email_template_repository)
    monitor_service = providers.Factory(MonitorService, metric_repository=metric_repository)
    alert_service = providers.Factory(
        AlertService,
        alert_repository=alert_repository,
        metric_repository=metric_repository,
        user_repository=user_repository,
        notification_service=notification_service,
    )

    # 6. 模块扫描：所有使用 Provide 的模块
    wiring_config = containers.WiringConfiguration(
        modules=[
            "app.api.deps",
            "app.api.v1.endpoints.login",
            "app.api.v1.endpoints.users",
            "app.api.v1.endpoints.roles",
            "app.api.v1.endpoints.permissions",
            "app.api.v1.endpoints.menus",
            "app.api.v1.endpoints.notifications",
            "app.api.v1.endpoints.dicts",
            "app.api.v1.endpoints.monitor",
            "app.api.v1.endpoints.alerts",
            "app.api.v1.endpoints.email_templates",
        ]
    )
