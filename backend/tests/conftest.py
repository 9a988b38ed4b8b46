"""
测试公共夹具
backend/tests/conftest.py
- 每个用例独立的内存SQLite（aiosqlite + StaticPool），用例间数据互不影响
- Repository/Service直接组装，Redis使用进程内假客户端
"""
import os
from typing import AsyncGenerator, Dict, Optional

# 在导入app之前设置测试环境变量
os.environ["ENV_FILE_PATH"] = "/nonexistent/.env"
os.environ["SQLALCHEMY_DATABASE_URI_OVERRIDE"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_TO_FILE_FLAG"] = "false"
os.environ["AUTH_CACHE_TTL"] = "600"
os.environ["MENU_ORPHAN_POLICY"] = "include_ancestors"
os.environ["MENU_DELETE_POLICY"] = "block"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core.database import create_async_engine_safe  # noqa: E402
from app.enums.sys_status import MenuType  # noqa: E402
from app.models import Base  # noqa: E402
from app.repositories.sys_alert_repository import AlertRepository  # noqa: E402
from app.repositories.sys_auth_version_repository import AuthVersionRepository  # noqa: E402
from app.repositories.sys_dict_repository import DictRepository  # noqa: E402
from app.repositories.sys_email_template_repository import EmailTemplateRepository  # noqa: E402
from app.repositories.sys_menu_repository import MenuRepository  # noqa: E402
from app.repositories.sys_monitor_metric_repository import MonitorMetricRepository  # noqa: E402
from app.repositories.sys_notification_repository import NotificationRepository  # noqa: E402
from app.repositories.sys_permission_repository import PermissionRepository  # noqa: E402
from app.repositories.sys_role_repository import RoleRepository  # noqa: E402
from app.repositories.sys_user_repository import UserRepository  # noqa: E402
from app.schemas.sys_menu import MenuCreate  # noqa: E402
from app.schemas.sys_permission import PermissionCreate  # noqa: E402
from app.schemas.sys_role import RoleCreate  # noqa: E402
from app.schemas.sys_user import UserCreate  # noqa: E402
from app.services.redis_service import RedisService  # noqa: E402
from app.services.sys_alert_service import AlertService  # noqa: E402
from app.services.sys_auth_service import AuthService  # noqa: E402
from app.services.sys_authorization_service import AuthorizationService  # noqa: E402
from app.services.sys_dict_service import DictService  # noqa: E402
from app.services.sys_email_template_service import EmailTemplateService  # noqa: E402
from app.services.sys_menu_service import MenuService  # noqa: E402
from app.services.sys_monitor_service import MonitorService  # noqa: E402
from app.services.sys_notification_service import NotificationService  # noqa: E402
from app.services.sys_permission_service import PermissionService  # noqa: E402
from app.services.sys_role_service import RoleService  # noqa: E402
from app.services.sys_user_service import UserService  # noqa: E402

DEFAULT_PASSWORD = "secret123"


class FakeRedis:
    """进程内Redis替身：只实现RedisService用到的命令"""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.available = True

    def _check(self):
        if not self.available:
            from redis.exceptions import ConnectionError
            raise ConnectionError("fake redis unavailable")

    async def get(self, key):
        self._check()
        return self.store.get(key)

    async def set(self, key, value):
        self._check()
        self.store[key] = value
        return True

    async def setex(self, key, seconds, value):
        self._check()
        self.store[key] = value
        return True

    async def delete(self, *keys):
        self._check()
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def ping(self):
        self._check()
        return True


# =========================================
# 数据库
# =========================================
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine_safe("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def redis_service(fake_redis: FakeRedis) -> RedisService:
    return RedisService(fake_redis)


# =========================================
# Repository
# =========================================
@pytest.fixture
def user_repository(session_factory):
    return UserRepository(async_session_factory=session_factory)


@pytest.fixture
def role_repository(session_factory):
    return RoleRepository(async_session_factory=session_factory)


@pytest.fixture
def permission_repository(session_factory):
    return PermissionRepository(async_session_factory=session_factory)


@pytest.fixture
def menu_repository(session_factory):
    return MenuRepository(async_session_factory=session_factory)


@pytest.fixture
def notification_repository(session_factory):
    return NotificationRepository(async_session_factory=session_factory)


@pytest.fixture
def dict_repository(session_factory):
    return DictRepository(async_session_factory=session_factory)


@pytest.fixture
def metric_repository(session_factory):
    return MonitorMetricRepository(async_session_factory=session_factory)


@pytest.fixture
def alert_repository(session_factory):
    return AlertRepository(async_session_factory=session_factory)


@pytest.fixture
def auth_version_repository(session_factory):
    return AuthVersionRepository(async_session_factory=session_factory)


@pytest.fixture
def email_template_repository(session_factory):
    return EmailTemplateRepository(async_session_factory=session_factory)


# =========================================
# Service
# =========================================
@pytest.fixture
def authorization_service(
    user_repository, role_repository, permission_repository, menu_repository, redis_service, auth_version_repository
):
    return AuthorizationService(
        user_repository=user_repository,
        role_repository=role_repository,
        permission_repository=permission_repository,
        menu_repository=menu_repository,
        redis_service=redis_service,
        auth_version_repository=auth_version_repository,
    )


@pytest.fixture
def auth_service(user_repository):
    return AuthService(user_repository=user_repository)


@pytest.fixture
def user_service(user_repository, role_repository, authorization_service):
    return UserService(
        user_repository=user_repository,
        role_repository=role_repository,
        authorization_service=authorization_service,
    )


@pytest.fixture
def role_service(role_repository, permission_repository, menu_repository, authorization_service):
    return RoleService(
        role_repository=role_repository,
        permission_repository=permission_repository,
        menu_repository=menu_repository,
        authorization_service=authorization_service,
    )


@pytest.fixture
def permission_service(permission_repository, authorization_service):
    return PermissionService(permission_repository=permission_repository, authorization_service=authorization_service)


@pytest.fixture
def menu_service(menu_repository, authorization_service):
    return MenuService(menu_repository=menu_repository, authorization_service=authorization_service)


@pytest.fixture
def notification_service(notification_repository, user_repository):
    return NotificationService(notification_repository=notification_repository, user_repository=user_repository)


@pytest.fixture
def dict_service(dict_repository, redis_service):
    return DictService(dict_repository=dict_repository, redis_service=redis_service)


@pytest.fixture
def email_template_service(email_template_repository):
    return EmailTemplateService(email_template_repository=email_template_repository)


@pytest.fixture
def monitor_service(metric_repository):
    return MonitorService(metric_repository=metric_repository)


@pytest.fixture
def alert_service(alert_repository, metric_repository, user_repository, notification_service):
    return AlertService(
        alert_repository=alert_repository,
        metric_repository=metric_repository,
        user_repository=user_repository,
        notification_service=notification_service,
    )


# =========================================
# 数据构造
# =========================================
@pytest.fixture
def make_user(user_service):
    async def _make(username: str, role_ids=None, password: str = DEFAULT_PASSWORD, **kwargs):
        return await user_service.create_user(
            UserCreate(username=username, password=password, role_ids=role_ids or [], **kwargs)
        )
    return _make


@pytest.fixture
def make_permission(permission_service):
    async def _make(code: str, name: Optional[str] = None, **kwargs):
        return await permission_service.create_permission(
            PermissionCreate(code=code, name=name or code, **kwargs)
        )
    return _make


@pytest.fixture
def make_menu(menu_service):
    async def _make(name: str, parent_id=None, sort: int = 0, menu_type: MenuType = MenuType.MENU, **kwargs):
        return await menu_service.create_menu(
            MenuCreate(name=name, parent_id=parent_id, sort=sort, type=menu_type, **kwargs)
        )
    return _make


@pytest.fixture
def make_role(role_service):
    async def _make(code: str, name: Optional[str] = None, permission_ids=None, menu_ids=None, **kwargs):
        return await role_service.create_role(RoleCreate(
            code=code,
            name=name or code,
            permission_ids=permission_ids or [],
            menu_ids=menu_ids or [],
            **kwargs,
        ))
    return _make
