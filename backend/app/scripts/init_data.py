"""
初始化基础数据
backend/app/scripts/init_data.py
上次更新：2026/3/2
用法：cd backend && python -m app.scripts.init_data
1. 建表（已存在的表跳过）
2. 同步系统声明的权限码
3. 初始化默认菜单（菜单表为空时）
4. 超级管理员角色：授予全部权限与菜单
5. 初始超级管理员账号（FIRST_SUPERUSER）
6. 默认数据字典
7. 默认邮件模板
脚本可重复执行，已存在的数据不会重复写入
"""
import asyncio
from typing import List, Optional
from uuid import UUID

import app.api  # noqa: F401  导入端点以注册权限声明
from app.core.config import init_global_logger, settings
from app.di.container import Container
from app.enums.sys_status import EmailTemplateType, MenuType, UserStatus
from app.models import Base, SysMenu, validate_models
from app.schemas.sys_dict import DictCreate
from app.schemas.sys_email_template import EmailTemplateCreate
from app.schemas.sys_menu import MenuCreate
from app.schemas.sys_role import RoleCreate
from app.schemas.sys_user import UserCreate
from app.utils.permission_decorators import get_declared_permissions

# 默认菜单：(名称, 路径, 组件, 图标, 类型, 关联权限, 子菜单)
DEFAULT_MENUS = [
    ("系统管理", "/system", "Layout", "system", MenuType.CATALOG, None, [
        ("用户管理", "user", "system/user/index", "user", MenuType.MENU, "user:read", []),
        ("角色管理", "role", "system/role/index", "role", MenuType.MENU, "role:read", []),
        ("权限管理", "permission", "system/permission/index", "lock", MenuType.MENU, "permission:read", []),
        ("菜单管理", "menu", "system/menu/index", "menu", MenuType.MENU, "menu:read", []),
        ("数据字典", "dict", "system/dict/index", "dict", MenuType.MENU, "dict:read", []),
        ("邮件模板", "email-template", "system/email-template/index", "email", MenuType.MENU,
         "email-template:read", []),
    ]),
    ("系统监控", "/monitor", "Layout", "monitor", MenuType.CATALOG, None, [
        ("监控指标", "metric", "monitor/metric/index", "chart", MenuType.MENU, "monitor:read", []),
        ("告警规则", "alert", "monitor/alert/index", "alert", MenuType.MENU, "alert:read", []),
    ]),
    ("消息通知", "/notification", "notification/index", "message", MenuType.MENU, None, []),
]

DEFAULT_DICTS = [
    DictCreate(dict_type="user_status", dict_code="active", dict_name="正常", sort_order=1),
    DictCreate(dict_type="user_status", dict_code="disabled", dict_name="停用", sort_order=2),
    DictCreate(dict_type="notification_type", dict_code="info", dict_name="信息", sort_order=1),
    DictCreate(dict_type="notification_type", dict_code="system", dict_name="系统", sort_order=2),
    DictCreate(dict_type="notification_type", dict_code="warning", dict_name="警告", sort_order=3),
    DictCreate(dict_type="notification_type", dict_code="error", dict_name="错误", sort_order=4),
    DictCreate(dict_type="notification_type", dict_code="success", dict_name="成功", sort_order=5),
    DictCreate(dict_type="alert_level", dict_code="info", dict_name="提示", sort_order=1),
    DictCreate(dict_type="alert_level", dict_code="warning", dict_name="警告", sort_order=2),
    DictCreate(dict_type="alert_level", dict_code="error", dict_name="错误", sort_order=3),
    DictCreate(dict_type="alert_level", dict_code="critical", dict_name="严重", sort_order=4),
]

DEFAULT_EMAIL_TEMPLATES = [
    EmailTemplateCreate(
        name="api_monitor_alert",
        subject="[接口告警] {{ monitorName }} 请求失败",
        content=(
            "<h2>接口监控告警</h2>"
            "<p>监控名称：{{ monitorName }}</p>"
            "<p>接口地址：{{ method }} {{ url }}</p>"
            "<p>状态码：{{ statusCode }}，响应时间：{{ responseTime }}</p>"
            "<p>错误信息：{{ errorMessage }}</p>"
            "<p>告警时间：{{ timestamp }}</p>"
        ),
        template_type=EmailTemplateType.API_MONITOR_ALERT,
        description="接口监控默认告警模板",
    ),
    EmailTemplateCreate(
        name="system_alert",
        subject="[{{ level }}] {{ ruleName }}",
        content=(
            "<h2>系统监控告警</h2>"
            "<p>规则：{{ ruleName }}</p>"
            "<p>指标：{{ metricName }} {{ condition }} {{ threshold }}，当前值 {{ currentValue }}</p>"
            "<p>{{ message }}</p>"
            "<p>告警时间：{{ timestamp }}</p>"
        ),
        template_type=EmailTemplateType.SYSTEM_ALERT,
        description="系统指标默认告警模板",
    ),
    EmailTemplateCreate(
        name="general_notification",
        subject="{{ title }}",
        content="<p>{% if userName %}{{ userName }}，您好：{% endif %}</p>{{ content }}<p>{{ timestamp }}</p>",
        template_type=EmailTemplateType.GENERAL_NOTIFICATION,
        description="通用通知模板",
    ),
]


async def init_tables(container: Container) -> None:
    print("🗄️ 检查数据表...")
    validate_models()
    async with container.async_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✅ 数据表就绪")


async def init_permissions(container: Container) -> List[UUID]:
    print("🔑 同步系统权限...")
    permission_service = await container.permission_service()
    created = await permission_service.sync_declared(get_declared_permissions())
    print(f"✅ 权限同步完成，新增 {len(created)} 条记录")

    permission_repository = container.permission_repository()
    return [p.id for p in await permission_repository.list_all()]


async def _create_menus(menu_service, items, parent_id: Optional[UUID]) -> int:
    count = 0
    for sort, (name, path, component, icon, menu_type, perm_code, children) in enumerate(items, start=1):
        menu = await menu_service.create_menu(MenuCreate(
            parent_id=parent_id,
            name=name,
            path=path,
            component=component,
            icon=icon,
            type=menu_type,
            sort=sort,
            permission_code=perm_code,
        ))
        count += 1 + await _create_menus(menu_service, children, menu.id)
    return count


async def init_menus(container: Container) -> List[UUID]:
    print("📁 初始化菜单数据...")
    menu_repository = container.menu_repository()
    existing: List[SysMenu] = await menu_repository.list_all()
    if existing:
        print(f"ℹ️ 菜单表已有 {len(existing)} 条记录，跳过")
    else:
        menu_service = await container.menu_service()
        added = await _create_menus(menu_service, DEFAULT_MENUS, None)
        print(f"✅ 菜单数据初始化完成，新增 {added} 条记录")
    return [m.id for m in await menu_repository.list_all()]


async def init_super_admin_role(container: Container, permission_ids: List[UUID], menu_ids: List[UUID]) -> UUID:
    print("👑 初始化超级管理员角色...")
    role_repository = container.role_repository()
    role_service = await container.role_service()

    role = await role_repository.find_alive_conflict(name=None, code=settings.SUPER_ADMIN_ROLE_CODE)
    if role is None:
        detail = await role_service.create_role(RoleCreate(
            name="超级管理员",
            code=settings.SUPER_ADMIN_ROLE_CODE,
            description="拥有系统全部权限",
            permission_ids=permission_ids,
            menu_ids=menu_ids,
        ))
        print(f"✅ 创建角色：{detail.code}")
        return detail.id

    # 已存在：补齐新增的权限与菜单
    await role_service.grant_permissions(role.id, permission_ids)
    await role_service.grant_menus(role.id, menu_ids)
    print(f"ℹ️ 角色 {role.code} 已存在，已补齐权限与菜单")
    return role.id


async def init_first_superuser(container: Container, role_id: UUID) -> None:
    print("👤 初始化超级管理员账号...")
    user_repository = container.user_repository()
    user = await user_repository.get_by_username(settings.FIRST_SUPERUSER, include_deleted=True)
    if user is not None:
        async with user_repository.transaction() as session:
            await user_repository.grant_roles(user.id, [role_id], session)
        print(f"ℹ️ 账号 {settings.FIRST_SUPERUSER} 已存在，跳过")
        return

    user_service = await container.user_service()
    await user_service.create_user(UserCreate(
        username=settings.FIRST_SUPERUSER,
        nickname="超级管理员",
        password=settings.FIRST_SUPERUSER_PASSWORD,
        status=UserStatus.ACTIVE,
        role_ids=[role_id],
    ))
    print(f"✅ 创建账号：{settings.FIRST_SUPERUSER}")


async def init_dicts(container: Container) -> int:
    print("📚 初始化数据字典...")
    dict_repository = container.dict_repository()
    dict_service = await container.dict_service()

    added_count = 0
    for item in DEFAULT_DICTS:
        if await dict_repository.get_by_type_and_code(item.dict_type, item.dict_code):
            continue
        await dict_service.create_dict(item)
        added_count += 1
    print(f"✅ 数据字典初始化完成，新增 {added_count} 条记录")
    return added_count


async def init_email_templates(container: Container) -> int:
    print("✉️ 初始化邮件模板...")
    template_repository = container.email_template_repository()
    template_service = container.email_template_service()

    added_count = 0
    for item in DEFAULT_EMAIL_TEMPLATES:
        if await template_repository.get_by_name(item.name):
            continue
        await template_service.create_template(item)
        added_count += 1
    print(f"✅ 邮件模板初始化完成，新增 {added_count} 条记录")
    return added_count


async def main() -> None:
    init_global_logger()
    container = Container()
    await container.init_resources()
    try:
        await init_tables(container)
        permission_ids = await init_permissions(container)
        menu_ids = await init_menus(container)
        role_id = await init_super_admin_role(container, permission_ids, menu_ids)
        await init_first_superuser(container, role_id)
        await init_dicts(container)
        await init_email_templates(container)
        print("🎉 基础数据初始化完成")
    finally:
        await container.shutdown_resources()
        await container.async_engine().dispose()


if __name__ == "__main__":
    asyncio.run(main())
