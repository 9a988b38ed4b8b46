"""
权限枚举文件
backend/app/enums/sys_permissions.py
上次更新：2026/3/2
说明：权限码统一为 resource:action，支持 resource:* 通配
"""
from enum import Enum


class PermissionCode(Enum):
    """
    系统权限枚举类
    每个枚举值格式: (权限代码, 显示名称, 分类)
    """

    def __new__(cls, code: str, name: str, category: str):
        obj = object.__new__(cls)
        obj._value_ = code
        obj.display_name = name
        obj.category = category
        return obj

    # 用户管理
    USER_READ = ("user:read", "查看用户", "用户管理")
    USER_CREATE = ("user:create", "创建用户", "用户管理")
    USER_UPDATE = ("user:update", "更新用户", "用户管理")
    USER_DELETE = ("user:delete", "删除用户", "用户管理")
    USER_ASSIGN_ROLE = ("user:assign-role", "分配角色", "用户管理")

    # 角色管理
    ROLE_READ = ("role:read", "查看角色", "角色管理")
    ROLE_CREATE = ("role:create", "创建角色", "角色管理")
    ROLE_UPDATE = ("role:update", "更新角色", "角色管理")
    ROLE_DELETE = ("role:delete", "删除角色", "角色管理")

    # 权限管理
    PERMISSION_READ = ("permission:read", "查看权限", "权限管理")
    PERMISSION_CREATE = ("permission:create", "创建权限", "权限管理")
    PERMISSION_UPDATE = ("permission:update", "更新权限", "权限管理")
    PERMISSION_DELETE = ("permission:delete", "删除权限", "权限管理")

    # 菜单管理
    MENU_READ = ("menu:read", "查看菜单", "菜单管理")
    MENU_CREATE = ("menu:create", "创建菜单", "菜单管理")
    MENU_UPDATE = ("menu:update", "更新菜单", "菜单管理")
    MENU_DELETE = ("menu:delete", "删除菜单", "菜单管理")

    # 通知
    NOTIFICATION_SEND = ("notification:send", "发送通知", "通知管理")

    # 数据字典
    DICT_READ = ("dict:read", "查看数据字典", "系统配置")
    DICT_CREATE = ("dict:create", "创建数据字典", "系统配置")
    DICT_UPDATE = ("dict:update", "更新数据字典", "系统配置")
    DICT_DELETE = ("dict:delete", "删除数据字典", "系统配置")

    # 邮件模板
    EMAIL_TEMPLATE_READ = ("email-template:read", "查看邮件模板", "系统配置")
    EMAIL_TEMPLATE_CREATE = ("email-template:create", "创建邮件模板", "系统配置")
    EMAIL_TEMPLATE_UPDATE = ("email-template:update", "更新邮件模板", "系统配置")
    EMAIL_TEMPLATE_DELETE = ("email-template:delete", "删除邮件模板", "系统配置")

    # 监控告警
    MONITOR_READ = ("monitor:read", "查看监控指标", "系统监控")
    MONITOR_WRITE = ("monitor:write", "上报监控指标", "系统监控")
    ALERT_READ = ("alert:read", "查看告警", "系统监控")
    ALERT_MANAGE = ("alert:manage", "管理告警规则", "系统监控")

    @property
    def resource(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(":", 1)[1]
