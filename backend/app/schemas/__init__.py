# 功能：统一导出所有Schema模型，对外提供一致的导入入口
# 文件相对项目根目录路径：backend/app/schemas/__init__.py
# 上次更新：2026/3/2（新增菜单、授权结果、通知、字典、监控告警Schema导出）
from app.schemas.base import BaseSchema, TimestampSchema, IDSchema, PageQuery, PageResult
from app.schemas.responses import ApiResponse, ErrorResponse, ResponseCode
from app.schemas.sys_permission import (
    PermissionBase, PermissionCreate, PermissionUpdate, PermissionOut, PermissionGroup
)
from app.schemas.sys_menu import MenuBase, MenuCreate, MenuUpdate, MenuOut, MenuNode
from app.schemas.sys_role import (
    RoleBase, RoleCreate, RoleUpdate, RoleOut, RoleDetail, RoleOption
)
from app.schemas.sys_user import (
    UserBase, UserCreate, UserUpdate, UserOut, UserWithRoles, RoleBrief, UpdatePassword,
    Token, TokenPayload, Message
)
from app.schemas.sys_relationship import (
    UserRoleAssignment, RolePermissionAssignment, RoleMenuAssignment
)
from app.schemas.sys_authorization import AuthorizationPayload
from app.schemas.sys_notification import (
    NotificationContent, NotificationSend, NotificationBroadcast,
    NotificationOut, NotificationStats
)
from app.schemas.sys_dict import DictBase, DictCreate, DictUpdate, DictOut
from app.schemas.sys_monitor import (
    MetricCreate, MetricOut, MetricSummary,
    AlertRuleBase, AlertRuleCreate, AlertRuleUpdate, AlertRuleOut,
    AlertHistoryOut, AlertCheckResult
)

__all__ = [
    # Base
    'BaseSchema', 'TimestampSchema', 'IDSchema', 'PageQuery', 'PageResult',
    'ApiResponse', 'ErrorResponse', 'ResponseCode',

    # Permission
    'PermissionBase', 'PermissionCreate', 'PermissionUpdate', 'PermissionOut', 'PermissionGroup',

    # Menu
    'MenuBase', 'MenuCreate', 'MenuUpdate', 'MenuOut', 'MenuNode',

    # Role
    'RoleBase', 'RoleCreate', 'RoleUpdate', 'RoleOut', 'RoleDetail', 'RoleOption',

    # User
    'UserBase', 'UserCreate', 'UserUpdate', 'UserOut', 'UserWithRoles', 'RoleBrief', 'UpdatePassword',
    'Token', 'TokenPayload', 'Message',

    # Relationship
    'UserRoleAssignment', 'RolePermissionAssignment', 'RoleMenuAssignment',

    # Authorization
    'AuthorizationPayload',

    # Notification
    'NotificationContent', 'NotificationSend', 'NotificationBroadcast',
    'NotificationOut', 'NotificationStats',

    # Dict
    'DictBase', 'DictCreate', 'DictUpdate', 'DictOut',

    # Monitor / Alert
    'MetricCreate', 'MetricOut', 'MetricSummary',
    'AlertRuleBase', 'AlertRuleCreate', 'AlertRuleUpdate', 'AlertRuleOut',
    'AlertHistoryOut', 'AlertCheckResult',
]
