"""
模型统一导出入口
作用：
1. 集中管理所有模型导入，按SQLAlchemy依赖顺序导入，避免循环依赖
2. 统一导出所有模型和关联表，业务层统一 from app.models import SysUser

backend/app/models/__init__.py
上次更新：2026/3/2
"""
from app.models.base import Base

# 底层模型：无前置依赖
from app.models.sys_permission import SysPermission
from app.models.sys_menu import SysMenu
# 角色：依赖权限、菜单
from app.models.sys_role import SysRole, sys_role_menu, sys_role_permission
# 用户：依赖角色
from app.models.sys_user import SysUser, sys_user_role
# 业务模型
from app.models.sys_notification import SysNotification
from app.models.sys_dict import SysDict
from app.models.sys_email_template import SysEmailTemplate
from app.models.sys_monitor_metric import SysMonitorMetric
from app.models.sys_alert import SysAlertRule, SysAlertHistory
from app.models.sys_auth_version import SysAuthVersion

__all__ = [
    # 基础类
    'Base',
    # 核心模型（按导入顺序）
    'SysPermission',
    'SysMenu',
    'SysRole',
    'SysUser',
    'SysNotification',
    'SysDict',
    'SysEmailTemplate',
    'SysMonitorMetric',
    'SysAlertRule',
    'SysAlertHistory',
    'SysAuthVersion',
    # 中间表
    'sys_role_menu',
    'sys_role_permission',
    'sys_user_role',
]


def validate_models() -> None:
    """
    校验导出的模型类都继承自Base（中间表为Table实例，跳过）
    """
    module_globals = globals()
    for model_name in __all__:
        if model_name == 'Base':
            continue
        if model_name not in module_globals:
            raise RuntimeError(f"导出列表中的 {model_name} 未在模块中定义，请检查导入语句是否正确")
        model = module_globals[model_name]
        if isinstance(model, type) and not issubclass(model, Base):
            raise RuntimeError(f"模型 {model_name} 未正确继承Base基类！所有业务模型必须继承Base")
