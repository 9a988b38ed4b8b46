"""
权限声明装饰器：只给端点附加权限元数据，不包装函数，避免与依赖注入冲突
backend/app/utils/permission_decorators.py
上次更新：2026/3/2
"""
from typing import Any, Callable, Dict, List, Optional

from app.enums.sys_permissions import PermissionCode

# 全局权限注册表 {code: 元数据}
_permission_registry: Dict[str, Dict[str, Any]] = {}


def permission(
        code: str,
        name: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
        auto_register: bool = True
):
    """
    权限声明装饰器
    未指定category时取PermissionCode中的分类
    """

    def decorator(func: Callable) -> Callable:
        if not hasattr(func, '__api_permissions__'):
            func.__api_permissions__ = []

        resolved_category = category
        if resolved_category is None:
            try:
                resolved_category = PermissionCode(code).category
            except ValueError:
                resolved_category = "api"

        permission_data = {
            'code': code,
            'name': name,
            'description': description,
            'category': resolved_category,
            'auto_register': auto_register,
            'endpoint': f"{func.__module__}.{func.__qualname__}"
        }

        func.__api_permissions__.append(permission_data)

        if auto_register:
            _permission_registry[code] = permission_data

        return func

    return decorator


def get_permission_registry() -> Dict[str, Dict[str, Any]]:
    """获取全局权限注册表"""
    return _permission_registry.copy()


def get_endpoint_permissions(func: Callable) -> List[Dict[str, Any]]:
    """获取端点声明的权限"""
    return getattr(func, '__api_permissions__', [])


def get_declared_permissions() -> List[Dict[str, Any]]:
    """
    系统声明的全部权限：PermissionCode枚举 + 端点装饰器注册表
    同一code以枚举定义为准，按code排序
    """
    declared: Dict[str, Dict[str, Any]] = {}
    for code, data in _permission_registry.items():
        declared[code] = {
            'code': code,
            'name': data['name'],
            'category': data['category'],
            'description': data['description'],
        }
    for item in PermissionCode:
        declared[item.value] = {
            'code': item.value,
            'name': item.display_name,
            'category': item.category,
            'description': None,
        }
    return [declared[code] for code in sorted(declared)]
