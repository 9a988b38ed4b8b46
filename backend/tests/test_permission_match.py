"""
测试权限码匹配与通配符
"""
from app.utils.permission_match import desensitize_user_id, generate_permission_wildcards, match_permission


def test_generate_wildcards_two_parts():
    assert generate_permission_wildcards("user:read") == ["user:read", "user:*"]


def test_generate_wildcards_three_parts():
    assert generate_permission_wildcards("system:user:read") == [
        "system:user:read", "system:user:*", "system:*:*"
    ]


def test_generate_wildcards_invalid():
    """无冒号的权限码只匹配自身，空权限码不匹配任何权限"""
    assert generate_permission_wildcards("dashboard") == ["dashboard"]
    assert generate_permission_wildcards("") == []


def test_match_permission():
    assert match_permission(["user:read"], "user:read")
    assert match_permission(["user:*"], "user:delete")
    assert match_permission(["*"], "anything:at:all")
    assert not match_permission(["user:read"], "user:update")
    assert not match_permission([], "user:read")


def test_desensitize_user_id():
    uid = "0f8fad5b-d9cb-469f-a165-70867728950e"
    assert desensitize_user_id(uid) == "0f8fad...950e"
    assert len(desensitize_user_id("short")) == 8


def test_declared_permissions():
    """端点装饰器注册的权限与枚举合并，按code排序且不重复"""
    import app.api  # noqa: F401
    from app.api.v1.endpoints.roles import list_roles
    from app.enums.sys_permissions import PermissionCode
    from app.utils.permission_decorators import (
        get_declared_permissions, get_endpoint_permissions, get_permission_registry
    )

    declared = get_declared_permissions()
    codes = [item["code"] for item in declared]

    assert codes == sorted(set(codes))
    assert {p.value for p in PermissionCode} <= set(codes)
    assert "role:read" in get_permission_registry()
    assert [p["code"] for p in get_endpoint_permissions(list_roles)] == ["role:read"]
