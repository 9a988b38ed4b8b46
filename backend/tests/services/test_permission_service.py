"""
测试权限Service：编码唯一、资源/操作拆分、引用检查、声明同步
"""
import pytest

from app.core.exceptions import Conflict
from app.schemas.sys_permission import PermissionUpdate


class TestPermissionService:

    async def test_create_splits_code(self, make_permission):
        perm = await make_permission("user:read", category="用户")

        assert perm.resource == "user"
        assert perm.action == "read"

    async def test_duplicate_code(self, make_permission):
        await make_permission("user:read")

        with pytest.raises(Conflict):
            await make_permission("user:read")

    async def test_update_code_conflict(self, permission_service, make_permission):
        await make_permission("user:read")
        other = await make_permission("user:update")

        with pytest.raises(Conflict):
            await permission_service.update_permission(other.id, PermissionUpdate(code="user:read"))

    async def test_delete_in_use(self, permission_service, make_permission, make_role):
        perm = await make_permission("user:read")
        await make_role("viewer", permission_ids=[perm.id])

        with pytest.raises(Conflict):
            await permission_service.delete_permission(perm.id)

    async def test_grouped_and_distinct(self, permission_service, make_permission):
        await make_permission("user:read", category="用户")
        await make_permission("role:read", category="角色")
        await make_permission("misc:run")

        groups = await permission_service.list_grouped()

        assert sorted(g.category for g in groups) == sorted(["用户", "角色", "其他"])
        assert await permission_service.list_resources() == ["misc", "role", "user"]
        assert await permission_service.list_actions() == ["read", "run"]

    async def test_sync_declared(self, permission_service, make_permission):
        await make_permission("user:read", name="人工命名")
        declared = [
            {"code": "user:read", "name": "查看用户", "category": "用户"},
            {"code": "user:create", "name": "创建用户", "category": "用户"},
        ]

        created = await permission_service.sync_declared(declared)
        again = await permission_service.sync_declared(declared)

        assert created == ["user:create"]
        assert again == []
