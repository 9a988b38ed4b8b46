"""
测试角色Service：唯一性、授权写入、软删除与恢复
"""
from uuid import uuid4

import pytest

from app.core.exceptions import Conflict, ResourceNotFound, ValidationFailed
from app.schemas.base import PageQuery
from app.schemas.sys_role import RoleCreate, RoleUpdate


class TestRoleCrud:

    async def test_create_with_grants(self, role_service, make_permission, make_menu):
        perm = await make_permission("user:read")
        menu = await make_menu("Users")

        role = await role_service.create_role(RoleCreate(
            name="管理员", code="admin", permission_ids=[perm.id, perm.id], menu_ids=[menu.id]
        ))

        assert role.permission_ids == [perm.id]
        assert role.menu_ids == [menu.id]

    async def test_duplicate_name_or_code(self, role_service, make_role):
        await make_role("admin", name="管理员")

        with pytest.raises(Conflict):
            await role_service.create_role(RoleCreate(name="管理员", code="other"))
        with pytest.raises(Conflict):
            await role_service.create_role(RoleCreate(name="其他", code="admin"))

    async def test_unknown_permission(self, role_service):
        with pytest.raises(ValidationFailed):
            await role_service.create_role(RoleCreate(name="x", code="x", permission_ids=[uuid4()]))

    async def test_update_replaces_grants(self, role_service, make_role, make_permission):
        p1 = await make_permission("a:read")
        p2 = await make_permission("b:read")
        role = await make_role("editor", permission_ids=[p1.id])

        updated = await role_service.update_role(role.id, RoleUpdate(description="编辑", permission_ids=[p2.id]))

        assert updated.description == "编辑"
        assert updated.permission_ids == [p2.id]

    async def test_update_rejects_null_required_fields(self, role_service, make_role):
        """显式传入null的必填字段返回校验错误，原值不变"""
        role = await make_role("editor", name="编辑")

        with pytest.raises(ValidationFailed):
            await role_service.update_role(role.id, RoleUpdate.model_validate({"name": None}))
        cleared = await role_service.update_role(role.id, RoleUpdate.model_validate({"description": None}))

        assert cleared.name == "编辑"
        assert cleared.description is None

    async def test_list_and_options(self, role_service, make_role):
        await make_role("a1", sort=2)
        await make_role("a2", sort=1)

        page = await role_service.list_roles(PageQuery(page=1, size=10))
        options = await role_service.get_role_options()

        assert page.total == 2
        assert [r.code for r in page.items] == ["a2", "a1"]
        assert [o.tag for o in options] == ["a2", "a1"]


class TestRoleGrants:

    async def test_grant_is_idempotent(self, role_service, make_role, make_permission, auth_version_repository):
        perm = await make_permission("user:read")
        role = await make_role("viewer")
        initial = await auth_version_repository.get_version()

        await role_service.grant_permissions(role.id, [perm.id])
        version = await auth_version_repository.get_version()
        detail = await role_service.grant_permissions(role.id, [perm.id])

        assert detail.permission_ids == [perm.id]
        assert version == initial + 1
        # 没有新增授权时不使缓存失效
        assert await auth_version_repository.get_version() == version

    async def test_assign_menus_replaces(self, role_service, make_role, make_menu):
        m1 = await make_menu("M1")
        m2 = await make_menu("M2")
        role = await make_role("viewer", menu_ids=[m1.id])

        detail = await role_service.assign_menus(role.id, [m2.id])

        assert detail.menu_ids == [m2.id]

    async def test_grant_menus_appends(self, role_service, make_role, make_menu):
        m1 = await make_menu("M1")
        m2 = await make_menu("M2")
        role = await make_role("viewer", menu_ids=[m1.id])

        detail = await role_service.grant_menus(role.id, [m2.id, m1.id])

        assert set(detail.menu_ids) == {m1.id, m2.id}


class TestRoleSoftDelete:

    async def test_delete_keeps_grants_and_restore(self, role_service, make_role, make_permission):
        perm = await make_permission("user:read")
        role = await make_role("viewer", permission_ids=[perm.id])

        await role_service.delete_role(role.id)
        with pytest.raises(ResourceNotFound):
            await role_service.get_role(role.id)

        restored = await role_service.restore_role(role.id)
        assert restored.deleted_at is None
        assert restored.permission_ids == [perm.id]

    async def test_deleted_name_can_be_reused(self, role_service, make_role):
        role = await make_role("viewer", name="访客")
        await role_service.delete_role(role.id)

        new_role = await make_role("viewer", name="访客")

        assert new_role.id != role.id
        # 名称已被占用，原角色无法恢复
        with pytest.raises(Conflict):
            await role_service.restore_role(role.id)

    async def test_delete_twice(self, role_service, make_role):
        role = await make_role("temp")
        await role_service.delete_role(role.id)

        with pytest.raises(ResourceNotFound):
            await role_service.delete_role(role.id)

    async def test_restore_alive_role(self, role_service, make_role):
        role = await make_role("alive")

        with pytest.raises(ResourceNotFound):
            await role_service.restore_role(role.id)
