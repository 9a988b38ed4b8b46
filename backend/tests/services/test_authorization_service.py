"""
测试授权解析：角色 → 权限码并集 + 可见菜单森林
"""
from uuid import uuid4

import pytest

from app.core.exceptions import ResourceNotFound
from app.enums.sys_status import MenuStatus, RoleStatus
from app.schemas.sys_menu import MenuUpdate
from app.schemas.sys_role import RoleUpdate


def menu_names(forest):
    return [(node.name, menu_names(node.children)) for node in forest]


@pytest.fixture
async def admin_viewer(make_permission, make_menu, make_role, make_user):
    """admin：user:manage + Users；viewer：Reports（Users的子菜单）"""
    perm = await make_permission("user:manage")
    users = await make_menu("Users")
    reports = await make_menu("Reports", parent_id=users.id)
    admin = await make_role("admin", permission_ids=[perm.id], menu_ids=[users.id])
    viewer = await make_role("viewer", menu_ids=[reports.id])
    user = await make_user("alice", role_ids=[admin.id, viewer.id])
    return {"user": user, "admin": admin, "viewer": viewer, "users": users, "reports": reports}


class TestResolve:
    """授权解析基本场景"""

    async def test_union_of_roles(self, authorization_service, admin_viewer):
        payload = await authorization_service.resolve(admin_viewer["user"].id)

        assert payload.roles == ["admin", "viewer"]
        assert payload.permissions == ["user:manage"]
        assert menu_names(payload.menus) == [("Users", [("Reports", [])])]

    async def test_user_without_roles(self, authorization_service, make_user):
        user = await make_user("nobody")

        payload = await authorization_service.resolve(user.id)

        assert payload.user_id == user.id
        assert payload.roles == [] and payload.permissions == [] and payload.menus == []

    async def test_unknown_user(self, authorization_service):
        with pytest.raises(ResourceNotFound):
            await authorization_service.resolve(uuid4())

    async def test_deleted_user(self, authorization_service, user_service, make_user):
        user = await make_user("ghost")
        await user_service.delete_user(user.id)

        with pytest.raises(ResourceNotFound):
            await authorization_service.resolve(user.id)

    async def test_inactive_role_ignored(self, authorization_service, role_service, admin_viewer):
        await role_service.update_role(admin_viewer["admin"].id, RoleUpdate(status=RoleStatus.INACTIVE))

        payload = await authorization_service.resolve(admin_viewer["user"].id)

        assert payload.roles == ["viewer"]
        assert payload.permissions == []
        # Users未授权但可用，按include_ancestors补齐
        assert menu_names(payload.menus) == [("Users", [("Reports", [])])]

    async def test_deleted_role_ignored_and_restored(self, authorization_service, role_service, admin_viewer):
        user_id = admin_viewer["user"].id
        await role_service.delete_role(admin_viewer["admin"].id)
        assert (await authorization_service.resolve(user_id)).permissions == []

        await role_service.restore_role(admin_viewer["admin"].id)
        assert (await authorization_service.resolve(user_id)).permissions == ["user:manage"]

    async def test_hidden_parent_hides_subtree(self, authorization_service, menu_service, admin_viewer):
        await menu_service.update_menu(admin_viewer["users"].id, MenuUpdate(visible=False))

        payload = await authorization_service.resolve(admin_viewer["user"].id)

        assert payload.menus == []

    async def test_inactive_menu_excluded(self, authorization_service, menu_service, admin_viewer):
        await menu_service.update_menu(admin_viewer["reports"].id, MenuUpdate(status=MenuStatus.INACTIVE))

        payload = await authorization_service.resolve(admin_viewer["user"].id)

        assert menu_names(payload.menus) == [("Users", [])]

    async def test_result_independent_of_grant_order(
        self, authorization_service, make_permission, make_menu, make_role, make_user
    ):
        """同样的授权以不同顺序写入，解析结果一致"""
        p1 = await make_permission("a:read")
        p2 = await make_permission("b:read")
        m1 = await make_menu("M1", sort=2)
        m2 = await make_menu("M2", sort=1)
        r1 = await make_role("r1", permission_ids=[p2.id, p1.id], menu_ids=[m1.id, m2.id])
        r2 = await make_role("r2", permission_ids=[p1.id], menu_ids=[m2.id])
        u1 = await make_user("first", role_ids=[r1.id, r2.id])
        u2 = await make_user("second", role_ids=[r2.id, r1.id])

        first = await authorization_service.resolve(u1.id)
        second = await authorization_service.resolve(u2.id)

        assert first.model_dump(exclude={"user_id"}) == second.model_dump(exclude={"user_id"})
        assert first.permissions == ["a:read", "b:read"]
        assert menu_names(first.menus) == [("M2", []), ("M1", [])]


class TestPermissionCheck:
    """权限判断与超级管理员"""

    async def test_wildcard(self, authorization_service, make_permission, make_role, make_user):
        perm = await make_permission("user:*")
        role = await make_role("ops", permission_ids=[perm.id])
        user = await make_user("bob", role_ids=[role.id])

        assert await authorization_service.has_permission(user.id, "user:delete")
        assert not await authorization_service.has_permission(user.id, "role:read")

    async def test_super_admin_passes_everything(self, authorization_service, make_role, make_user):
        role = await make_role("super_admin")
        user = await make_user("root", role_ids=[role.id])

        payload = await authorization_service.resolve(user.id)

        # 授权结果仍是真实授予的内容
        assert payload.permissions == []
        assert await authorization_service.has_permission(user.id, "anything:read")


class TestCache:
    """授权结果缓存与失效"""

    async def test_cached_then_invalidated(
        self, authorization_service, role_service, make_permission, make_role, make_user, fake_redis
    ):
        perm = await make_permission("dict:read")
        role = await make_role("reader")
        user = await make_user("carol", role_ids=[role.id])

        assert (await authorization_service.resolve(user.id)).permissions == []
        assert any(":auth:" in key for key in fake_redis.store)

        await role_service.grant_permissions(role.id, [perm.id])

        assert (await authorization_service.resolve(user.id)).permissions == ["dict:read"]

    async def test_redis_unavailable(self, authorization_service, make_permission, make_role, make_user, fake_redis):
        perm = await make_permission("dict:read")
        role = await make_role("reader", permission_ids=[perm.id])
        user = await make_user("dave", role_ids=[role.id])
        fake_redis.available = False

        payload = await authorization_service.resolve(user.id)

        assert payload.permissions == ["dict:read"]

    async def test_write_during_outage_invalidates_cache(
        self, authorization_service, role_service, admin_viewer, fake_redis
    ):
        """Redis故障期间停用角色，恢复后不会命中旧缓存"""
        user_id = admin_viewer["user"].id
        before = await authorization_service.resolve(user_id)
        assert menu_names(before.menus) == [("Users", [("Reports", [])])]

        fake_redis.available = False
        await role_service.update_role(admin_viewer["viewer"].id, RoleUpdate(status=RoleStatus.INACTIVE))
        fake_redis.available = True

        after = await authorization_service.resolve(user_id)

        assert after.roles == ["admin"]
        assert menu_names(after.menus) == [("Users", [])]

    async def test_failed_write_keeps_version(
        self, authorization_service, role_service, auth_version_repository, admin_viewer
    ):
        """写操作回滚时授权版本号不变"""
        version = await auth_version_repository.get_version()

        with pytest.raises(ResourceNotFound):
            await role_service.delete_role(uuid4())

        assert await auth_version_repository.get_version() == version
