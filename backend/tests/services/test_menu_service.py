"""
测试菜单Service：成环校验、删除策略、管理端菜单树
"""
from uuid import uuid4

import pytest

from app.core.exceptions import Conflict, ResourceNotFound, ValidationFailed
from app.schemas.base import PageQuery
from app.schemas.sys_menu import MenuUpdate


class TestMenuParent:

    async def test_unknown_parent(self, make_menu):
        with pytest.raises(ResourceNotFound):
            await make_menu("Orphan", parent_id=uuid4())

    async def test_self_parent(self, menu_service, make_menu):
        menu = await make_menu("Self")

        with pytest.raises(Conflict):
            await menu_service.update_menu(menu.id, MenuUpdate(parent_id=menu.id))

    async def test_move_under_descendant(self, menu_service, make_menu):
        root = await make_menu("Root")
        child = await make_menu("Child", parent_id=root.id)
        grand = await make_menu("Grand", parent_id=child.id)

        with pytest.raises(Conflict):
            await menu_service.update_menu(root.id, MenuUpdate(parent_id=grand.id))

    async def test_move_to_root(self, menu_service, make_menu):
        root = await make_menu("Root")
        child = await make_menu("Child", parent_id=root.id)

        moved = await menu_service.update_menu(child.id, MenuUpdate(parent_id=None))

        assert moved.parent_id is None

    async def test_null_required_fields(self, menu_service, make_menu):
        menu = await make_menu("Nullable")

        with pytest.raises(ValidationFailed):
            await menu_service.update_menu(menu.id, MenuUpdate.model_validate({"visible": None, "sort": None}))


class TestMenuDelete:

    @pytest.fixture
    async def tree(self, make_menu, make_role):
        root = await make_menu("Root")
        child = await make_menu("Child", parent_id=root.id)
        grand = await make_menu("Grand", parent_id=child.id)
        role = await make_role("viewer", menu_ids=[root.id, child.id, grand.id])
        return {"root": root, "child": child, "grand": grand, "role": role}

    async def test_block(self, menu_service, tree):
        with pytest.raises(Conflict):
            await menu_service.delete_menu(tree["root"].id, policy="block")

    async def test_reparent(self, menu_service, menu_repository, tree):
        result = await menu_service.delete_menu(tree["root"].id, policy="reparent")

        assert "1" in result.message
        child = await menu_repository.get_by_id(tree["child"].id)
        assert child.parent_id is None
        assert (await menu_repository.get_by_id(tree["grand"].id)).parent_id == tree["child"].id

    async def test_cascade(self, menu_service, role_service, menu_repository, tree):
        await menu_service.delete_menu(tree["root"].id, policy="cascade")

        assert await menu_repository.list_all() == []
        assert (await role_service.get_role(tree["role"].id)).menu_ids == []

    async def test_leaf_removes_grants(self, menu_service, role_service, tree):
        await menu_service.delete_menu(tree["grand"].id)

        detail = await role_service.get_role(tree["role"].id)
        assert set(detail.menu_ids) == {tree["root"].id, tree["child"].id}

    async def test_unknown_policy(self, menu_service, tree):
        with pytest.raises(ValidationFailed):
            await menu_service.delete_menu(tree["grand"].id, policy="whatever")

    async def test_unknown_menu(self, menu_service):
        with pytest.raises(ResourceNotFound):
            await menu_service.delete_menu(uuid4())


class TestMenuQuery:

    async def test_admin_tree_includes_hidden(self, menu_service, make_menu):
        root = await make_menu("Root", visible=False)
        await make_menu("B", parent_id=root.id, sort=1)
        await make_menu("A", parent_id=root.id, sort=1)

        tree = await menu_service.get_menu_tree()

        assert [n.name for n in tree] == ["Root"]
        assert [n.name for n in tree[0].children] == ["A", "B"]

    async def test_list_by_parent(self, menu_service, make_menu):
        root = await make_menu("Root")
        await make_menu("Child", parent_id=root.id)

        page = await menu_service.list_menus(PageQuery(), parent_id=root.id)

        assert page.total == 1
        assert page.items[0].name == "Child"

    async def test_user_menu_tree(self, menu_service, make_menu, make_role, make_user):
        root = await make_menu("Root")
        role = await make_role("viewer", menu_ids=[root.id])
        user = await make_user("eve", role_ids=[role.id])

        tree = await menu_service.get_user_menu_tree(user.id)

        assert [n.name for n in tree] == ["Root"]
