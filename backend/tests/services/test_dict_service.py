"""
测试数据字典Service：唯一性、按类型查询与缓存失效
"""
import pytest

from app.core.exceptions import Conflict
from app.schemas.sys_dict import DictCreate, DictUpdate


def item(dict_type="user_status", code="active", name="正常", **kwargs):
    return DictCreate(dict_type=dict_type, dict_code=code, dict_name=name, **kwargs)


class TestDictService:

    async def test_duplicate(self, dict_service):
        await dict_service.create_dict(item())

        with pytest.raises(Conflict):
            await dict_service.create_dict(item(name="重复"))

    async def test_list_by_type_sorted_and_active_only(self, dict_service):
        await dict_service.create_dict(item(code="disabled", name="停用", sort_order=2))
        await dict_service.create_dict(item(code="active", name="正常", sort_order=1))
        await dict_service.create_dict(item(code="locked", name="锁定", sort_order=3, is_active=False))

        items = await dict_service.list_by_type("user_status")

        assert [i.dict_code for i in items] == ["active", "disabled"]

    async def test_cache_cleared_on_update(self, dict_service, fake_redis):
        created = await dict_service.create_dict(item())
        assert [i.dict_name for i in await dict_service.list_by_type("user_status")] == ["正常"]
        assert "rbac_admin:dict:type:user_status" in fake_redis.store

        await dict_service.update_dict(created.id, DictUpdate(dict_name="启用"))

        assert "rbac_admin:dict:type:user_status" not in fake_redis.store
        assert [i.dict_name for i in await dict_service.list_by_type("user_status")] == ["启用"]

    async def test_batch_children_and_types(self, dict_service):
        await dict_service.create_dict(item(dict_type="region", code="cn", name="中国"))
        await dict_service.create_dict(item(dict_type="region", code="bj", name="北京", parent_code="cn"))
        await dict_service.create_dict(item())

        batch = await dict_service.list_by_types(["region", "missing"])
        children = await dict_service.list_children("region", "cn")
        roots = await dict_service.list_children("region")

        assert [i.dict_code for i in batch["region"]] == ["bj", "cn"]
        assert batch["missing"] == []
        assert [i.dict_code for i in children] == ["bj"]
        assert [i.dict_code for i in roots] == ["cn"]
        assert await dict_service.list_types() == ["region", "user_status"]

    async def test_delete(self, dict_service):
        created = await dict_service.create_dict(item())

        await dict_service.delete_dict(created.id)

        assert await dict_service.list_by_type("user_status") == []
