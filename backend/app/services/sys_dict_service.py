"""
数据字典服务层
backend/app/services/sys_dict_service.py
说明：按类型查询启用项的结果缓存5分钟，写操作后清除对应类型的缓存
"""
import logging
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from app.core.database import reject_null_columns
from app.core.exceptions import Conflict, ResourceNotFound
from app.models import SysDict
from app.repositories.sys_dict_repository import DictRepository
from app.schemas.base import PageQuery, PageResult
from app.schemas.sys_dict import DictCreate, DictOut, DictUpdate
from app.schemas.sys_user import Message
from app.services.redis_service import RedisService

logger = logging.getLogger(__name__)

DICT_CACHE_SECONDS = 300


class DictService:
    """
    数据字典服务层
    业务逻辑和数据转换，缓存失败不影响查询
    """

    def __init__(self, dict_repository: DictRepository, redis_service: RedisService):
        self.dict_repository = dict_repository
        self.redis_service = redis_service

    @staticmethod
    def _cache_key(dict_type: str) -> str:
        return f"dict:type:{dict_type}"

    async def _clear_dict_cache(self, dict_type: str) -> None:
        await self.redis_service.delete(self._cache_key(dict_type))

    async def _get_or_404(self, dict_id: UUID) -> SysDict:
        item = await self.dict_repository.get_by_id(dict_id)
        if not item:
            raise ResourceNotFound(f"字典项 {dict_id} 不存在")
        return item

    # ==================== 查询 ====================

    async def list_dicts(
        self,
        page_query: PageQuery,
        dict_type: Optional[str] = None,
        keyword: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> PageResult[DictOut]:
        items, total = await self.dict_repository.list_dicts(
            offset=page_query.offset, limit=page_query.size,
            dict_type=dict_type, keyword=keyword, is_active=is_active,
        )
        return PageResult[DictOut](
            items=[DictOut.model_validate(i) for i in items],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def get_dict(self, dict_id: UUID) -> DictOut:
        return DictOut.model_validate(await self._get_or_404(dict_id))

    async def list_by_type(self, dict_type: str) -> List[DictOut]:
        """某类型下的启用项，按sort_order排序（带缓存）"""
        cached = await self.redis_service.get(self._cache_key(dict_type))
        if cached:
            return [DictOut.model_validate(item) for item in cached]

        items = [DictOut.model_validate(i) for i in await self.dict_repository.list_active_by_types([dict_type])]
        if items:
            await self.redis_service.setex(
                self._cache_key(dict_type),
                DICT_CACHE_SECONDS,
                [item.model_dump(mode="json") for item in items],
            )
        return items

    async def list_by_types(self, dict_types: Sequence[str]) -> Dict[str, List[DictOut]]:
        """批量按类型查询，未命中的类型返回空列表"""
        result: Dict[str, List[DictOut]] = {t: [] for t in dict_types}
        for item in await self.dict_repository.list_active_by_types(list(result.keys())):
            result[item.dict_type].append(DictOut.model_validate(item))
        return result

    async def list_children(self, dict_type: str, parent_code: Optional[str] = None) -> List[DictOut]:
        return [DictOut.model_validate(i) for i in await self.dict_repository.list_children(dict_type, parent_code)]

    async def list_types(self) -> List[str]:
        return await self.dict_repository.list_types()

    # ==================== 写操作 ====================

    async def create_dict(self, dict_in: DictCreate) -> DictOut:
        if await self.dict_repository.get_by_type_and_code(dict_in.dict_type, dict_in.dict_code):
            raise Conflict(f"字典项 '{dict_in.dict_type}:{dict_in.dict_code}' 已存在")

        async with self.dict_repository.transaction() as session:
            item = await self.dict_repository.create(SysDict(**dict_in.model_dump()), session)

        await self._clear_dict_cache(item.dict_type)
        logger.info(f"创建字典项成功 | 类型：{item.dict_type} | 编码：{item.dict_code}")
        return DictOut.model_validate(item)

    async def update_dict(self, dict_id: UUID, dict_in: DictUpdate) -> DictOut:
        await self._get_or_404(dict_id)
        update_data = dict_in.model_dump(exclude_unset=True)
        reject_null_columns(SysDict.__table__, update_data)

        async with self.dict_repository.transaction() as session:
            item = await self.dict_repository.update(dict_id, update_data, session)
            if not item:
                raise ResourceNotFound(f"字典项 {dict_id} 不存在")

        await self._clear_dict_cache(item.dict_type)
        return DictOut.model_validate(item)

    async def delete_dict(self, dict_id: UUID) -> Message:
        item = await self._get_or_404(dict_id)
        async with self.dict_repository.transaction() as session:
            await self.dict_repository.delete(dict_id, session)

        await self._clear_dict_cache(item.dict_type)
        logger.info(f"删除字典项成功 | 类型：{item.dict_type} | 编码：{item.dict_code}")
        return Message(message="字典项删除成功")
