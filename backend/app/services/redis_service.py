"""
Redis服务层（异步版本）
backend/app/services/redis_service.py
说明：Redis只做缓存，任何Redis异常都降级为"未命中"，不影响业务请求
"""
import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger(__name__)

# 授权缓存键：版本号来自数据库计数器，版本变化即整体失效
AUTH_PAYLOAD_KEY = "rbac:auth:v{version}:{user_id}"


class RedisService:
    """
    Redis服务层（异步）：封装Redis操作
    统一处理序列化、错误处理、键前缀管理
    """

    def __init__(self, redis_client: Optional[redis.Redis]):
        """
        Args:
            redis_client: Redis客户端实例（异步），为None时所有操作视为未命中
        """
        self.redis = redis_client
        self.key_prefix = settings.REDIS_KEY_PREFIX

    def _make_key(self, key: str) -> str:
        """添加统一前缀的键名"""
        return f"{self.key_prefix}{key}"

    @staticmethod
    def _serialize(value: Any) -> str:
        return json.dumps(value, default=str, ensure_ascii=False)

    @staticmethod
    def _deserialize(value: Any) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    # ==================== 基础操作 ====================

    async def set(self, key: str, value: Any, expire_seconds: Optional[int] = None) -> bool:
        """设置键值（支持过期时间）"""
        if self.redis is None:
            return False
        try:
            full_key = self._make_key(key)
            serialized_value = self._serialize(value)
            if expire_seconds:
                return bool(await self.redis.setex(full_key, expire_seconds, serialized_value))
            return bool(await self.redis.set(full_key, serialized_value))
        except RedisError as e:
            logger.warning(f"Redis写入失败 | key={key} | 错误：{e}")
            return False

    async def setex(self, key: str, expire_seconds: int, value: Any) -> bool:
        """设置键值并指定过期时间（简写）"""
        return await self.set(key, value, expire_seconds)

    async def get(self, key: str) -> Any:
        if self.redis is None:
            return None
        try:
            value = await self.redis.get(self._make_key(key))
            return self._deserialize(value)
        except RedisError as e:
            logger.warning(f"Redis读取失败 | key={key} | 错误：{e}")
            return None

    async def delete(self, *keys: str) -> int:
        """删除一个或多个键"""
        if self.redis is None or not keys:
            return 0
        try:
            return await self.redis.delete(*[self._make_key(key) for key in keys])
        except RedisError as e:
            logger.warning(f"Redis删除失败 | keys={keys} | 错误：{e}")
            return 0

    # ==================== 授权缓存 ====================
    # 版本号保存在数据库（sys_auth_version），Redis只存放各版本下的解析结果

    async def get_auth_payload(self, version: int, user_id: str) -> Optional[dict]:
        return await self.get(AUTH_PAYLOAD_KEY.format(version=version, user_id=user_id))

    async def cache_auth_payload(self, version: int, user_id: str, payload: dict) -> bool:
        key = AUTH_PAYLOAD_KEY.format(version=version, user_id=user_id)
        return await self.setex(key, settings.AUTH_CACHE_TTL, payload)

    # ==================== 健康检查 ====================

    async def ping(self) -> bool:
        """检查Redis连接是否正常"""
        if self.redis is None:
            return False
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False
