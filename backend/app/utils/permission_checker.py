"""
权限校验依赖
backend/app/utils/permission_checker.py
上次更新：2026/3/2
核心功能：
1. permission_checker(code) 生成FastAPI依赖，校验当前用户是否拥有权限码
2. 权限来源统一为授权解析服务（含通配符匹配与超级管理员豁免）
3. 日志关联request_id，用户ID脱敏
"""
import logging
from typing import Awaitable, Callable

from app.api.deps import AuthorizationServiceDep, CurrentUser
from app.core.config import request_id_ctx
from app.core.exceptions import PermissionDenied
from app.models import SysUser
from app.utils.permission_match import desensitize_user_id, generate_permission_wildcards

logger = logging.getLogger(__name__)

__all__ = ["permission_checker"]


def permission_checker(required_perm: str) -> Callable[..., Awaitable[SysUser]]:
    """
    权限验证工厂函数
    :param required_perm: 所需权限码（如 user:create）
    :return: FastAPI依赖函数，校验通过返回当前用户，否则抛出403
    """
    # 提前生成通配符，仅用于日志
    wildcards = generate_permission_wildcards(required_perm)

    async def checker(current_user: CurrentUser, authorization_service: AuthorizationServiceDep) -> SysUser:
        masked_uid = desensitize_user_id(str(current_user.id))
        payload = await authorization_service.resolve(current_user.id)

        if not authorization_service.payload_allows(payload, required_perm):
            logger.warning(
                f"用户权限不足 | 用户ID：{masked_uid} | 所需权限：{required_perm} | 支持通配符：{wildcards}",
                extra={"request_id": request_id_ctx.get()}
            )
            raise PermissionDenied(f"权限不足，需要权限：{required_perm}")

        logger.debug(f"用户权限校验通过 | 用户ID：{masked_uid} | 所需权限：{required_perm}")
        return current_user

    return checker
