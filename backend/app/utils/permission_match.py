"""
权限码匹配工具（纯函数，不依赖Web层与数据库）
backend/app/utils/permission_match.py
核心功能：
1. 权限通配符生成（resource:action → resource:*；module:resource:action → module:resource:* → module:*:*）
2. 用户ID脱敏，日志中不输出完整ID
"""
import hashlib
import logging
from typing import Iterable, List

from app.core.config import request_id_ctx

logger = logging.getLogger(__name__)

__all__ = ["ALL_PERMISSIONS", "generate_permission_wildcards", "desensitize_user_id", "match_permission"]

# 全局通配权限
ALL_PERMISSIONS = "*"


def generate_permission_wildcards(required_perm: str) -> List[str]:
    """
    生成权限通配符列表
    :param required_perm: 原始权限码（如 user:read）
    :return: 通配符列表，首项为原权限码
    """
    if not required_perm:
        logger.warning("所需权限码为空，无法生成通配符", extra={"request_id": request_id_ctx.get()})
        return []

    # 无效权限码仅警告，返回原权限码
    if ":" not in required_perm:
        logger.warning(
            f"无效的权限码格式：{required_perm}，需符合 resource:action 规范，跳过通配符生成",
            extra={"request_id": request_id_ctx.get()}
        )
        return [required_perm]

    perm_parts = required_perm.split(':')
    wildcards = [required_perm]
    if len(perm_parts) >= 3:
        wildcards.append(f"{perm_parts[0]}:{perm_parts[1]}:*")
        wildcards.append(f"{perm_parts[0]}:*:*")
    elif len(perm_parts) == 2:
        wildcards.append(f"{perm_parts[0]}:*")

    logger.debug(f"权限通配符生成完成 | 原始权限：{required_perm} | 通配符列表：{wildcards}")
    return wildcards


def match_permission(granted: Iterable[str], required_perm: str) -> bool:
    """已授予的权限码集合是否满足所需权限（含通配符与全局 *）"""
    granted_set = set(granted)
    if ALL_PERMISSIONS in granted_set:
        return True
    return any(perm in granted_set for perm in generate_permission_wildcards(required_perm))


def desensitize_user_id(user_id: str) -> str:
    """
    用户ID脱敏
    :return: 前6位...后4位；过短的ID取MD5前8位
    """
    if len(user_id) <= 10:
        return hashlib.md5(user_id.encode()).hexdigest()[:8]
    return f"{user_id[:6]}...{user_id[-4:]}"
