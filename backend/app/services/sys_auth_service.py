"""
认证Service层：处理用户登录、Token校验
backend/app/services/sys_auth_service.py
"""
import logging
from uuid import UUID

from jose import JWTError

from app.core.exceptions import BadRequest, PermissionDenied, Unauthorized
from app.core.security import create_access_token, extract_token_subject, verify_password
from app.models import SysUser
from app.repositories.sys_user_repository import UserRepository
from app.schemas.sys_user import Token

logger = logging.getLogger(__name__)


class AuthService:
    """认证Service层：处理用户登录、Token校验"""
    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    # ------------------------------
    # 核心业务：用户认证（登录）
    # ------------------------------
    async def authenticate_user(self, username: str, password: str) -> SysUser:
        """
        认证用户：
        1. 按用户名查询用户
        2. 校验密码
        3. 校验用户是否启用
        用户名或密码错误统一返回400，账号停用返回403
        """
        user = await self.user_repository.get_by_username(username)
        if not user or not verify_password(plain_password=password, hashed_password=user.password):
            logger.info(f"登录失败：用户名或密码错误 | 用户名：{username}")
            raise BadRequest("用户名或密码错误")

        if not user.is_active:
            logger.info(f"登录失败：账号已停用 | 用户名：{username}")
            raise PermissionDenied("账号已停用")

        return user

    async def login(self, username: str, password: str) -> Token:
        user = await self.authenticate_user(username, password)
        async with self.user_repository.transaction() as session:
            await self.user_repository.update_last_login(user.id, session)
        logger.info(f"用户登录成功 | 用户名：{username}")
        return Token(access_token=create_access_token(user.id))

    # ------------------------------
    # 核心业务：Token解析获取当前用户
    # ------------------------------
    async def get_current_user(self, token: str | None) -> SysUser:
        """
        从Token获取当前用户：
        缺少/无效Token、用户不存在 → 401；账号停用 → 403
        """
        if not token:
            raise Unauthorized("未提供认证令牌")

        try:
            user_id = UUID(extract_token_subject(token))
        except (JWTError, ValueError) as e:
            logger.info(f"令牌校验失败 | 错误：{str(e).splitlines()[0] if str(e) else type(e).__name__}")
            raise Unauthorized("认证令牌无效或已过期")

        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise Unauthorized("令牌对应的用户不存在")

        if not user.is_active:
            raise PermissionDenied("账号已停用")

        return user
