# 项目核心配置文件，包含数据库、JWT、Redis、RBAC策略、日志等全局配置，支持从.env文件加载环境变量
# backend/app/core/config.py
# 更新记录：
#  - 新增SQLALCHEMY_DATABASE_URI_OVERRIDE，测试/本地可直接指定sqlite+aiosqlite连接串
#  - 新增RBAC策略配置：MENU_ORPHAN_POLICY（授权菜单父节点缺失时的处理方式）、MENU_DELETE_POLICY（删除有子菜单的菜单时的处理方式）
#  - 新增AUTH_CACHE_TTL，授权结果在Redis中的缓存时长
#  - 日志初始化改为显式调用init_global_logger，由main.py在启动时执行

import logging
import os
import secrets
import warnings
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Annotated, Any, Literal, Optional
from zoneinfo import ZoneInfo

from pydantic import (
    AnyUrl,
    BeforeValidator,
    Field,
    HttpUrl,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE_PATH", "../.env"),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "RBAC Admin"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # ------------------------------
    # 认证
    # ------------------------------
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    BCRYPT_ROUNDS: int = 12
    # 30 minutes
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    FIRST_SUPERUSER: str = "admin"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"

    FRONTEND_HOST: str = "http://localhost:3000"
    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    SENTRY_DSN: HttpUrl | None = None

    # ------------------------------
    # 数据库
    # ------------------------------
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "rbac_admin"
    SQLALCHEMY_DATABASE_URI_OVERRIDE: str | None = Field(
        None, description="完整数据库连接串，设置后忽略POSTGRES_*（如 sqlite+aiosqlite://）"
    )

    DB_POOL_SIZE: int = Field(20, description="数据库连接池大小")
    DB_MAX_OVERFLOW: int = Field(100, description="最大溢出连接数")
    DB_POOL_RECYCLE: int = Field(3600, description="连接回收时间(秒)")
    DB_POOL_PRE_PING: bool = Field(True, description="连接有效性检查")
    DB_ECHO: bool = Field(False, description="是否打印SQL")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.SQLALCHEMY_DATABASE_URI_OVERRIDE:
            return self.SQLALCHEMY_DATABASE_URI_OVERRIDE
        return str(
            MultiHostUrl.build(
                scheme="postgresql+psycopg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    # ------------------------------
    # Redis
    # ------------------------------
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_ENCODING: str = "utf-8"
    REDIS_DECODE_RESPONSES: bool = True
    REDIS_MAX_CONNECTIONS: int = 10
    REDIS_SOCKET_TIMEOUT: int = 5
    REDIS_SOCKET_CONNECT_TIMEOUT: int = 5
    REDIS_KEY_PREFIX: str = "rbac_admin:"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def REDIS_URL(self) -> str:
        """生成 Redis 连接 URL"""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # ------------------------------
    # RBAC
    # ------------------------------
    AUTH_CACHE_TTL: int = Field(600, description="用户授权结果缓存时长(秒)，0表示不缓存")
    SUPER_ADMIN_ROLE_CODE: str = Field("super_admin", description="超级管理员角色编码，拥有全部权限")
    MENU_ORPHAN_POLICY: Literal["include_ancestors", "promote", "suppress"] = Field(
        "include_ancestors",
        description="已授权菜单的父菜单未授权时：补齐祖先/提升为根节点/不展示",
    )
    MENU_DELETE_POLICY: Literal["block", "reparent", "cascade"] = Field(
        "block",
        description="删除存在子菜单的菜单时：拒绝删除/子菜单提升为根节点/级联删除子树",
    )

    # ------------------------------
    # 时区与日志
    # ------------------------------
    DEFAULT_TIMEZONE: str = Field("Asia/Shanghai", description="项目全局默认时区")
    LOG_LEVEL: str | None = Field(None, description="日志级别，未设置时local为DEBUG，其他环境为INFO")
    LOG_TO_FILE_FLAG: bool = Field(
        default=False,
        description="日志落文件开关（True：控制台+文件；False：仅控制台）"
    )
    LOG_FILE_PATH: str = Field("logs/app.log", description="日志文件路径")

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)
        self._check_default_secret(
            "FIRST_SUPERUSER_PASSWORD", self.FIRST_SUPERUSER_PASSWORD
        )
        return self


# 全局settings对象
settings = Settings()  # type: ignore

# 全局时区对象，Service层统一使用
DEFAULT_TZ = ZoneInfo(settings.DEFAULT_TIMEZONE)


def get_now() -> datetime:
    """当前时间（全局时区，去掉tzinfo后写入DateTime列）"""
    return datetime.now(DEFAULT_TZ).replace(tzinfo=None)


def to_local_naive(value: datetime | None) -> datetime | None:
    """带时区的时间换算到全局时区并去掉tzinfo，无时区的时间原样返回"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(DEFAULT_TZ).replace(tzinfo=None)


# ======================================
# 全局日志初始化
# ======================================
# 请求ID上下文变量（由main.py的中间件注入）
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_logger_initialized = False


class RequestIdFilter(logging.Filter):
    """把当前请求ID注入日志记录，无请求上下文时显示 -"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_ctx.get() or "-"
        return True


def init_global_logger() -> logging.Logger:
    """
    初始化根日志（仅执行一次）
    - 控制台Handler始终开启
    - LOG_TO_FILE_FLAG=True时追加轮转文件Handler（50MB/文件，保留10个备份）
    - 所有记录带request_id，格式：时间 | request_id | logger | 级别 | 消息
    """
    global _logger_initialized
    root_logger = logging.getLogger()
    if _logger_initialized:
        return root_logger
    _logger_initialized = True

    default_level = "DEBUG" if settings.ENVIRONMENT == "local" else "INFO"
    log_level = getattr(logging, (settings.LOG_LEVEL or default_level).upper(), logging.INFO)
    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s | %(request_id)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S %z"
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(RequestIdFilter())
    root_logger.addHandler(console_handler)

    if settings.LOG_TO_FILE_FLAG:
        log_dir = os.path.dirname(settings.LOG_FILE_PATH)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=settings.LOG_FILE_PATH,
            maxBytes=50 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        file_handler.addFilter(RequestIdFilter())
        root_logger.addHandler(file_handler)

    # 第三方库日志只保留告警以上，避免刷屏
    for noisy in ("sqlalchemy.engine", "passlib", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root_logger.info(
        f"日志初始化完成 | 级别：{logging.getLevelName(log_level)} | 落文件：{settings.LOG_TO_FILE_FLAG}"
    )
    return root_logger
