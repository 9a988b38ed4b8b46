"""
数据库工具：异步引擎创建、关联表幂等写入、更新字段非空校验
backend/app/core/database.py
"""
import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy import Table, select, tuple_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.exceptions import ValidationFailed

logger = logging.getLogger(__name__)


def create_async_engine_safe(url_str: str, *, echo: bool = False) -> AsyncEngine:
    """
    按连接串创建异步引擎
    - postgresql+psycopg：启用连接池参数
    - sqlite+aiosqlite：内存库使用StaticPool，同一引擎内所有会话共享一个连接
    """
    url = make_url(url_str)
    kwargs: Dict[str, Any] = {"echo": echo}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if not url.database or url.database == ":memory:":
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_pre_ping=settings.DB_POOL_PRE_PING,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )

    logger.info(f"创建数据库引擎 | 后端：{url.get_backend_name()} | 驱动：{url.get_driver_name()}")
    return create_async_engine(url_str, **kwargs)


async def insert_ignore_conflicts(
    session: AsyncSession,
    table: Table,
    rows: Sequence[Dict[str, Any]],
    conflict_columns: Sequence[str],
) -> int:
    """
    关联表幂等写入：已存在的组合直接跳过，返回实际新增条数
    1. 先查询已存在的组合，过滤掉重复行
    2. 剩余行按方言使用 ON CONFLICT DO NOTHING 写入，兜底并发下的重复授权
    """
    if not rows:
        return 0

    # 同一批次内去重
    unique_rows: Dict[tuple, Dict[str, Any]] = {}
    for row in rows:
        unique_rows.setdefault(tuple(row[c] for c in conflict_columns), row)

    key_columns = [table.c[c] for c in conflict_columns]
    existing_stmt = select(*key_columns).where(tuple_(*key_columns).in_(list(unique_rows.keys())))
    existing = {tuple(r) for r in (await session.execute(existing_stmt)).all()}
    pending: List[Dict[str, Any]] = [row for key, row in unique_rows.items() if key not in existing]
    if not pending:
        return 0

    dialect_name = session.get_bind().dialect.name
    if dialect_name == "postgresql":
        stmt = pg_insert(table).on_conflict_do_nothing(index_elements=list(conflict_columns))
    elif dialect_name == "sqlite":
        stmt = sqlite_insert(table).on_conflict_do_nothing(index_elements=list(conflict_columns))
    else:
        stmt = table.insert()

    await session.execute(stmt, pending)
    return len(pending)



def reject_null_columns(table: Table, update_data: Dict[str, Any]) -> None:
    """
    部分更新时显式传入null的字段，若对应列为NOT NULL则直接拒绝
    :raises ValidationFailed: 列出所有不允许为空的字段
    """
    null_fields = sorted(
        key for key, value in update_data.items()
        if value is None and key in table.c and not table.c[key].nullable
    )
    if null_fields:
        raise ValidationFailed(f"字段不能为空：{', '.join(null_fields)}")
