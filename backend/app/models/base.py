"""
SQLAlchemy Declarative Base
backend/app/models/base.py
"""
import uuid

from sqlalchemy import Column, Uuid
from sqlalchemy.orm import declarative_base

# 创建DeclarativeBase实例
Base = declarative_base()


# UUID类型：PostgreSQL使用原生uuid，其他数据库（测试用sqlite）退化为CHAR(32)
def uuid_pk_column():
    """生成UUID主键列的辅助函数"""
    return Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False
    )


__all__ = ['Base', 'uuid_pk_column']
