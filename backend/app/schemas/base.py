"""
base类
backend/app/schemas/base.py
"""
from datetime import datetime
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar('T')


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class TimestampSchema(BaseSchema):
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None


class IDSchema(BaseSchema):
    id: UUID


class PageQuery(BaseSchema):
    """分页参数（页码从1开始）"""
    page: int = Field(1, ge=1, description="页码")
    size: int = Field(10, ge=1, le=200, description="每页条数")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


class PageResult(BaseSchema, Generic[T]):
    items: List[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 10
