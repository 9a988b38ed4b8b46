"""
数据字典相关的Pydantic Schemas
backend/app/schemas/sys_dict.py
"""
from typing import Optional

from pydantic import Field

from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


class DictBase(BaseSchema):
    dict_type: str = Field(..., min_length=1, max_length=50, description="字典类型", examples=["user_status"])
    dict_code: str = Field(..., min_length=1, max_length=50, description="字典编码", examples=["active"])
    dict_name: str = Field(..., min_length=1, max_length=100, description="字典名称", examples=["正常"])
    dict_value: Optional[str] = Field(None, max_length=255, description="字典值")
    parent_code: Optional[str] = Field(None, max_length=50, description="父级编码")
    sort_order: int = Field(0, description="排序")
    is_active: bool = Field(True, description="是否启用")
    remark: Optional[str] = Field(None, max_length=255, description="备注")


class DictCreate(DictBase):
    pass


class DictUpdate(BaseSchema):
    dict_name: Optional[str] = Field(None, min_length=1, max_length=100)
    dict_value: Optional[str] = None
    parent_code: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    remark: Optional[str] = None


class DictOut(DictBase, TimestampSchema, IDSchema):
    pass
