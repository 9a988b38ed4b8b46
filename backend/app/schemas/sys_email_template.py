"""
邮件模板相关的Pydantic Schemas
backend/app/schemas/sys_email_template.py
"""
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from app.enums.sys_status import EmailTemplateType, TemplateVariableType
from app.schemas.base import BaseSchema, IDSchema, TimestampSchema


class TemplateVariable(BaseSchema):
    """模板变量定义"""
    name: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z_][A-Za-z0-9_]*$", description="变量名")
    label: Optional[str] = Field(None, max_length=64, description="显示名称")
    description: Optional[str] = None
    type: TemplateVariableType = Field(TemplateVariableType.STRING, description="变量类型")
    required: bool = Field(False, description="渲染时是否必填")
    default_value: Optional[str] = Field(None, description="未传入时的默认值")
    example: Optional[str] = Field(None, description="示例值，用于预览")


def _check_unique_names(value: Optional[List[TemplateVariable]]) -> Optional[List[TemplateVariable]]:
    if value is None:
        return value
    names = [v.name for v in value]
    duplicated = sorted({n for n in names if names.count(n) > 1})
    if duplicated:
        raise ValueError(f"变量名重复：{', '.join(duplicated)}")
    return value


class EmailTemplateBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100, description="模板名称", examples=["system_alert"])
    subject: str = Field(..., min_length=1, max_length=255, description="邮件主题模板", examples=["[告警] {{ ruleName }}"])
    content: str = Field(..., min_length=1, description="HTML内容模板")
    template_type: EmailTemplateType = Field(EmailTemplateType.GENERAL_NOTIFICATION, description="模板类型")
    tags: List[str] = Field(default_factory=list, description="标签")
    description: Optional[str] = None


class EmailTemplateCreate(EmailTemplateBase):
    variable_schema: Optional[List[TemplateVariable]] = Field(
        None, description="变量定义，为空时使用模板类型的标准变量"
    )

    @field_validator("variable_schema")
    @classmethod
    def check_variable_names(cls, value):
        return _check_unique_names(value)


class EmailTemplateUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    template_type: Optional[EmailTemplateType] = None
    variable_schema: Optional[List[TemplateVariable]] = None
    tags: Optional[List[str]] = None
    description: Optional[str] = None

    @field_validator("variable_schema")
    @classmethod
    def check_variable_names(cls, value):
        return _check_unique_names(value)


class EmailTemplateOut(EmailTemplateBase, TimestampSchema, IDSchema):
    variable_schema: List[TemplateVariable] = Field(default_factory=list)


class TemplateRenderRequest(BaseSchema):
    variables: Dict[str, Any] = Field(default_factory=dict, description="模板变量")


class RenderedEmail(BaseSchema):
    subject: str
    content: str


class TemplateTypeInfo(BaseSchema):
    value: EmailTemplateType
    label: str
    description: str
    variables: List[TemplateVariable]
