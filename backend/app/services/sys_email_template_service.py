"""
邮件模板服务层
backend/app/services/sys_email_template_service.py
核心功能：
1. 模板CRUD：名称唯一；主题/内容保存前做语法校验，且只能引用 variable_schema 中声明的变量
2. 渲染：按变量定义补默认值、校验必填项；HTML自动转义，html类型变量原样输出
3. 预览：未传入的变量使用示例值
说明：只负责模板管理与渲染，不负责邮件发送
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from jinja2 import StrictUndefined, TemplateError, TemplateSyntaxError, meta
from jinja2.sandbox import SandboxedEnvironment
from markupsafe import Markup

from app.core.database import reject_null_columns
from app.core.exceptions import Conflict, ResourceNotFound, ValidationFailed
from app.enums.sys_status import EmailTemplateType, TemplateVariableType
from app.models import SysEmailTemplate
from app.repositories.sys_email_template_repository import EmailTemplateRepository
from app.schemas.base import PageQuery, PageResult
from app.schemas.sys_email_template import (
    EmailTemplateCreate, EmailTemplateOut, EmailTemplateUpdate, RenderedEmail, TemplateTypeInfo, TemplateVariable
)
from app.schemas.sys_user import Message

logger = logging.getLogger(__name__)


def _var(name: str, label: str, example: str, var_type: TemplateVariableType = TemplateVariableType.STRING,
         required: bool = False) -> TemplateVariable:
    return TemplateVariable(name=name, label=label, example=example, type=var_type, required=required)


# 各模板类型的标准变量
STANDARD_TEMPLATE_TYPES: Dict[EmailTemplateType, Dict[str, Any]] = {
    EmailTemplateType.API_MONITOR_ALERT: {
        "label": "接口监控告警",
        "description": "接口监控失败时发送的告警邮件",
        "variables": [
            _var("monitorName", "监控名称", "用户服务健康检查", required=True),
            _var("url", "接口地址", "https://api.example.com/health", required=True),
            _var("method", "请求方法", "GET"),
            _var("status", "监控状态", "failed"),
            _var("statusCode", "HTTP状态码", "500", TemplateVariableType.NUMBER),
            _var("errorMessage", "错误信息", "请求超时"),
            _var("responseTime", "响应时间", "3000ms"),
            _var("timestamp", "告警时间", "2025-10-21 15:30:00", TemplateVariableType.DATETIME),
        ],
    },
    EmailTemplateType.SYSTEM_ALERT: {
        "label": "系统监控告警",
        "description": "系统指标异常时发送的告警邮件",
        "variables": [
            _var("ruleName", "规则名称", "CPU使用率过高告警", required=True),
            _var("metricType", "监控类型", "system"),
            _var("metricName", "指标名称", "cpu_usage"),
            _var("currentValue", "当前值", "85.5", TemplateVariableType.NUMBER),
            _var("threshold", "阈值", "80", TemplateVariableType.NUMBER),
            _var("condition", "条件", ">"),
            _var("level", "告警级别", "warning"),
            _var("message", "告警信息", "cpu_usage 当前值 85.50 > 80"),
            _var("timestamp", "告警时间", "2025-10-21 15:30:00", TemplateVariableType.DATETIME),
        ],
    },
    EmailTemplateType.GENERAL_NOTIFICATION: {
        "label": "通用通知",
        "description": "一般性通知邮件",
        "variables": [
            _var("title", "标题", "系统维护通知", required=True),
            _var("content", "内容", "<p>系统将于今晚22:00进行维护</p>", TemplateVariableType.HTML),
            _var("userName", "用户名", "张三"),
            _var("timestamp", "时间", "2025-10-21 15:30:00", TemplateVariableType.DATETIME),
        ],
    },
}


class EmailTemplateService:
    """邮件模板Service层"""

    def __init__(self, email_template_repository: EmailTemplateRepository):
        self.email_template_repository = email_template_repository
        # 沙箱环境：模板内容来自后台录入，禁止访问对象内部属性
        self.env = SandboxedEnvironment(autoescape=True, undefined=StrictUndefined)
        # 主题是纯文本，不做HTML转义
        self.subject_env = SandboxedEnvironment(autoescape=False, undefined=StrictUndefined)

    async def _get_or_404(self, template_id: UUID) -> SysEmailTemplate:
        template = await self.email_template_repository.get_by_id(template_id)
        if not template:
            raise ResourceNotFound(f"邮件模板 {template_id} 不存在")
        return template

    @staticmethod
    def standard_variables(template_type: EmailTemplateType) -> List[TemplateVariable]:
        return [v.model_copy() for v in STANDARD_TEMPLATE_TYPES[template_type]["variables"]]

    def _check_template(self, subject: str, content: str, variable_schema: Sequence[TemplateVariable]) -> None:
        """
        校验主题与内容的语法，并确认引用的变量都已声明
        :raises ValidationFailed: 语法错误或引用了未声明的变量
        """
        declared = {v.name for v in variable_schema}
        used = set()
        for label, source in (("主题", subject), ("内容", content)):
            try:
                ast = self.env.parse(source)
            except TemplateSyntaxError as e:
                raise ValidationFailed(f"模板{label}语法错误（第{e.lineno}行）：{e.message}")
            used |= meta.find_undeclared_variables(ast)

        undeclared = sorted(used - declared)
        if undeclared:
            raise ValidationFailed(f"模板使用了未声明的变量：{', '.join(undeclared)}")

    def _build_context(
        self, variable_schema: Sequence[TemplateVariable], variables: Mapping[str, Any], use_examples: bool = False
    ) -> Dict[str, Any]:
        context: Dict[str, Any] = {}
        missing = []
        for var in variable_schema:
            value = variables.get(var.name)
            if value is None and use_examples:
                value = var.example
            if value is None:
                value = var.default_value
            if value is None:
                if var.required and not use_examples:
                    missing.append(var.name)
                value = ""
            if var.type == TemplateVariableType.HTML:
                value = Markup(str(value))
            context[var.name] = value
        if missing:
            raise ValidationFailed(f"缺少必填变量：{', '.join(missing)}")
        return context

    def _render(self, template: SysEmailTemplate, context: Dict[str, Any]) -> RenderedEmail:
        try:
            subject = self.subject_env.from_string(template.subject).render(context)
            content = self.env.from_string(template.content).render(context)
        except TemplateError as e:
            raise ValidationFailed(f"邮件模板渲染失败：{e}")
        # 主题去掉换行
        return RenderedEmail(subject=" ".join(subject.split()), content=content)

    # ==================== 查询 ====================

    async def list_templates(
        self,
        page_query: PageQuery,
        keyword: Optional[str] = None,
        template_type: Optional[str] = None,
    ) -> PageResult[EmailTemplateOut]:
        items, total = await self.email_template_repository.list_templates(
            offset=page_query.offset, limit=page_query.size, keyword=keyword, template_type=template_type
        )
        return PageResult[EmailTemplateOut](
            items=[EmailTemplateOut.model_validate(i) for i in items],
            total=total,
            page=page_query.page,
            size=page_query.size,
        )

    async def get_template(self, template_id: UUID) -> EmailTemplateOut:
        return EmailTemplateOut.model_validate(await self._get_or_404(template_id))

    def list_template_types(self) -> List[TemplateTypeInfo]:
        return [
            TemplateTypeInfo(
                value=template_type,
                label=info["label"],
                description=info["description"],
                variables=self.standard_variables(template_type),
            )
            for template_type, info in STANDARD_TEMPLATE_TYPES.items()
        ]

    # ==================== 写操作 ====================

    async def create_template(self, template_in: EmailTemplateCreate) -> EmailTemplateOut:
        if await self.email_template_repository.get_by_name(template_in.name):
            raise Conflict(f"邮件模板名称 '{template_in.name}' 已存在")

        variable_schema = template_in.variable_schema
        if variable_schema is None:
            variable_schema = self.standard_variables(template_in.template_type)
        self._check_template(template_in.subject, template_in.content, variable_schema)

        template = SysEmailTemplate(
            **template_in.model_dump(exclude={"template_type", "variable_schema"}),
            template_type=template_in.template_type.value,
            variable_schema=[v.model_dump(mode="json") for v in variable_schema],
        )
        async with self.email_template_repository.transaction() as session:
            template = await self.email_template_repository.create(template, session)

        logger.info(f"创建邮件模板成功 | 名称：{template.name} | 类型：{template.template_type}")
        return EmailTemplateOut.model_validate(template)

    async def update_template(self, template_id: UUID, template_in: EmailTemplateUpdate) -> EmailTemplateOut:
        current = await self._get_or_404(template_id)
        update_data = template_in.model_dump(exclude_unset=True)
        reject_null_columns(SysEmailTemplate.__table__, update_data)

        new_name = update_data.get("name")
        if new_name and new_name != current.name:
            if await self.email_template_repository.get_by_name(new_name):
                raise Conflict(f"邮件模板名称 '{new_name}' 已存在")

        if {"subject", "content", "variable_schema"} & update_data.keys():
            variable_schema = (
                template_in.variable_schema
                if "variable_schema" in update_data
                else [TemplateVariable.model_validate(v) for v in current.variable_schema or []]
            )
            self._check_template(
                update_data.get("subject", current.subject),
                update_data.get("content", current.content),
                variable_schema,
            )
        if "variable_schema" in update_data:
            update_data["variable_schema"] = [v.model_dump(mode="json") for v in template_in.variable_schema]
        if "template_type" in update_data:
            update_data["template_type"] = update_data["template_type"].value

        async with self.email_template_repository.transaction() as session:
            template = await self.email_template_repository.update(template_id, update_data, session)
            if not template:
                raise ResourceNotFound(f"邮件模板 {template_id} 不存在")

        logger.info(f"更新邮件模板成功 | 名称：{template.name} | 字段：{sorted(update_data.keys())}")
        return EmailTemplateOut.model_validate(template)

    async def delete_template(self, template_id: UUID) -> Message:
        async with self.email_template_repository.transaction() as session:
            deleted = await self.email_template_repository.delete(template_id, session)
        if not deleted:
            raise ResourceNotFound(f"邮件模板 {template_id} 不存在")
        logger.info(f"删除邮件模板成功 | 模板ID：{template_id}")
        return Message(message="邮件模板删除成功")

    # ==================== 渲染 ====================

    async def render_template(self, template_id: UUID, variables: Mapping[str, Any]) -> RenderedEmail:
        """
        渲染模板
        :raises ValidationFailed: 缺少必填变量
        """
        template = await self._get_or_404(template_id)
        schema = [TemplateVariable.model_validate(v) for v in template.variable_schema or []]
        return self._render(template, self._build_context(schema, variables))

    async def render_by_name(self, name: str, variables: Mapping[str, Any]) -> RenderedEmail:
        template = await self.email_template_repository.get_by_name(name)
        if not template:
            raise ResourceNotFound(f"邮件模板 '{name}' 不存在")
        schema = [TemplateVariable.model_validate(v) for v in template.variable_schema or []]
        return self._render(template, self._build_context(schema, variables))

    async def preview_template(self, template_id: UUID, variables: Mapping[str, Any]) -> RenderedEmail:
        """预览：未传入的变量用示例值填充，不校验必填"""
        template = await self._get_or_404(template_id)
        schema = [TemplateVariable.model_validate(v) for v in template.variable_schema or []]
        return self._render(template, self._build_context(schema, variables, use_examples=True))
