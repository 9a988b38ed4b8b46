"""
测试邮件模板Service：名称唯一、语法与变量校验、渲染与预览
"""
from uuid import uuid4

import pytest

from app.core.exceptions import Conflict, ResourceNotFound, ValidationFailed
from app.enums.sys_status import EmailTemplateType, TemplateVariableType
from app.schemas.base import PageQuery
from app.schemas.sys_email_template import EmailTemplateCreate, EmailTemplateUpdate, TemplateVariable


def template(name="welcome", subject="欢迎 {{ name }}", content="<p>{{ greeting }}，{{ name }}</p>", **kwargs):
    kwargs.setdefault("variable_schema", [
        TemplateVariable(name="name", label="姓名", required=True, example="张三"),
        TemplateVariable(name="greeting", default_value="您好"),
    ])
    return EmailTemplateCreate(name=name, subject=subject, content=content, **kwargs)


class TestTemplateCrud:

    async def test_default_variables_by_type(self, email_template_service):
        created = await email_template_service.create_template(EmailTemplateCreate(
            name="cpu_alert",
            subject="[{{ level }}] {{ ruleName }}",
            content="<p>{{ message }}</p>",
            template_type=EmailTemplateType.SYSTEM_ALERT,
        ))

        names = [v.name for v in created.variable_schema]
        assert created.template_type == EmailTemplateType.SYSTEM_ALERT
        assert names[0] == "ruleName"
        assert {"level", "message", "currentValue", "threshold"} <= set(names)

    async def test_duplicate_name(self, email_template_service):
        await email_template_service.create_template(template())

        with pytest.raises(Conflict):
            await email_template_service.create_template(template(subject="另一个"))

    async def test_syntax_error(self, email_template_service):
        with pytest.raises(ValidationFailed):
            await email_template_service.create_template(template(content="<p>{{ name </p>"))

    async def test_undeclared_variable(self, email_template_service):
        with pytest.raises(ValidationFailed) as exc:
            await email_template_service.create_template(template(content="<p>{{ name }} {{ phone }}</p>"))

        assert "phone" in exc.value.detail

    def test_duplicate_variable_names(self):
        with pytest.raises(ValueError):
            template(variable_schema=[TemplateVariable(name="name"), TemplateVariable(name="name")])

    async def test_update_revalidates(self, email_template_service):
        created = await email_template_service.create_template(template())

        with pytest.raises(ValidationFailed):
            await email_template_service.update_template(created.id, EmailTemplateUpdate(content="{{ phone }}"))
        # 去掉仍被内容引用的变量
        with pytest.raises(ValidationFailed):
            await email_template_service.update_template(
                created.id, EmailTemplateUpdate(variable_schema=[TemplateVariable(name="name")])
            )

        updated = await email_template_service.update_template(
            created.id, EmailTemplateUpdate(subject="你好 {{ name }}", template_type=EmailTemplateType.SYSTEM_ALERT)
        )
        assert updated.subject == "你好 {{ name }}"
        assert updated.template_type == EmailTemplateType.SYSTEM_ALERT
        assert [v.name for v in updated.variable_schema] == ["name", "greeting"]

    async def test_update_rejects_null_required_fields(self, email_template_service):
        created = await email_template_service.create_template(template())

        with pytest.raises(ValidationFailed):
            await email_template_service.update_template(
                created.id, EmailTemplateUpdate.model_validate({"subject": None})
            )

        updated = await email_template_service.update_template(
            created.id, EmailTemplateUpdate.model_validate({"description": None})
        )
        assert updated.description is None

    async def test_list_and_delete(self, email_template_service):
        first = await email_template_service.create_template(template())
        await email_template_service.create_template(EmailTemplateCreate(
            name="notice", subject="{{ title }}", content="{{ content }}",
        ))

        page = await email_template_service.list_templates(
            PageQuery(), template_type=EmailTemplateType.GENERAL_NOTIFICATION.value
        )
        assert page.total == 2
        page = await email_template_service.list_templates(PageQuery(), keyword="notice")
        assert [t.name for t in page.items] == ["notice"]

        await email_template_service.delete_template(first.id)

        with pytest.raises(ResourceNotFound):
            await email_template_service.get_template(first.id)
        with pytest.raises(ResourceNotFound):
            await email_template_service.delete_template(uuid4())

    async def test_template_types(self, email_template_service):
        types = email_template_service.list_template_types()

        assert [t.value for t in types] == list(EmailTemplateType)
        assert all(t.variables for t in types)


class TestTemplateRender:

    async def test_render_with_defaults_and_content_escaping(self, email_template_service):
        created = await email_template_service.create_template(template())

        rendered = await email_template_service.render_template(created.id, {"name": "<b>张三</b>"})

        assert rendered.subject == "欢迎 <b>张三</b>"
        assert rendered.content == "<p>您好，&lt;b&gt;张三&lt;/b&gt;</p>"

    async def test_missing_required(self, email_template_service):
        created = await email_template_service.create_template(template())

        with pytest.raises(ValidationFailed) as exc:
            await email_template_service.render_template(created.id, {"greeting": "Hi"})

        assert "name" in exc.value.detail

    async def test_html_variable_and_optional_blank(self, email_template_service):
        await email_template_service.create_template(EmailTemplateCreate(
            name="notice",
            subject="{{ title }}\n",
            content="<div>{{ userName }}</div>{{ content }}",
            template_type=EmailTemplateType.GENERAL_NOTIFICATION,
        ))

        rendered = await email_template_service.render_by_name(
            "notice", {"title": "系统维护", "content": "<p>今晚维护</p>"}
        )

        assert rendered.subject == "系统维护"
        assert rendered.content == "<div></div><p>今晚维护</p>"

    async def test_render_by_unknown_name(self, email_template_service):
        with pytest.raises(ResourceNotFound):
            await email_template_service.render_by_name("missing", {})

    async def test_preview_uses_examples(self, email_template_service):
        created = await email_template_service.create_template(template(
            variable_schema=[
                TemplateVariable(name="name", required=True, example="张三"),
                TemplateVariable(name="greeting", type=TemplateVariableType.STRING),
            ],
        ))

        rendered = await email_template_service.preview_template(created.id, {"greeting": "早上好"})

        assert rendered.subject == "欢迎 张三"
        assert rendered.content == "<p>早上好，张三</p>"
