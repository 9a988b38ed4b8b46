"""
接口冒烟测试：登录、权限校验、统一响应与错误格式
容器的会话工厂与Redis服务替换为测试夹具，不运行lifespan
"""
import httpx
import pytest
from dependency_injector import providers

from app.core.config import settings
from app.main import app

API = settings.API_V1_STR
PASSWORD = "secret123"


@pytest.fixture
async def client(session_factory, redis_service):
    container = app.state.container
    container.async_session_factory.override(providers.Object(session_factory))
    container.redis_service.override(providers.Object(redis_service))
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        container.async_session_factory.reset_override()
        container.redis_service.reset_override()


async def login(client, username: str) -> dict:
    response = await client.post(
        f"{API}/login/access-token", data={"username": username, "password": PASSWORD}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


class TestLogin:

    async def test_form_login_and_me(self, client, make_user):
        user = await make_user("alice", password=PASSWORD)

        headers = await login(client, "alice")
        response = await client.get(f"{API}/users/me", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["code"] == "00000"
        assert body["data"]["id"] == str(user.id)
        assert "password" not in body["data"]

    async def test_json_login(self, client, make_user):
        await make_user("bob", password=PASSWORD)

        response = await client.post(f"{API}/login", json={"username": "bob", "password": PASSWORD})

        assert response.status_code == 200
        assert response.json()["data"]["access_token"]

    async def test_wrong_password(self, client, make_user):
        await make_user("carol", password=PASSWORD)

        response = await client.post(f"{API}/login", json={"username": "carol", "password": "bad-password"})

        assert response.status_code == 400
        assert response.json()["code"] == "10000"


class TestAccessControl:

    async def test_missing_token(self, client):
        response = await client.get(f"{API}/users/me", headers={"X-Request-ID": "req-1"})

        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "20001"
        assert body["request_id"] == "req-1"
        assert response.headers["X-Request-ID"] == "req-1"

    async def test_permission_denied(self, client, make_user):
        await make_user("dave", password=PASSWORD)
        headers = await login(client, "dave")

        response = await client.get(f"{API}/roles", headers=headers)

        assert response.status_code == 403
        assert response.json()["code"] == "20003"

    async def test_granted_permission(self, client, make_user, make_permission, make_role, make_menu):
        perm = await make_permission("role:read")
        menu = await make_menu("角色管理")
        role = await make_role("auditor", permission_ids=[perm.id], menu_ids=[menu.id])
        await make_user("eve", role_ids=[role.id], password=PASSWORD)
        headers = await login(client, "eve")

        roles = await client.get(f"{API}/roles", headers=headers)
        auth = await client.get(f"{API}/users/me/authorization", headers=headers)

        assert roles.status_code == 200
        assert roles.json()["data"]["total"] == 1
        payload = auth.json()["data"]
        assert payload["roles"] == ["auditor"]
        assert payload["permissions"] == ["role:read"]
        assert [m["name"] for m in payload["menus"]] == ["角色管理"]

    async def test_super_admin_and_errors(self, client, make_user, make_role):
        role = await make_role("super_admin")
        await make_user("root", role_ids=[role.id], password=PASSWORD)
        headers = await login(client, "root")

        created = await client.post(f"{API}/roles", headers=headers, json={"name": "访客", "code": "guest"})
        duplicate = await client.post(f"{API}/roles", headers=headers, json={"name": "访客", "code": "guest2"})
        invalid = await client.post(f"{API}/roles", headers=headers, json={"code": "x"})
        cycle = await client.put(
            f"{API}/menus/00000000-0000-0000-0000-000000000000", headers=headers, json={"name": "x"}
        )

        assert created.status_code == 200
        assert created.json()["data"]["code"] == "guest"
        assert duplicate.status_code == 409
        assert duplicate.json()["code"] == "30009"
        assert invalid.status_code == 422
        assert invalid.json()["code"] == "10001"
        assert invalid.json()["details"]["errors"]
        assert cycle.status_code == 404

    async def test_null_required_field(self, client, make_user, make_role):
        """必填字段显式传null返回422而非409"""
        role = await make_role("super_admin")
        await make_user("admin2", role_ids=[role.id], password=PASSWORD)
        headers = await login(client, "admin2")
        target = await make_role("guest")

        response = await client.put(f"{API}/roles/{target.id}", headers=headers, json={"name": None})

        assert response.status_code == 422
        assert response.json()["code"] == "10001"


class TestEmailTemplates:

    async def test_create_render_and_errors(self, client, make_user, make_role):
        role = await make_role("super_admin")
        await make_user("mailer", role_ids=[role.id], password=PASSWORD)
        headers = await login(client, "mailer")

        created = await client.post(f"{API}/email-templates", headers=headers, json={
            "name": "cpu_alert",
            "subject": "[{{ level }}] {{ ruleName }}",
            "content": "<p>{{ message }}</p>",
            "template_type": "SYSTEM_ALERT",
        })
        template_id = created.json()["data"]["id"]
        rendered = await client.post(
            f"{API}/email-templates/{template_id}/render",
            headers=headers,
            json={"variables": {"ruleName": "CPU", "level": "warning", "message": "a < b"}},
        )
        missing = await client.post(f"{API}/email-templates/{template_id}/render", headers=headers, json={})
        undeclared = await client.post(f"{API}/email-templates", headers=headers, json={
            "name": "bad", "subject": "x", "content": "{{ unknown }}",
        })
        types = await client.get(f"{API}/email-templates/types", headers=headers)

        assert created.status_code == 200
        assert rendered.status_code == 200
        assert rendered.json()["data"] == {"subject": "[warning] CPU", "content": "<p>a &lt; b</p>"}
        assert missing.status_code == 422
        assert missing.json()["code"] == "10001"
        assert undeclared.status_code == 422
        assert len(types.json()["data"]) == 3
