"""
测试用户Service与认证Service
"""
from uuid import uuid4

import pytest

from app.core.exceptions import BadRequest, Conflict, PermissionDenied, Unauthorized, ValidationFailed
from app.core.security import create_access_token, verify_password
from app.enums.sys_status import UserStatus
from app.schemas.base import PageQuery
from app.schemas.sys_user import UpdatePassword, UserUpdate

DEFAULT_PASSWORD = "secret123"


class TestUserService:

    async def test_create_hashes_password(self, user_repository, make_user, make_role):
        role = await make_role("viewer")

        user = await make_user("frank", role_ids=[role.id])

        stored = await user_repository.get_by_id(user.id)
        assert stored.password != DEFAULT_PASSWORD
        assert verify_password(DEFAULT_PASSWORD, stored.password)
        assert [r.code for r in user.roles] == ["viewer"]

    async def test_duplicate_username_includes_deleted(self, user_service, make_user):
        user = await make_user("grace")
        await user_service.delete_user(user.id)

        with pytest.raises(Conflict):
            await make_user("grace")

    async def test_unknown_role(self, make_user):
        with pytest.raises(ValidationFailed):
            await make_user("henry", role_ids=[uuid4()])

    async def test_assign_roles_replaces(self, user_service, make_user, make_role):
        r1 = await make_role("r1")
        r2 = await make_role("r2")
        user = await make_user("ivy", role_ids=[r1.id])

        roles = await user_service.assign_roles(user.id, [r2.id, r2.id])

        assert [r.code for r in roles] == ["r2"]

    async def test_update_and_list(self, user_service, make_user):
        user = await make_user("jack")
        await make_user("kate")

        updated = await user_service.update_user(user.id, UserUpdate(nickname="杰克", status=UserStatus.DISABLED))
        page = await user_service.list_users(PageQuery(), status="disabled")

        assert updated.nickname == "杰克"
        assert updated.status == UserStatus.DISABLED
        assert [u.username for u in page.items] == ["jack"]

    async def test_update_rejects_null_username(self, user_service, make_user):
        user = await make_user("nina")

        with pytest.raises(ValidationFailed):
            await user_service.update_user(user.id, UserUpdate.model_validate({"username": None}))
        assert (await user_service.get_user(user.id)).username == "nina"

    async def test_delete_self(self, user_service, make_user):
        user = await make_user("leo")

        with pytest.raises(BadRequest):
            await user_service.delete_user(user.id, current_user_id=user.id)

    async def test_update_password(self, user_service, auth_service, make_user):
        user = await make_user("mia")

        with pytest.raises(BadRequest):
            await user_service.update_password(
                user.id, UpdatePassword(current_password="wrong-pass", new_password="newpass123")
            )

        await user_service.update_password(
            user.id, UpdatePassword(current_password=DEFAULT_PASSWORD, new_password="newpass123")
        )
        token = await auth_service.login("mia", "newpass123")
        assert token.access_token


class TestAuthService:

    async def test_login_and_current_user(self, auth_service, user_repository, make_user):
        user = await make_user("nina")

        token = await auth_service.login("nina", DEFAULT_PASSWORD)
        current = await auth_service.get_current_user(token.access_token)

        assert current.id == user.id
        assert (await user_repository.get_by_id(user.id)).last_login is not None

    async def test_wrong_password(self, auth_service, make_user):
        await make_user("oscar")

        with pytest.raises(BadRequest):
            await auth_service.login("oscar", "wrong-pass")

    async def test_disabled_user(self, auth_service, make_user):
        await make_user("paul", status=UserStatus.DISABLED)

        with pytest.raises(PermissionDenied):
            await auth_service.login("paul", DEFAULT_PASSWORD)

    async def test_invalid_token(self, auth_service):
        with pytest.raises(Unauthorized):
            await auth_service.get_current_user(None)
        with pytest.raises(Unauthorized):
            await auth_service.get_current_user("not-a-token")
        with pytest.raises(Unauthorized):
            await auth_service.get_current_user(create_access_token(uuid4()))
