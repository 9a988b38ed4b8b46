"""
测试通知Service：发送、广播、已读状态、按用户隔离
"""
from uuid import uuid4

import pytest

from app.core.exceptions import ResourceNotFound, ValidationFailed
from app.enums.sys_status import NotificationType, UserStatus
from app.schemas.base import PageQuery
from app.schemas.sys_notification import NotificationBroadcast, NotificationSend


class TestNotificationService:

    @pytest.fixture
    async def users(self, make_user):
        return [await make_user("quinn"), await make_user("rose")]

    async def test_send_and_list(self, notification_service, users):
        await notification_service.send_to_users(NotificationSend(
            title="欢迎", content="hello", user_ids=[users[0].id, users[0].id]
        ))

        page = await notification_service.list_notifications(users[0].id, PageQuery())
        other = await notification_service.list_notifications(users[1].id, PageQuery())

        assert page.total == 1
        assert page.items[0].is_read is False
        assert other.total == 0

    async def test_send_to_unknown_user(self, notification_service):
        with pytest.raises(ValidationFailed):
            await notification_service.send_to_users(NotificationSend(title="x", user_ids=[uuid4()]))

    async def test_broadcast_skips_disabled(self, notification_service, users, make_user):
        await make_user("sam", status=UserStatus.DISABLED)

        count = await notification_service.broadcast(NotificationBroadcast(title="维护通知"))

        assert count == 2

    async def test_mark_as_read_idempotent(self, notification_service, users):
        created = await notification_service.create_notification(users[0].id, "提醒")

        first = await notification_service.mark_as_read(users[0].id, created.id)
        second = await notification_service.mark_as_read(users[0].id, created.id)

        assert first.is_read and second.is_read
        assert first.read_at == second.read_at
        assert await notification_service.unread_count(users[0].id) == 0

    async def test_other_user_cannot_touch(self, notification_service, users):
        created = await notification_service.create_notification(users[0].id, "私信")

        with pytest.raises(ResourceNotFound):
            await notification_service.get_notification(users[1].id, created.id)
        with pytest.raises(ResourceNotFound):
            await notification_service.mark_as_read(users[1].id, created.id)
        with pytest.raises(ResourceNotFound):
            await notification_service.delete_notification(users[1].id, created.id)

    async def test_read_all_stats_and_clear(self, notification_service, users):
        uid = users[0].id
        await notification_service.create_notification(uid, "a")
        await notification_service.create_notification(uid, "b", notification_type=NotificationType.WARNING.value)

        assert await notification_service.unread_count(uid) == 2
        assert await notification_service.mark_all_as_read(uid) == 2

        stats = await notification_service.stats(uid)
        assert stats.total == 2 and stats.read == 2 and stats.unread == 0
        assert stats.by_type == {"info": 1, "warning": 1}

        assert await notification_service.clear_read(uid) == 2
        assert (await notification_service.list_notifications(uid, PageQuery())).total == 0
