from __future__ import annotations

import pytest
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import User
from django.utils import timezone
from datetime import timedelta

from accounts.models import Role
from accounts.tokens import issue_token
from courses import enrollment as lifecycle
from courses.models import Course
from discussions.consumers import CLOSE_FORBIDDEN, CLOSE_NOT_FOUND, CLOSE_UNAUTHENTICATED
from discussions.live import course_group
from config.asgi import application


@database_sync_to_async
def _setup_users_and_course():
    teacher = User.objects.create_user(username="tlive", email="tlive@example.com", password="pw")
    teacher.profile.role = Role.TEACHER; teacher.profile.save(update_fields=["role"])
    student = User.objects.create_user(username="slive", email="slive@example.com", password="pw")
    expired = User.objects.create_user(username="elive", email="elive@example.com", password="pw")
    outsider = User.objects.create_user(username="xlive", email="xlive@example.com", password="pw")
    course = Course.objects.create(owner=teacher, title="Live", description="", access_days=30)
    lifecycle.enroll(student, course)
    lifecycle.enroll(expired, course, now=timezone.now() - timedelta(days=31))
    return {
        "teacher": issue_token(teacher),
        "student": issue_token(student),
        "expired": issue_token(expired),
        "outsider": issue_token(outsider),
        "course_id": course.id,
    }


async def _connect_ws(course_id: int, token: str | None):
    path = f"/ws/discussions/course/{course_id}/"
    if token:
        path += f"?token={token}"
    comm = WebsocketCommunicator(application, path)
    connected, code = await comm.connect()
    return connected, code, comm


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
@pytest.mark.ws
async def test_enrolled_student_receives_course_events():
    ctx = await _setup_users_and_course()
    ok, _, comm = await _connect_ws(ctx["course_id"], ctx["student"])
    assert ok

    await comm.send_json_to({"type": "ping"})
    assert await comm.receive_json_from() == {"type": "pong"}

    await get_channel_layer().group_send(
        course_group(ctx["course_id"]),
        {"type": "discussion.event", "event": "topic_created", "payload": {"id": 7, "title": "Hello"}},
    )
    assert await comm.receive_json_from() == {"type": "topic_created", "data": {"id": 7, "title": "Hello"}}
    await comm.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
@pytest.mark.ws
async def test_socket_applies_the_course_gate():
    ctx = await _setup_users_and_course()

    ok, _, comm = await _connect_ws(ctx["course_id"], ctx["teacher"])
    assert ok
    await comm.disconnect()

    for token, expected in (
        (None, CLOSE_UNAUTHENTICATED),
        ("garbage", CLOSE_UNAUTHENTICATED),
        (ctx["outsider"], CLOSE_FORBIDDEN),
        (ctx["expired"], CLOSE_FORBIDDEN),
    ):
        ok, code, comm = await _connect_ws(ctx["course_id"], token)
        assert not ok
        assert code == expected
        await comm.disconnect()

    ok, code, comm = await _connect_ws(999_999, ctx["student"])
    assert not ok
    assert code == CLOSE_NOT_FOUND
    await comm.disconnect()
