from __future__ import annotations

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from rest_framework.exceptions import APIException

from courses.access import resolve_course_access
from courses.models import Course
from .live import course_group

CLOSE_UNAUTHENTICATED = 4001
CLOSE_FORBIDDEN = 4003
CLOSE_NOT_FOUND = 4004


@database_sync_to_async
def _course_gate(user, course_id: int) -> int | None:
    """Return a close code when the user may not follow this course, else None."""
    if not getattr(user, "is_authenticated", False):
        return CLOSE_UNAUTHENTICATED
    course = Course.objects.filter(pk=course_id).first()
    if course is None:
        return CLOSE_NOT_FOUND
    try:
        resolve_course_access(user, course)
    except APIException:
        return CLOSE_FORBIDDEN
    return None


class CourseDiscussionConsumer(AsyncJsonWebsocketConsumer):
    """Read-only live feed of new topics and replies for one course.

    Posting goes through the REST API, which broadcasts to this group.
    """

    async def connect(self):
        self.course_id = int(self.scope["url_route"]["kwargs"]["course_id"])
        self.group_name = None
        close_code = await _course_gate(self.scope.get("user"), self.course_id)
        if close_code is not None:
            await self.close(code=close_code)
            return
        self.group_name = course_group(self.course_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def receive_json(self, content, **kwargs):
        if (content or {}).get("type") == "ping":
            await self.send_json({"type": "pong"})

    async def discussion_event(self, event):
        await self.send_json({"type": event["event"], "data": event["payload"]})

    async def disconnect(self, code):
        if self.group_name:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
