"""Push discussion activity to websocket subscribers of a course."""
from __future__ import annotations

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer


def course_group(course_id: int) -> str:
    return f"discussion_course_{course_id}"


def broadcast(course_id: int, event: str, payload: dict) -> None:
    layer = get_channel_layer()
    if layer is None:
        return
    async_to_sync(layer.group_send)(
        course_group(course_id),
        {"type": "discussion.event", "event": event, "payload": payload},
    )
