from __future__ import annotations

from django.urls import re_path
from .consumers import CourseDiscussionConsumer


websocket_urlpatterns = [
    re_path(r"^ws/discussions/course/(?P<course_id>\d+)/$", CourseDiscussionConsumer.as_asgi()),
]
