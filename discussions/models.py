"""Course discussion threads."""
from __future__ import annotations

from django.conf import settings
from django.db import models

from courses.models import Course


class DiscussionTopic(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="discussion_topics")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="discussion_topics")
    title = models.CharField(max_length=200)
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.course_id}:{self.title[:30]}"


class DiscussionReply(models.Model):
    topic = models.ForeignKey(DiscussionTopic, on_delete=models.CASCADE, related_name="replies")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="discussion_replies")
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "discussion replies"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.topic_id}:{self.user_id}:{self.content[:16]}"
