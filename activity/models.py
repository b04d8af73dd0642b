"""Activity models: per-user notifications and personal calendar tasks."""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Notification(models.Model):
    TYPE_SUBMISSION = "submission"
    TYPE_REPLY = "reply"
    TYPE_ENROLLMENT = "enrollment"
    TYPE_SYSTEM = "system"
    TYPE_CHOICES = (
        (TYPE_SUBMISSION, "Submission"),
        (TYPE_REPLY, "Reply"),
        (TYPE_ENROLLMENT, "Enrollment"),
        (TYPE_SYSTEM, "System"),
    )

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="notifications_actor")
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_SYSTEM)
    course = models.ForeignKey("courses.Course", on_delete=models.CASCADE, null=True, blank=True, related_name="notifications")
    message = models.CharField(max_length=255)
    # Client-side route the notification points at, e.g. "#/gradebook/3"
    link = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    is_read = models.BooleanField(default=False, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.user_id}:{self.type}:{self.message[:20]}"


class CalendarTask(models.Model):
    """A personal entry on an instructor's calendar."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="calendar_tasks")
    title = models.CharField(max_length=200)
    date = models.DateField()
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.user_id}:{self.date}:{self.title[:30]}"
