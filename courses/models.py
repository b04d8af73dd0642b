"""Courses and enrollments models.

Defines a `Course` owned by a teacher and an `Enrollment` granting a user
time-bounded, switchable access to it. At most one enrollment exists per
(user, course); re-enrolling updates that row.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone


class Course(models.Model):
    """A course authored by a teacher user."""

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="owned_courses")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    thumbnail_url = models.CharField(max_length=500, blank=True)
    video_embed_url = models.CharField(max_length=500, blank=True)
    # Length of the access window granted by each (re-)enrollment
    access_days = models.PositiveIntegerField(default=365)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["title"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title}"

    def is_owner(self, user) -> bool:
        return bool(user and user.is_authenticated and self.owner_id == user.id)


class Enrollment(models.Model):
    """Link a user to a course for an access window.

    `is_active` is a manual suspend switch independent of `expires_at`.
    Deleting the row does not touch the user's submissions.
    """

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="enrollments")
    enrolled_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    teacher_notes = models.TextField(blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "course"], name="unique_enrollment_per_user_course"),
        ]
        ordering = ["course_id", "user_id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.user_id}->{self.course_id}"

    def is_expired(self, now=None) -> bool:
        return self.expires_at < (now or timezone.now())


# Register models kept in sibling modules with the app
from .models_feedback import CourseFeedback  # noqa: E402,F401
from .models_certificate import Certificate  # noqa: E402,F401
