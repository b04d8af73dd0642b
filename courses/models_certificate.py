"""Completion certificates.

Only the record is kept here; rendering a printable document happens
outside this service. `unique_id` is the public verification code.
"""
from __future__ import annotations

import secrets

from django.conf import settings
from django.db import models
from django.utils import timezone

from .models import Course


def new_certificate_code() -> str:
    return f"OC-{secrets.token_hex(6).upper()}"


class Certificate(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="certificates")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="certificates")
    unique_id = models.CharField(max_length=32, unique=True, default=new_certificate_code)
    issued_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "course"], name="unique_certificate_per_user_course"),
        ]
        ordering = ["-issued_at"]

    def __str__(self) -> str:  # pragma: no cover
        return self.unique_id
