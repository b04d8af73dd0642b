"""Accounts models: user profile and roles.

Defines a `UserProfile` associated one-to-one with Django's `User`,
capturing the role (student/teacher/admin) and the email verification
state. The profile is created automatically on user creation.

Deactivation uses Django's own `User.is_active` flag; accounts are never
deleted as part of the lifecycle.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Role(models.TextChoices):
    """Platform roles used for role-based guards."""

    STUDENT = "student", "Student"
    TEACHER = "teacher", "Teacher"
    ADMIN = "admin", "Admin"


class UserProfile(models.Model):
    """Profile linked to a Django auth user.

    - `role`: authorisation gate for API views
    - `is_verified` / `verification_token`: email confirmation state
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT)
    full_name = models.CharField(max_length=200, blank=True)

    is_verified = models.BooleanField(default=False)
    verification_token = models.CharField(max_length=64, blank=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover (string repr convenience)
        return f"Profile<{self.user.username}:{self.role}>"


def role_of(user) -> str | None:
    profile = getattr(user, "profile", None)
    return getattr(profile, "role", None)


def display_name(user) -> str:
    """Human name for listings; falls back to the username."""
    profile = getattr(user, "profile", None)
    return (getattr(profile, "full_name", "") or "").strip() or user.username
