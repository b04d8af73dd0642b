"""Enrollment lifecycle: enroll, suspend/resume, extend, remove.

Behaviour:
- enroll: expiry is always recomputed from "now" (reset, never stacked)
  and the enrollment is reactivated. Creation is a single upsert keyed on
  (user, course) backed by a unique constraint, so concurrent requests
  cannot create duplicates.
- extend: adds days to the *stored* expiry, even when that expiry is
  already in the past. Admins who want a window starting today should
  re-enroll the user instead.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from .models import Course, Enrollment

logger = logging.getLogger(__name__)

User = get_user_model()


def compute_expiry(course: Course, now=None):
    return (now or timezone.now()) + timedelta(days=course.access_days)


def enroll(user, course: Course, *, now=None) -> tuple[Enrollment, bool]:
    """Create or refresh the enrollment of `user` in `course`.

    Returns `(enrollment, created)`. Calling twice yields one row whose
    window starts at the latest call.
    """
    now = now or timezone.now()
    enrollment, created = Enrollment.objects.update_or_create(
        user=user,
        course=course,
        defaults={"expires_at": compute_expiry(course, now), "is_active": True},
        create_defaults={"expires_at": compute_expiry(course, now), "is_active": True, "enrolled_at": now},
    )
    logger.info(
        "%s user %s in course %s until %s",
        "Enrolled" if created else "Re-enrolled",
        user.pk,
        course.pk,
        enrollment.expires_at.isoformat(),
    )
    return enrollment, created


@dataclass
class BulkEnrollmentReport:
    success_count: int = 0
    not_found: list[str] = field(default_factory=list)

    @property
    def not_found_count(self) -> int:
        return len(self.not_found)


def enroll_by_email(emails, course: Course, *, now=None) -> BulkEnrollmentReport:
    """Instructor-driven enrollment of existing accounts by email."""
    report = BulkEnrollmentReport()
    now = now or timezone.now()
    for raw in emails:
        email = (raw or "").strip()
        target = User.objects.filter(email__iexact=email).first() if email else None
        if target is None:
            report.not_found.append(email)
            continue
        enroll(target, course, now=now)
        report.success_count += 1
    return report


def set_active(enrollment: Enrollment, active: bool) -> Enrollment:
    enrollment.is_active = bool(active)
    enrollment.save(update_fields=["is_active"])
    logger.info("Enrollment %s is_active=%s", enrollment.pk, enrollment.is_active)
    return enrollment


def toggle(enrollment: Enrollment) -> Enrollment:
    return set_active(enrollment, not enrollment.is_active)


@transaction.atomic
def extend(enrollment: Enrollment, days: int) -> Enrollment:
    """Add `days` to the stored expiry (additive, under a row lock)."""
    locked = Enrollment.objects.select_for_update().get(pk=enrollment.pk)
    locked.expires_at = locked.expires_at + timedelta(days=int(days))
    locked.save(update_fields=["expires_at"])
    logger.info("Enrollment %s extended by %s days to %s", locked.pk, days, locked.expires_at.isoformat())
    enrollment.expires_at = locked.expires_at
    return locked


def update_note(enrollment: Enrollment, note: str) -> Enrollment:
    enrollment.teacher_notes = note or ""
    enrollment.save(update_fields=["teacher_notes"])
    return enrollment


def remove(enrollment: Enrollment) -> None:
    """Delete the enrollment; the user's submissions are kept."""
    logger.info("Removing enrollment %s (user %s, course %s)", enrollment.pk, enrollment.user_id, enrollment.course_id)
    enrollment.delete()
