"""Course access gate.

One capability predicate (`can_manage_course`) decides who administers a
course; the enrollment manager, the gradebook and every course-scoped
route use it. Everyone else goes through a single canonical
enrollment check: the row must exist, be active and not be expired.
"""
from __future__ import annotations

from dataclasses import dataclass

from django.utils import timezone

from accounts.models import Role, role_of
from api.exceptions import AccessExpired, EnrollmentInactive, NotEnrolled, Unauthorized
from .models import Course, Enrollment


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and role_of(user) == Role.ADMIN)


def is_instructor(user) -> bool:
    """Teachers and admins: may author courses and see instructor views."""
    return bool(user and user.is_authenticated and role_of(user) in (Role.TEACHER, Role.ADMIN))


def can_manage_course(user, course: Course) -> bool:
    """Owning teacher or any admin."""
    if not (user and user.is_authenticated):
        return False
    if role_of(user) == Role.ADMIN:
        return True
    return role_of(user) == Role.TEACHER and course.owner_id == user.id


def require_manager(user, course: Course) -> None:
    if not can_manage_course(user, course):
        raise Unauthorized()


@dataclass(frozen=True)
class CourseAccess:
    course: Course
    enrollment: Enrollment | None
    manager: bool


def check_enrollment(enrollment: Enrollment | None, *, now=None) -> Enrollment:
    if enrollment is None:
        raise NotEnrolled()
    if not enrollment.is_active:
        raise EnrollmentInactive()
    if enrollment.is_expired(now or timezone.now()):
        raise AccessExpired()
    return enrollment


def resolve_course_access(user, course: Course, *, now=None) -> CourseAccess:
    """Decide whether `user` may use `course`; raise a gate error if not.

    Managers bypass enrollment entirely, even with no row or past expiry.
    """
    if can_manage_course(user, course):
        enrollment = Enrollment.objects.filter(user=user, course=course).first()
        return CourseAccess(course=course, enrollment=enrollment, manager=True)
    enrollment = Enrollment.objects.filter(user=user, course=course).first()
    return CourseAccess(course=course, enrollment=check_enrollment(enrollment, now=now), manager=False)
