"""Custom permissions for the REST API."""
from __future__ import annotations

from rest_framework.permissions import BasePermission

from courses.access import is_admin, is_instructor, require_manager, resolve_course_access
from courses.models import Course


def course_of(obj) -> Course:
    """Find the course a course-scoped object belongs to."""
    if isinstance(obj, Course):
        return obj
    if hasattr(obj, "course"):
        return obj.course
    return obj.lesson.course


class IsAdmin(BasePermission):
    message = "Access denied: Requires Admin privileges"

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsInstructor(BasePermission):
    message = "Access denied"

    def has_permission(self, request, view):
        return is_instructor(request.user)


class CanManageCourse(BasePermission):
    """Owning teacher or admin (object level)."""

    def has_object_permission(self, request, view, obj):
        require_manager(request.user, course_of(obj))
        return True


class HasCourseAccess(BasePermission):
    """The course gate. Raises the specific gate error on refusal.

    Attaches the resolved access to `request.course_access` and the
    enrollment (if any) to `request.enrollment`.
    """

    def has_object_permission(self, request, view, obj):
        access = resolve_course_access(request.user, course_of(obj))
        request.course_access = access
        request.enrollment = access.enrollment
        return True
