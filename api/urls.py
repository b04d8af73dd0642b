"""API routes for OpenClass.

Every route answers with or without a trailing slash. Also exposes the
OpenAPI schema and interactive documentation.
"""
from django.urls import include, path, re_path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from rest_framework.routers import DefaultRouter

from . import views, views_admin, views_auth

router = DefaultRouter()
router.trailing_slash = "/?"
router.register(r"api/courses", views.CourseViewSet, basename="courses")
router.register(r"api/lessons", views.LessonViewSet, basename="lessons")
router.register(r"api/submissions", views.AssignmentSubmissionViewSet, basename="submissions")
router.register(r"api/discussions", views.DiscussionTopicViewSet, basename="discussions")
router.register(r"api/enrollments", views.EnrollmentViewSet, basename="enrollments")
router.register(r"api/notifications", views.NotificationViewSet, basename="notifications")
router.register(r"api/admin/users", views_admin.AdminUserViewSet, basename="admin-users")
router.register(r"api/admin/enrollments", views_admin.AdminEnrollmentViewSet, basename="admin-enrollments")

urlpatterns = [
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    re_path(r"^api/auth/register/?$", views_auth.register, name="auth-register"),
    re_path(r"^api/auth/login/?$", views_auth.login, name="auth-login"),
    re_path(r"^api/auth/verify/?$", views_auth.verify_email, name="auth-verify"),
    re_path(r"^api/auth/me/?$", views_auth.me, name="auth-me"),
    re_path(r"^api/settings/?$", views_admin.SettingsView.as_view(), name="settings"),
    re_path(r"^api/admin/stats/?$", views_admin.stats, name="admin-stats"),
    re_path(r"^api/student/dashboard/?$", views.dashboard, name="student-dashboard"),
    re_path(r"^api/teacher/my-courses/?$", views.teacher_courses, name="teacher-courses"),
    re_path(r"^api/teacher/students/?$", views.teacher_students, name="teacher-students"),
    re_path(r"^api/teacher/candidates/?$", views.teacher_candidates, name="teacher-candidates"),
    re_path(r"^api/teacher/discussions/all/?$", views.teacher_discussions, name="teacher-discussions"),
    re_path(r"^api/teacher/calendar/?$", views.teacher_calendar, name="teacher-calendar"),
    re_path(r"^api/teacher/calendar/tasks/?$", views.create_calendar_task, name="teacher-calendar-tasks"),
    re_path(
        r"^api/teacher/calendar/tasks/(?:task-)?(?P<task_id>[0-9]+)/?$",
        views.delete_calendar_task,
        name="teacher-calendar-task",
    ),
    re_path(r"^api/certificates/(?P<unique_id>[A-Za-z0-9-]+)/?$", views.verify_certificate, name="certificate-verify"),
    path("", include(router.urls)),
]
