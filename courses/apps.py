from django.apps import AppConfig


class CoursesConfig(AppConfig):
    """App configuration for courses, enrollments, feedback and certificates."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "courses"
