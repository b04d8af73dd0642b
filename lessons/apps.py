from django.apps import AppConfig


class LessonsConfig(AppConfig):
    """App configuration for lessons, quizzes, submissions and grading."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "lessons"
