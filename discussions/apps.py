from django.apps import AppConfig


class DiscussionsConfig(AppConfig):
    """App configuration for course discussions and their live feed."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "discussions"
