from django.apps import AppConfig


class SystemConfig(AppConfig):
    """App configuration for global feature flags."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "system"
