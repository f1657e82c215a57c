"""Django AppConfig for the stacks app (environment/stack/app configuration)."""

from django.apps import AppConfig


class StacksConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "stacks"
    verbose_name = "Deployment configuration"
