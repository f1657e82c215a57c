"""Django AppConfig for the accounts app.

This app houses the `users` entity served by the `/users/` API. It is not
Django's auth user; admin and session auth keep using `django.contrib.auth`.
"""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Standard Django app config; uses BigAutoField as the default PK type."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
