"""AppConfig for the `core` app.

Scope
-----
Holds shared infrastructure pieces used across the project:
- abstract base entities (identity and timestamps),
- request auditing (middleware, request-info extraction, audit service, request log),
- logging helpers (request-id),
- liveness/readiness health checks and monitoring endpoints.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Standard Django AppConfig; keep defaults lightweight."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
