"""
Base Django settings for the peahdb backend.

Layout
------
- Split settings: `base.py` (shared), `dev.py` (developer overrides), `prod.py` (hardened).
- `environ` is used to source configuration; a local `.env` is optional in dev.

API stack
---------
- Django 5.x + DRF + django-filter + drf-spectacular.
- Endpoints are unauthenticated service APIs fronted by an ingress; health
  health checks must stay reachable without credentials.

Observability
-------------
- `core.middleware.RequestInfoMiddleware` captures request metadata, measures
  duration and hands a complete record to `core.audit.AuditService`. Every log
  record carries the request id through `core.logging.RequestIDFilter`.
"""

from pathlib import Path
import environ

# ---------------------------------------------------------------------
# Paths & Env
# ---------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env = environ.Env(DEBUG=(bool, False))
env_file = BASE_DIR / ".env"
if env_file.exists():
    environ.Env.read_env(str(env_file))

# ---------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------
SECRET_KEY = env("SECRET_KEY", default="dev-insecure-change-me")
DEBUG = env.bool("DEBUG", False)

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["127.0.0.1", "localhost", "testserver"])

# ---------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------
INSTALLED_APPS = [
    # Django apps
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",
    "django_filters",
    "drf_spectacular",

    # Local apps
    "core",
    "accounts",
    "stacks",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Request auditing: last so it sees the authenticated user and final status
    "core.middleware.RequestInfoMiddleware",
]

ROOT_URLCONF = "peahdb.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "peahdb.wsgi.application"

# ---------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------
DATABASES = {
    "default": env.db(
        "DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
    )
}

# ---------------------------------------------------------------------
# Internationalization
# ---------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ---------------------------------------------------------------------
# Static
# ---------------------------------------------------------------------
STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---------------------------------------------------------------------
# DRF & API Schema
# ---------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
        "rest_framework.filters.SearchFilter",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "peahdb API",
    "DESCRIPTION": "Users, environment/stack/app configuration, monitoring and request logs.",
    "VERSION": "0.1.0",
    "SERVERS": [
        {"url": "http://127.0.0.1:8080", "description": "Local Dev"},
        {"url": "/", "description": "Current"},
    ],
    "OPERATION_ID_DUPLICATE_MODE": "suffix",
    "SWAGGER_UI_SETTINGS": {"persistAuthorization": True},
}

# ---------------------------------------------------------------------
# Request auditing
# ---------------------------------------------------------------------
# Most recent request records kept in memory by core.request_log
REQUEST_LOG_MAX_ENTRIES = env.int("REQUEST_LOG_MAX_ENTRIES", default=1000)
# Requests slower than this are reported as SLOW_REQUEST security events
AUDIT_SLOW_REQUEST_MS = env.int("AUDIT_SLOW_REQUEST_MS", default=10_000)

# ---------------------------------------------------------------------
# Values generation
# ---------------------------------------------------------------------
PEAHDB_TIMEZONE = env("PEAHDB_TIMEZONE", default="Europe/Lisbon")
# Environment name -> Kubernetes namespace, for environments not deployed
# into a namespace of their own name. Format: "prod=lolmeida,qa=quality"
PEAHDB_NAMESPACE_OVERRIDES = env.dict("PEAHDB_NAMESPACE_OVERRIDES", default={"prod": "lolmeida"})
# Ingress hosts are "<app name>.<domain>"
PEAHDB_INGRESS_DOMAIN = env("PEAHDB_INGRESS_DOMAIN", default="lolmeida.com")

# ---------------------------------------------------------------------
# Security defaults (safe baseline; prod hardening in prod.py)
# ---------------------------------------------------------------------
SESSION_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SAMESITE = "Lax"
X_FRAME_OPTIONS = "DENY"

# ---------------------------------------------------------------------
# Logging (observability)
# ---------------------------------------------------------------------
# The RequestIDFilter injects `request_id` even for logs outside HTTP contexts.
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "core.logging.RequestIDFilter"},
    },
    "formatters": {
        "structured": {
            "format": "%(asctime)s level=%(levelname)s logger=%(name)s "
                      "request_id=%(request_id)s message=%(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["request_id"],
            "formatter": "structured",
        },
    },
    "loggers": {
        # Request/response lines from the interceptor.
        "peahdb.request": {"handlers": ["console"], "level": "INFO", "propagate": False},
        # Audit, performance, security and usage lines.
        "peahdb.audit": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "peahdb.health": {"handlers": ["console"], "level": "INFO", "propagate": False},
        # Configuration changes made through /api/config/.
        "stacks": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
