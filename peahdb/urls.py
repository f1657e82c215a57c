"""
Project URL configuration.

Surfaces
--------
- `/admin/`: Django admin (back-office only).
- `/users/`: users CRUD + search (router-driven ViewSet).
- `/api/config/`: environments, stacks, apps and generated values.
- `/health/`, `/health/live/`, `/health/ready/`: orchestrator health checks.
- `/monitoring/`: introspection of the current request.
- `/logs/`: recent request records and statistics.
- `/api/schema/`, `/api/docs/`, `/api/redoc/`: OpenAPI schema & UIs.
"""

from __future__ import annotations

from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

from accounts.views import UserViewSet
from core import api as core_api
from core import views as core_views

router = DefaultRouter()
router.register(r"users", UserViewSet, basename="user")

monitoring_patterns = [
    path("request-info/", core_api.RequestInfoView.as_view(), name="monitoring-request-info"),
    path("request-summary/", core_api.RequestSummaryView.as_view(), name="monitoring-request-summary"),
    path("health/", core_api.MonitoringHealthView.as_view(), name="monitoring-health"),
    path("headers/", core_api.HeadersView.as_view(), name="monitoring-headers"),
    path("uri-info/", core_api.UriInfoView.as_view(), name="monitoring-uri-info"),
]

logs_patterns = [
    path("recent/", core_api.RecentLogsView.as_view(), name="logs-recent"),
    path("endpoint/<str:endpoint>/", core_api.EndpointLogsView.as_view(), name="logs-endpoint"),
    path("status/<int:status_code>/", core_api.StatusLogsView.as_view(), name="logs-status"),
    path("slow/", core_api.SlowLogsView.as_view(), name="logs-slow"),
    path("statistics/", core_api.StatisticsView.as_view(), name="logs-statistics"),
    path("performance/", core_api.PerformanceView.as_view(), name="logs-performance"),
    path("dashboard/", core_api.DashboardView.as_view(), name="logs-dashboard"),
    path("clear/", core_api.ClearLogsView.as_view(), name="logs-clear"),
]

urlpatterns = [
    path("admin/", admin.site.urls),

    # OpenAPI / Docs
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    # Health checks (plain Django views)
    path("health/", core_views.health, name="health"),
    path("health/live/", core_views.health_live, name="health-live"),
    path("health/ready/", core_views.health_ready, name="health-ready"),

    path("monitoring/", include(monitoring_patterns)),
    path("logs/", include(logs_patterns)),
    path("api/config/", include("stacks.urls")),

    # Router-driven API
    path("", include(router.urls)),
]
