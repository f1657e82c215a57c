"""
Monitoring and request-log API views.

Monitoring (`/monitoring/...`)
------------------------------
Introspection of the *current* request as the audit layer sees it: the full
`RequestInfo`, a short summary, a health-style echo, raw headers and URI parts.
Useful when debugging proxies (forwarded IPs, custom headers).

Request logs (`/logs/...`)
--------------------------
Read access to `core.request_log.RequestLogService`: recent requests, filters
by endpoint/status/slowness, aggregate statistics, a dashboard bundle, and a
DELETE that clears the store.

Security
--------
Both surfaces expose client IPs and headers; deployments should keep them
behind the internal ingress.
"""

from __future__ import annotations

import logging

from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .request_info import RequestInfo, request_info_extractor
from .request_log import request_log_service

logger = logging.getLogger("peahdb.request")


def _current_request_info(request) -> RequestInfo:
    """The record captured by the middleware, or a fresh extraction."""
    info = getattr(request._request, "request_info", None)
    if info is None:
        info = request_info_extractor.extract_request_info(request._request)
    return info


def _error(message: str) -> Response:
    return Response({"detail": message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _records(items) -> list:
    return [item.to_dict() for item in items]


# ==============================================================================
# Monitoring
# ==============================================================================

class MonitoringView(APIView):
    permission_classes = [permissions.AllowAny]


class RequestInfoView(MonitoringView):
    @extend_schema(
        tags=["Monitoring"],
        operation_id="monitoring_request_info",
        summary="Full request information for the current request",
        responses={200: OpenApiResponse(description="RequestInfo record"), 500: OpenApiResponse(description="Extraction failed")},
    )
    def get(self, request, *args, **kwargs):
        try:
            return Response(_current_request_info(request).to_dict())
        except Exception as exc:
            logger.error("Failed to extract request info: %s", exc)
            return _error(f"Failed to extract request info: {exc}")


class RequestSummaryView(MonitoringView):
    @extend_schema(
        tags=["Monitoring"],
        operation_id="monitoring_request_summary",
        summary="Most relevant request fields only",
    )
    def get(self, request, *args, **kwargs):
        try:
            info = _current_request_info(request)
        except Exception as exc:
            logger.error("Failed to extract request summary: %s", exc)
            return _error(f"Failed to extract request summary: {exc}")
        return Response(
            {
                "requestId": info.request_id,
                "method": info.http_method,
                "uri": info.request_uri,
                "userIp": info.user_ip,
                "userAgent": info.user_agent,
                "browser": info.browser_name,
                "os": info.operating_system,
                "deviceType": info.device_type,
                "timestamp": info.timestamp.isoformat(),
            }
        )


class MonitoringHealthView(MonitoringView):
    @extend_schema(
        tags=["Monitoring"],
        operation_id="monitoring_health",
        summary="Health echo with server and request information",
    )
    def get(self, request, *args, **kwargs):
        try:
            info = _current_request_info(request)
        except Exception as exc:
            logger.error("Failed to extract health info: %s", exc)
            return Response(
                {
                    "status": "ERROR",
                    "message": f"Failed to extract health info: {exc}",
                    "timestamp": timezone.now().isoformat(),
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(
            {
                "status": "OK",
                "timestamp": info.timestamp.isoformat(),
                "requestId": info.request_id,
                "serverInfo": {
                    "serverName": info.server_name or "unknown",
                    "serverPort": info.server_port if info.server_port is not None else -1,
                },
                "requestInfo": {
                    "method": info.http_method,
                    "uri": info.request_uri,
                    "userIp": info.user_ip,
                    "userAgent": info.user_agent or "unknown",
                },
            }
        )


class HeadersView(MonitoringView):
    @extend_schema(tags=["Monitoring"], operation_id="monitoring_headers", summary="Request headers")
    def get(self, request, *args, **kwargs):
        return Response(dict(request.headers.items()))


class UriInfoView(MonitoringView):
    @extend_schema(tags=["Monitoring"], operation_id="monitoring_uri_info", summary="Request URI parts")
    def get(self, request, *args, **kwargs):
        return Response(
            {
                "path": request.path,
                "absolutePath": request.build_absolute_uri(request.path),
                "baseUri": request.build_absolute_uri("/"),
                "requestUri": request.build_absolute_uri(),
                "queryParams": {k: request.query_params.getlist(k) for k in request.query_params},
                "pathParams": dict(kwargs),
            }
        )


# ==============================================================================
# Request logs
# ==============================================================================

class LogsView(APIView):
    permission_classes = [permissions.AllowAny]

    @staticmethod
    def _int_param(request, name: str, default: int) -> int:
        raw = request.query_params.get(name)
        if raw in (None, ""):
            return default
        return int(raw)


class RecentLogsView(LogsView):
    @extend_schema(
        tags=["Logs"],
        operation_id="logs_recent",
        parameters=[OpenApiParameter(name="limit", type=OpenApiTypes.INT, required=False, description="Default 50")],
        responses={200: OpenApiResponse(description="Newest request records first"), 400: OpenApiResponse(description="Bad limit")},
    )
    def get(self, request, *args, **kwargs):
        try:
            limit = self._int_param(request, "limit", 50)
        except ValueError:
            return Response({"detail": "limit must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(_records(request_log_service.get_recent_requests(limit)))


class EndpointLogsView(LogsView):
    @extend_schema(tags=["Logs"], operation_id="logs_by_endpoint")
    def get(self, request, endpoint: str, *args, **kwargs):
        return Response(_records(request_log_service.get_requests_by_endpoint(endpoint)))


class StatusLogsView(LogsView):
    @extend_schema(tags=["Logs"], operation_id="logs_by_status")
    def get(self, request, status_code: int, *args, **kwargs):
        return Response(_records(request_log_service.get_requests_by_status(status_code)))


class SlowLogsView(LogsView):
    @extend_schema(
        tags=["Logs"],
        operation_id="logs_slow",
        parameters=[OpenApiParameter(name="threshold", type=OpenApiTypes.INT, required=False, description="Milliseconds, default 1000")],
    )
    def get(self, request, *args, **kwargs):
        try:
            threshold = self._int_param(request, "threshold", 1000)
        except ValueError:
            return Response({"detail": "threshold must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(_records(request_log_service.get_slow_requests(threshold)))


class StatisticsView(LogsView):
    @extend_schema(tags=["Logs"], operation_id="logs_statistics")
    def get(self, request, *args, **kwargs):
        return Response(request_log_service.get_statistics())


class PerformanceView(LogsView):
    @extend_schema(tags=["Logs"], operation_id="logs_performance")
    def get(self, request, *args, **kwargs):
        return Response(request_log_service.get_performance_summary())


class DashboardView(LogsView):
    @extend_schema(tags=["Logs"], operation_id="logs_dashboard", summary="Statistics, performance, recent and slow requests")
    def get(self, request, *args, **kwargs):
        try:
            payload = {
                "statistics": request_log_service.get_statistics(),
                "performance": request_log_service.get_performance_summary(),
                "recentRequests": _records(request_log_service.get_recent_requests(10)),
                "slowRequests": _records(request_log_service.get_slow_requests(500)),
            }
        except Exception as exc:
            logger.error("Failed to fetch dashboard data: %s", exc)
            return _error(f"Failed to fetch dashboard data: {exc}")
        return Response(payload)


class ClearLogsView(LogsView):
    @extend_schema(tags=["Logs"], operation_id="logs_clear", responses={200: OpenApiResponse(description="Logs cleared")})
    def delete(self, request, *args, **kwargs):
        request_log_service.clear_logs()
        return Response({"message": "All logs cleared successfully"})
