"""
Audit processing for completed requests.

`AuditService.process_complete_audit()` is called by the request interceptor
once per request with a complete `RequestInfo`. It fans out to independent
steps; each step catches its own failure and logs a warning so one broken step
never hides the others, and nothing here can fail the HTTP response.

Log channels
------------
All lines go to the `peahdb.audit` logger with a leading tag:
`AUDIT`, `PERFORMANCE`, `SECURITY`, `USAGE`, `API`.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from django.conf import settings

from .request_info import RequestInfo
from .request_log import RequestLogService, request_log_service

logger = logging.getLogger("peahdb.audit")

# Upper bounds (exclusive, ms) for each performance level.
PERFORMANCE_LEVELS = (
    (100, "EXCELLENT"),
    (500, "GOOD"),
    (1000, "ACCEPTABLE"),
    (5000, "SLOW"),
)


def performance_level(duration_ms: int) -> str:
    for bound, level in PERFORMANCE_LEVELS:
        if duration_ms < bound:
            return level
    return "VERY_SLOW"


class AuditService:
    """Audit sink for request records."""

    def __init__(self, request_log: Optional[RequestLogService] = None) -> None:
        self.request_log = request_log or request_log_service

    def process_complete_audit(self, info: RequestInfo) -> None:
        self.log_request(info)
        self.log_performance_metrics(info)
        self.detect_suspicious_activity(info)
        self.generate_usage_stats(info)
        self.log_api_usage(info)
        self.store_request_info(info)

    def log_request(self, info: RequestInfo) -> None:
        try:
            logger.info(
                "AUDIT - Request Details: ID=%s, Method=%s, URI=%s, IP=%s, UserAgent=%s, "
                "Browser=%s %s, OS=%s, Device=%s, Status=%s, Duration=%sms",
                info.request_id,
                info.http_method,
                info.request_uri,
                info.user_ip,
                info.user_agent,
                info.browser_name,
                info.browser_version,
                info.operating_system,
                info.device_type,
                info.response_status,
                info.duration,
            )
        except Exception as exc:
            logger.warning("Failed to log request audit: %s", exc)

    def log_performance_metrics(self, info: RequestInfo) -> None:
        try:
            if info.duration is None:
                return
            logger.info(
                "PERFORMANCE - %s: %s %s took %sms | IP=%s, Device=%s",
                performance_level(info.duration),
                info.http_method,
                info.request_uri,
                info.duration,
                info.user_ip,
                info.device_type,
            )
        except Exception as exc:
            logger.warning("Failed to log performance metrics: %s", exc)

    def log_security_event(self, info: RequestInfo, event_type: str, description: str) -> None:
        try:
            logger.warning(
                "SECURITY - %s: %s | IP=%s, UserAgent=%s, URI=%s, RequestID=%s",
                event_type,
                description,
                info.user_ip,
                info.user_agent,
                info.request_uri,
                info.request_id,
            )
        except Exception as exc:
            logger.error("Failed to log security event: %s", exc)

    def detect_suspicious_activity(self, info: RequestInfo) -> List[str]:
        """Log and return the security event types raised by this request."""
        events: List[str] = []
        try:
            slow_ms = int(getattr(settings, "AUDIT_SLOW_REQUEST_MS", 10_000))
            if info.device_type == "Bot":
                events.append("BOT_DETECTED")
                self.log_security_event(info, "BOT_DETECTED", "Bot user agent detected")
            if info.duration is not None and info.duration > slow_ms:
                events.append("SLOW_REQUEST")
                self.log_security_event(info, "SLOW_REQUEST", f"Request took more than {slow_ms}ms")
            if info.response_status is not None and info.response_status >= 400:
                events.append("ERROR_RESPONSE")
                self.log_security_event(info, "ERROR_RESPONSE", f"Error response: {info.response_status}")
            if not info.user_agent:
                events.append("MISSING_USER_AGENT")
                self.log_security_event(info, "MISSING_USER_AGENT", "Request without User-Agent header")
        except Exception as exc:
            logger.warning("Failed to detect suspicious activity: %s", exc)
        return events

    def generate_usage_stats(self, info: RequestInfo) -> None:
        try:
            logger.info(
                "USAGE - Browser: %s, OS: %s, Device: %s, Country: %s, Language: %s",
                info.browser_name,
                info.operating_system,
                info.device_type,
                info.country,
                info.accept_language,
            )
        except Exception as exc:
            logger.warning("Failed to generate usage stats: %s", exc)

    def log_api_usage(self, info: RequestInfo) -> None:
        try:
            if info.request_uri and info.request_uri.startswith("/api/"):
                logger.info(
                    "API - %s %s | Status: %s | Duration: %sms | IP: %s",
                    info.http_method,
                    info.request_uri,
                    info.response_status,
                    info.duration,
                    info.user_ip,
                )
        except Exception as exc:
            logger.warning("Failed to log API usage: %s", exc)

    def store_request_info(self, info: RequestInfo) -> None:
        try:
            self.request_log.store_request(info)
        except Exception as exc:
            logger.error("Failed to store request info: %s", exc)


audit_service = AuditService()
