"""
Request/response auditing middleware.

Components
----------
- `RequestInfoMiddleware`:
    * Before the view: records a monotonic start time, reads `X-Request-ID`
      (or generates one), binds it to the logging contextvar, extracts a
      `RequestInfo` record and logs one "Request:" line.
    * After the view: computes the duration (ms), status and response size,
      completes the record, logs one "Response:" line and hands the record to
      `core.audit.AuditService`. The request id is reflected in the response.
    * When the view raises, the duration is still measured and a 500 record
      carrying the exception message is audited before the exception propagates.

Failure policy
--------------
- Extraction, logging and audit failures are logged to `peahdb.request` and
  swallowed; the HTTP response is never blocked by the audit path.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse

from .audit import audit_service
from .logging import bind_request_id, reset_request_id
from .request_info import coerce_request_id, request_info_extractor

logger = logging.getLogger("peahdb.request")


def elapsed_ms(start: Optional[float]) -> int:
    """Milliseconds since a `time.monotonic()` reading; 0 when there is none."""
    if start is None:
        return 0
    return max(0, int((time.monotonic() - start) * 1000))


def response_size(response: Optional[HttpResponse]) -> int:
    """Byte length of a rendered, non-streaming response body (else 0)."""
    if response is None or getattr(response, "streaming", False):
        return 0
    try:
        return len(response.content)
    except Exception:
        return 0


class RequestInfoMiddleware:
    """
    - Adds `request.request_id`, `request.request_start_time` and
      `request.request_info` before the view runs.
    - Adds `request.request_duration_ms` and the completed `request.request_info`
      after it, plus the `X-Request-ID` response header.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        token = self.process_request(request)
        try:
            try:
                response = self.get_response(request)
            except Exception as exc:
                self.process_response(request, None, error=exc)
                raise
            self.process_response(request, response)
            return response
        finally:
            reset_request_id(token)

    def process_request(self, request: HttpRequest):
        request.request_start_time = time.monotonic()
        rid = coerce_request_id(request.headers.get("X-Request-ID"))
        request.request_id = rid
        token = bind_request_id(rid)

        try:
            info = request_info_extractor.extract_request_info(request)
            request.request_info = info
            logger.info(
                "Request: %s %s from %s (%s) - %s %s [%s]",
                info.http_method,
                info.request_uri,
                info.user_ip,
                info.browser_name,
                info.operating_system,
                info.device_type,
                info.request_id,
            )
        except Exception as exc:
            logger.error("Failed to extract request info: %s", exc)
        return token

    def process_response(
        self,
        request: HttpRequest,
        response: Optional[HttpResponse],
        error: Optional[BaseException] = None,
    ) -> None:
        duration = elapsed_ms(getattr(request, "request_start_time", None))
        request.request_duration_ms = duration

        if response is not None:
            response.headers["X-Request-ID"] = getattr(request, "request_id", "")

        try:
            info = getattr(request, "request_info", None)
            if info is None:
                return
            status = response.status_code if response is not None else 500
            complete = request_info_extractor.complete(
                info,
                duration=duration,
                response_status=status,
                response_size=response_size(response),
                error_message=str(error) if error is not None else None,
            )
            request.request_info = complete

            logger.info(
                "Response: %s %s -> %s (%sms) [%s]",
                complete.http_method,
                complete.request_uri,
                complete.response_status,
                complete.duration,
                complete.request_id,
            )
            audit_service.process_complete_audit(complete)
        except Exception as exc:
            logger.error("Failed to process response info: %s", exc)
