"""
Request metadata capture for auditing.

Contents
--------
- `RequestInfo`: one record per HTTP request. Built before the view runs and
  completed after the response is produced (duration, status, size).
- `RequestInfoExtractor`: reads a Django `HttpRequest` into a `RequestInfo`
  (client IP behind proxies, User-Agent parsing, custom headers, ids).

Correlation
-----------
`RequestInfoExtractor.complete()` copies the record captured before the view
and only fills response fields, so the request id, timestamp and every
request-side value are the same in the "Request:" and "Response:" log lines and
in the audited record.
"""

from __future__ import annotations

import dataclasses
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from django.http import HttpRequest
from django.utils import timezone

UNKNOWN = "Unknown"

# Allow simple, safe request-id tokens coming from clients
_ALLOWED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._\-]{1,200}$")

# Browser patterns; Edge and Opera UAs also carry "Chrome/", so they go first.
_BROWSER_PATTERNS = (
    ("Edge", re.compile(r"Edg/([\d.]+)")),
    ("Opera", re.compile(r"OPR/([\d.]+)")),
    ("Chrome", re.compile(r"Chrome/([\d.]+)")),
    ("Firefox", re.compile(r"Firefox/([\d.]+)")),
    ("Safari", re.compile(r"Version/([\d.]+).*Safari")),
)

_WINDOWS = re.compile(r"Windows NT ([\d.]+)")
_MACOS = re.compile(r"Mac OS X ([\d_]+)")
_ANDROID = re.compile(r"Android ([\d.]+)")
_IOS = re.compile(r"OS ([\d_]+)")
_LINUX = re.compile(r"Linux")

_BOT = re.compile(r"bot|crawler|spider|scraper", re.IGNORECASE)
_TABLET = re.compile(r"iPad|Android.*Tablet")
_MOBILE = re.compile(r"Mobile|Android|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini")

_API_VERSION = re.compile(r"/(v\d+)(?:/|$)")

# Proxy headers consulted for the client address, in order of trust.
_FORWARDED_HEADERS = ("X-Forwarded-For", "X-Real-IP", "X-Forwarded", "X-Cluster-Client-IP")
_CUSTOM_HEADER_PREFIXES = ("x-", "custom-", "app-")


@dataclass
class RequestInfo:
    """Everything the audit layer knows about a single request."""

    user_ip: str = "unknown"
    real_ip: str = "unknown"
    user_agent: Optional[str] = None
    http_method: str = ""
    request_uri: str = ""
    query_string: Optional[str] = None
    referer: Optional[str] = None
    accept_language: Optional[str] = None
    content_type: Optional[str] = None
    session_id: Optional[str] = None
    timestamp: datetime = field(default_factory=timezone.now)
    # Response side (filled by RequestInfoExtractor.complete)
    duration: Optional[int] = None
    response_status: Optional[int] = None
    response_size: Optional[int] = None
    # Parsed from User-Agent
    browser_name: str = UNKNOWN
    browser_version: str = UNKNOWN
    operating_system: str = UNKNOWN
    device_type: str = UNKNOWN
    # Geolocation is not resolved; kept for record shape compatibility
    country: Optional[str] = None
    city: Optional[str] = None
    custom_headers: Dict[str, str] = field(default_factory=dict)
    is_secure: bool = False
    server_name: Optional[str] = None
    server_port: Optional[int] = None
    authenticated_user: Optional[str] = None
    user_roles: Optional[str] = None
    is_success: Optional[bool] = None
    error_message: Optional[str] = None
    request_id: str = ""
    api_version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly dict (timestamp as ISO-8601)."""
        data = dataclasses.asdict(self)
        data["timestamp"] = self.timestamp.isoformat() if self.timestamp else None
        return data


def coerce_request_id(raw: str | None) -> str:
    """
    Reuse a client-provided request id when it is a safe token, or generate one.
    """
    if raw and _ALLOWED_REQUEST_ID.match(raw):
        return raw
    return f"req_{uuid.uuid4().hex[:8]}"


class RequestInfoExtractor:
    """
    Build `RequestInfo` records from Django requests.

    Stateless; a single module-level instance (`request_info_extractor`) is
    shared by the middleware and the monitoring views.
    """

    def extract_request_info(self, request: HttpRequest) -> RequestInfo:
        """Capture the request-side fields. Response fields stay unset."""
        user_agent = request.headers.get("User-Agent")
        user_ip = self.extract_user_ip(request)
        browser_name, browser_version = self.parse_browser(user_agent)
        query_string = request.META.get("QUERY_STRING") or None

        return RequestInfo(
            user_ip=user_ip,
            real_ip=user_ip,
            user_agent=user_agent,
            http_method=request.method or "",
            request_uri=request.path,
            query_string=query_string,
            referer=request.headers.get("Referer"),
            accept_language=request.headers.get("Accept-Language"),
            content_type=request.headers.get("Content-Type"),
            session_id=self._session_id(request),
            timestamp=timezone.now(),
            browser_name=browser_name,
            browser_version=browser_version,
            operating_system=self.parse_operating_system(user_agent),
            device_type=self.parse_device_type(user_agent),
            custom_headers=self.extract_custom_headers(request),
            is_secure=request.is_secure(),
            server_name=request.META.get("SERVER_NAME"),
            server_port=self._server_port(request),
            authenticated_user=self._authenticated_user(request),
            user_roles=self._user_roles(request),
            request_id=getattr(request, "request_id", None)
            or coerce_request_id(request.headers.get("X-Request-ID")),
            api_version=self._api_version(request.path),
        )

    def complete(
        self,
        info: RequestInfo,
        duration: int,
        response_status: Optional[int],
        response_size: int,
        error_message: Optional[str] = None,
    ) -> RequestInfo:
        """Return a copy of `info` with the response-side fields filled in."""
        is_success = response_status is not None and 200 <= response_status < 300
        return dataclasses.replace(
            info,
            duration=duration,
            response_status=response_status,
            response_size=response_size,
            is_success=is_success,
            error_message=error_message,
        )

    # ---- client address ------------------------------------------------------

    def extract_user_ip(self, request: HttpRequest) -> str:
        """
        Client IP, honoring proxy headers first.

        X-Forwarded-For may hold a chain ("client, proxy1, proxy2"); the first
        entry is the client. Empty or "unknown" values are skipped.
        """
        for header in _FORWARDED_HEADERS:
            value = request.headers.get(header)
            if value and value.lower() != "unknown":
                return value.split(",")[0].strip()
        return request.META.get("REMOTE_ADDR") or "unknown"

    # ---- User-Agent parsing ---------------------------------------------------

    def parse_browser(self, user_agent: Optional[str]) -> tuple[str, str]:
        """(browser name, browser version), both "Unknown" when unrecognized."""
        if not user_agent:
            return UNKNOWN, UNKNOWN
        for name, pattern in _BROWSER_PATTERNS:
            match = pattern.search(user_agent)
            if match:
                return name, match.group(1)
        return UNKNOWN, UNKNOWN

    def parse_operating_system(self, user_agent: Optional[str]) -> str:
        if not user_agent:
            return UNKNOWN
        match = _WINDOWS.search(user_agent)
        if match:
            return f"Windows {match.group(1)}"
        match = _MACOS.search(user_agent)
        if match:
            return f"macOS {match.group(1).replace('_', '.')}"
        match = _ANDROID.search(user_agent)
        if match:
            return f"Android {match.group(1)}"
        match = _IOS.search(user_agent)
        if match:
            return f"iOS {match.group(1).replace('_', '.')}"
        if _LINUX.search(user_agent):
            return "Linux"
        return UNKNOWN

    def parse_device_type(self, user_agent: Optional[str]) -> str:
        if not user_agent:
            return UNKNOWN
        if _BOT.search(user_agent):
            return "Bot"
        if _TABLET.search(user_agent):
            return "Tablet"
        if _MOBILE.search(user_agent):
            return "Mobile"
        return "Desktop"

    def is_bot(self, user_agent: Optional[str]) -> bool:
        return bool(user_agent) and bool(_BOT.search(user_agent))

    # ---- headers & identity ---------------------------------------------------

    def extract_custom_headers(self, request: HttpRequest) -> Dict[str, str]:
        """Non-standard headers: names starting with X-, Custom- or App-."""
        return {
            name: value
            for name, value in request.headers.items()
            if name.lower().startswith(_CUSTOM_HEADER_PREFIXES)
        }

    def _session_id(self, request: HttpRequest) -> str:
        session = getattr(request, "session", None)
        key = getattr(session, "session_key", None) if session is not None else None
        return key or f"session_{uuid.uuid4().hex[:8]}"

    def _server_port(self, request: HttpRequest) -> Optional[int]:
        try:
            return int(request.META.get("SERVER_PORT"))
        except (TypeError, ValueError):
            return None

    def _authenticated_user(self, request: HttpRequest) -> Optional[str]:
        user = getattr(request, "user", None)
        if user is not None and getattr(user, "is_authenticated", False):
            return user.get_username()
        return None

    def _user_roles(self, request: HttpRequest) -> Optional[str]:
        user = getattr(request, "user", None)
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        roles = []
        if getattr(user, "is_superuser", False):
            roles.append("superuser")
        if getattr(user, "is_staff", False):
            roles.append("staff")
        return ",".join(roles) or "user"

    def _api_version(self, path: str) -> Optional[str]:
        match = _API_VERSION.search(path)
        return match.group(1) if match else None


request_info_extractor = RequestInfoExtractor()
