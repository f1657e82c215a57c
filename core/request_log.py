"""
In-memory request log with query helpers and aggregate statistics.

The store keeps the most recent `REQUEST_LOG_MAX_ENTRIES` completed
`RequestInfo` records (oldest are evicted first). It backs the `/logs/`
endpoints and is fed by `AuditService.store_request_info`.

Statistics are cumulative since the last clear and kept in constant space:
counters and per-endpoint duration aggregates (count/total/min/max). Endpoint
keys collapse numeric path segments (`/users/42/` counts as `/users/{id}/`),
and each counter tracks at most `max_entries` distinct keys; anything past
that is counted under `OTHER_KEY`.

Thread safety
-------------
WSGI servers may run requests on several threads; every read and write takes
the same lock, and readers work on a snapshot.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter, deque
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Deque, Dict, List, Optional

from django.conf import settings
from django.utils import timezone

from .request_info import RequestInfo

logger = logging.getLogger("peahdb.audit")

OTHER_KEY = "(other)"


def endpoint_key(uri: Optional[str]) -> str:
    """Statistics key for a URI: query dropped, numeric segments as `{id}`."""
    path = (uri or "").split("?", 1)[0]
    return "/".join("{id}" if part.isdigit() else part for part in path.split("/"))


@dataclass
class DurationStats:
    count: int = 0
    total: int = 0
    minimum: int = 0
    maximum: int = 0

    def add(self, duration: int) -> None:
        if self.count == 0:
            self.minimum = self.maximum = duration
        else:
            self.minimum = min(self.minimum, duration)
            self.maximum = max(self.maximum, duration)
        self.count += 1
        self.total += duration

    def as_dict(self) -> Dict[str, int]:
        return {
            "avgDuration": round(self.total / self.count),
            "maxDuration": self.maximum,
            "minDuration": self.minimum,
            "requestCount": self.count,
        }


class RequestLogService:
    """Bounded store of recent request records."""

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._requests: Deque[RequestInfo] = deque()
        self._endpoint_counts: Counter = Counter()
        self._browser_counts: Counter = Counter()
        self._device_counts: Counter = Counter()
        self._os_counts: Counter = Counter()
        self._durations: Dict[str, DurationStats] = {}

    @property
    def max_entries(self) -> int:
        if self._max_entries is not None:
            return self._max_entries
        return int(getattr(settings, "REQUEST_LOG_MAX_ENTRIES", 1000))

    # ---- writes ---------------------------------------------------------------

    def store_request(self, info: RequestInfo) -> None:
        with self._lock:
            self._requests.append(info)
            self._update_statistics(info)
            while len(self._requests) > self.max_entries:
                self._requests.popleft()
        logger.debug("Stored request log: %s", info.request_id)

    def clear_logs(self) -> None:
        with self._lock:
            self._requests.clear()
            self._endpoint_counts.clear()
            self._browser_counts.clear()
            self._device_counts.clear()
            self._os_counts.clear()
            self._durations.clear()
        logger.info("Cleared all request logs")

    def _tracked_key(self, table, key: str) -> str:
        if key in table or len(table) < self.max_entries:
            return key
        return OTHER_KEY

    def _update_statistics(self, info: RequestInfo) -> None:
        endpoint = self._tracked_key(self._endpoint_counts, endpoint_key(info.request_uri))
        self._endpoint_counts[endpoint] += 1
        if info.browser_name:
            self._browser_counts[self._tracked_key(self._browser_counts, info.browser_name)] += 1
        if info.device_type:
            self._device_counts[self._tracked_key(self._device_counts, info.device_type)] += 1
        if info.operating_system:
            self._os_counts[self._tracked_key(self._os_counts, info.operating_system)] += 1
        if info.duration is not None:
            self._durations.setdefault(endpoint, DurationStats()).add(info.duration)

    # ---- queries --------------------------------------------------------------

    def _snapshot(self) -> List[RequestInfo]:
        with self._lock:
            return list(self._requests)

    def get_recent_requests(self, limit: int) -> List[RequestInfo]:
        """Newest first, at most `limit` records."""
        return self._snapshot()[::-1][: max(limit, 0)]

    def get_requests_by_endpoint(self, endpoint: str) -> List[RequestInfo]:
        """Records whose URI contains `endpoint`, newest first."""
        return [r for r in self._snapshot()[::-1] if endpoint in (r.request_uri or "")]

    def get_requests_by_status(self, status_code: int) -> List[RequestInfo]:
        return [r for r in self._snapshot()[::-1] if r.response_status == status_code]

    def get_slow_requests(self, threshold_ms: int) -> List[RequestInfo]:
        """Records slower than `threshold_ms`, slowest first."""
        matches = [r for r in self._snapshot() if r.duration is not None and r.duration > threshold_ms]
        return sorted(matches, key=lambda r: r.duration, reverse=True)

    def get_statistics(self) -> Dict[str, Any]:
        with self._lock:
            requests = list(self._requests)
            endpoint_counts = dict(self._endpoint_counts)
            browser_counts = dict(self._browser_counts)
            device_counts = dict(self._device_counts)
            os_counts = dict(self._os_counts)
            performance_stats = {k: v.as_dict() for k, v in self._durations.items() if v.count}

        status_counts = Counter(r.response_status for r in requests if r.response_status is not None)
        one_hour_ago = timezone.now() - timedelta(hours=1)

        return {
            "totalRequests": len(requests),
            "endpointCounts": endpoint_counts,
            "browserCounts": browser_counts,
            "deviceCounts": device_counts,
            "osCounts": os_counts,
            "performanceStats": performance_stats,
            "statusCounts": {str(code): count for code, count in status_counts.items()},
            "recentRequests": sum(1 for r in requests if r.timestamp > one_hour_ago),
        }

    def get_performance_summary(self) -> Dict[str, Any]:
        requests = self._snapshot()
        if not requests:
            return {"message": "No requests logged yet"}

        durations = [r.duration for r in requests if r.duration is not None]
        return {
            "averageDuration": round(sum(durations) / len(durations)) if durations else 0,
            "maxDuration": max(durations) if durations else 0,
            "excellentRequests": sum(1 for d in durations if d < 50),
            "goodRequests": sum(1 for d in durations if 50 <= d < 200),
            "averageRequests": sum(1 for d in durations if 200 <= d < 1000),
            "slowRequests": sum(1 for d in durations if d >= 1000),
            "totalRequests": len(requests),
        }


request_log_service = RequestLogService()
