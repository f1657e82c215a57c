"""
Monitoring and request-log endpoint tests.

What these tests verify
-----------------------
- `/monitoring/*` describe the current request as the middleware captured it
  (forwarded client IP, parsed User-Agent, headers, URI parts).
- `/logs/*` read the shared request log fed by real requests, validate query
  parameters, and `DELETE /logs/clear/` empties it.
"""

from __future__ import annotations

from unittest.mock import patch

from rest_framework.test import APIClient, APITestCase

from core.request_log import request_log_service

FIREFOX = "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"


class MonitoringApiTests(APITestCase):
    def setUp(self):
        self.client = APIClient()

    def test_request_info(self):
        resp = self.client.get(
            "/monitoring/request-info/",
            HTTP_USER_AGENT=FIREFOX,
            HTTP_X_FORWARDED_FOR="203.0.113.5, 10.0.0.1",
            HTTP_X_REQUEST_ID="mon-1",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["user_ip"], "203.0.113.5")
        self.assertEqual(resp.data["browser_name"], "Firefox")
        self.assertEqual(resp.data["operating_system"], "Linux")
        self.assertEqual(resp.data["request_id"], "mon-1")

    def test_request_summary(self):
        resp = self.client.get("/monitoring/request-summary/", HTTP_USER_AGENT=FIREFOX)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["method"], "GET")
        self.assertEqual(resp.data["uri"], "/monitoring/request-summary/")
        self.assertEqual(resp.data["deviceType"], "Desktop")

    def test_request_info_extraction_failure_500(self):
        with patch("core.middleware.request_info_extractor.extract_request_info", side_effect=Exception("bad")):
            resp = self.client.get("/monitoring/request-info/")
        self.assertEqual(resp.status_code, 500)
        self.assertIn("Failed to extract request info", resp.data["detail"])

    def test_health_echo(self):
        resp = self.client.get("/monitoring/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "OK")
        self.assertEqual(resp.data["requestInfo"]["uri"], "/monitoring/health/")

    def test_headers_and_uri_info(self):
        resp = self.client.get("/monitoring/headers/", HTTP_X_TENANT="acme")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["X-Tenant"], "acme")

        resp = self.client.get("/monitoring/uri-info/?a=1&a=2&b=x")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["path"], "/monitoring/uri-info/")
        self.assertEqual(resp.data["queryParams"], {"a": ["1", "2"], "b": ["x"]})


class LogsApiTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        request_log_service.clear_logs()

    def tearDown(self):
        request_log_service.clear_logs()

    def test_recent_reflects_previous_requests(self):
        self.client.get("/users/")
        self.client.get("/users/9999/")
        resp = self.client.get("/logs/recent/?limit=1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["request_uri"], "/users/9999/")

    def test_bad_limit_400(self):
        self.assertEqual(self.client.get("/logs/recent/?limit=abc").status_code, 400)
        self.assertEqual(self.client.get("/logs/slow/?threshold=abc").status_code, 400)

    def test_endpoint_and_status_filters(self):
        self.client.get("/users/")
        self.client.get("/users/9999/")
        resp = self.client.get("/logs/endpoint/users/")
        self.assertEqual(len(resp.data), 2)
        resp = self.client.get("/logs/status/404/")
        self.assertEqual([r["request_uri"] for r in resp.data], ["/users/9999/"])

    def test_slow_statistics_performance_dashboard(self):
        self.client.get("/users/")
        self.assertEqual(self.client.get("/logs/slow/?threshold=100000").data, [])

        stats = self.client.get("/logs/statistics/").data
        self.assertGreaterEqual(stats["totalRequests"], 2)
        self.assertIn("/users/", stats["endpointCounts"])

        perf = self.client.get("/logs/performance/").data
        self.assertIn("averageDuration", perf)

        dashboard = self.client.get("/logs/dashboard/").data
        self.assertEqual(set(dashboard), {"statistics", "performance", "recentRequests", "slowRequests"})

    def test_performance_empty_message(self):
        # This request is stored only after its own response is built.
        resp = self.client.get("/logs/performance/")
        self.assertEqual(resp.data, {"message": "No requests logged yet"})

    def test_clear(self):
        self.client.get("/users/")
        resp = self.client.delete("/logs/clear/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, {"message": "All logs cleared successfully"})
        # Only the DELETE itself has been stored since the clear.
        self.assertEqual(len(request_log_service.get_recent_requests(10)), 1)
