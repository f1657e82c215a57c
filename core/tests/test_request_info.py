"""
`RequestInfoExtractor` tests: client IP behind proxies, User-Agent parsing,
custom headers, ids, and completion of a captured record.
"""

from __future__ import annotations

from django.test import RequestFactory, SimpleTestCase

from core.request_info import RequestInfo, coerce_request_id, request_info_extractor

CHROME_WIN = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)
EDGE_WIN = CHROME_WIN + " Edg/126.0.2592.87"
SAFARI_MAC = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_5) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.5 Safari/605.1.15"
)
IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_5 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.5 Mobile/15E148 Safari/604.1"
)
ANDROID_TABLET = "Mozilla/5.0 (Linux; Android 14; Tablet) Firefox/128.0"
GOOGLEBOT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


class ClientIpTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def ip(self, **headers):
        return request_info_extractor.extract_user_ip(self.factory.get("/", **headers))

    def test_forwarded_for_first_entry_wins(self):
        self.assertEqual(self.ip(HTTP_X_FORWARDED_FOR="203.0.113.5, 10.0.0.1", HTTP_X_REAL_IP="10.9.9.9"), "203.0.113.5")

    def test_fallback_chain(self):
        self.assertEqual(self.ip(HTTP_X_REAL_IP="198.51.100.7"), "198.51.100.7")
        self.assertEqual(self.ip(HTTP_X_FORWARDED_FOR="unknown", HTTP_X_FORWARDED="198.51.100.8"), "198.51.100.8")
        self.assertEqual(self.ip(HTTP_X_CLUSTER_CLIENT_IP="198.51.100.9"), "198.51.100.9")

    def test_remote_addr_then_unknown(self):
        self.assertEqual(self.ip(), "127.0.0.1")
        self.assertEqual(self.ip(REMOTE_ADDR=""), "unknown")


class UserAgentTests(SimpleTestCase):
    def test_browsers(self):
        parse = request_info_extractor.parse_browser
        self.assertEqual(parse(CHROME_WIN), ("Chrome", "126.0.0.0"))
        self.assertEqual(parse(EDGE_WIN), ("Edge", "126.0.2592.87"))
        self.assertEqual(parse(SAFARI_MAC), ("Safari", "17.5"))
        self.assertEqual(parse(ANDROID_TABLET), ("Firefox", "128.0"))
        self.assertEqual(parse("curl/8.5.0"), ("Unknown", "Unknown"))
        self.assertEqual(parse(None), ("Unknown", "Unknown"))

    def test_operating_systems(self):
        parse = request_info_extractor.parse_operating_system
        self.assertEqual(parse(CHROME_WIN), "Windows 10.0")
        self.assertEqual(parse(SAFARI_MAC), "macOS 14.5")
        self.assertEqual(parse(IPHONE), "iOS 17.5")
        self.assertEqual(parse(ANDROID_TABLET), "Android 14")
        self.assertEqual(parse("Mozilla/5.0 (X11; Linux x86_64)"), "Linux")
        self.assertEqual(parse(None), "Unknown")

    def test_device_types(self):
        parse = request_info_extractor.parse_device_type
        self.assertEqual(parse(GOOGLEBOT), "Bot")
        self.assertEqual(parse(ANDROID_TABLET), "Tablet")
        self.assertEqual(parse(IPHONE), "Mobile")
        self.assertEqual(parse(CHROME_WIN), "Desktop")
        self.assertEqual(parse(None), "Unknown")
        self.assertTrue(request_info_extractor.is_bot(GOOGLEBOT))
        self.assertFalse(request_info_extractor.is_bot(None))


class ExtractionTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_extract_request_info(self):
        request = self.factory.get(
            "/api/v1/things/?q=1",
            HTTP_USER_AGENT=CHROME_WIN,
            HTTP_X_TENANT="acme",
            HTTP_APP_CLIENT="cli",
            HTTP_ACCEPT_LANGUAGE="pt-PT",
        )
        info = request_info_extractor.extract_request_info(request)
        self.assertEqual(info.http_method, "GET")
        self.assertEqual(info.request_uri, "/api/v1/things/")
        self.assertEqual(info.query_string, "q=1")
        self.assertEqual(info.api_version, "v1")
        self.assertEqual(info.accept_language, "pt-PT")
        self.assertEqual(info.device_type, "Desktop")
        self.assertEqual(info.custom_headers, {"X-Tenant": "acme", "App-Client": "cli"})
        self.assertRegex(info.request_id, r"^req_[0-9a-f]{8}$")
        self.assertRegex(info.session_id, r"^session_[0-9a-f]{8}$")
        self.assertIsNone(info.authenticated_user)
        self.assertIsNone(info.duration)

    def test_request_id_taken_from_request(self):
        request = self.factory.get("/")
        request.request_id = "rid-1"
        self.assertEqual(request_info_extractor.extract_request_info(request).request_id, "rid-1")

    def test_coerce_request_id(self):
        self.assertEqual(coerce_request_id("abc.DEF-1_2"), "abc.DEF-1_2")
        self.assertRegex(coerce_request_id("has space"), r"^req_[0-9a-f]{8}$")
        self.assertRegex(coerce_request_id(None), r"^req_[0-9a-f]{8}$")

    def test_complete_preserves_request_side(self):
        info = RequestInfo(request_id="rid-1", http_method="GET", request_uri="/x/")
        done = request_info_extractor.complete(info, duration=12, response_status=201, response_size=3)
        self.assertIsNot(done, info)
        self.assertEqual(done.request_id, "rid-1")
        self.assertEqual(done.timestamp, info.timestamp)
        self.assertEqual((done.duration, done.response_status, done.response_size), (12, 201, 3))
        self.assertTrue(done.is_success)
        self.assertIsNone(info.duration)

        failed = request_info_extractor.complete(info, duration=1, response_status=500, response_size=0, error_message="x")
        self.assertFalse(failed.is_success)
        self.assertEqual(failed.error_message, "x")

    def test_to_dict_is_json_friendly(self):
        data = RequestInfo(request_id="rid").to_dict()
        self.assertIsInstance(data["timestamp"], str)
        self.assertEqual(data["request_id"], "rid")
