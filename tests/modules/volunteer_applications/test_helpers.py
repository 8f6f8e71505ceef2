"""
Unit tests for volunteer applications helpers module.
"""

from unittest.mock import MagicMock

from lmghi_api.core.config import settings
from lmghi_api.modules.volunteer_applications.helpers import (
    build_upload_object_name,
    get_client_ip,
    get_rate_limit_ip,
    sanitize_filename,
)


def _request(headers: dict, host: str | None = "10.0.0.1"):
    request = MagicMock()
    request.headers = headers
    request.client = MagicMock(host=host) if host else None
    return request


class TestGetClientIp:
    """Tests for get_client_ip."""

    def test_prefers_cloudflare_header(self):
        request = _request(
            {"cf-connecting-ip": "203.0.113.7", "x-forwarded-for": "198.51.100.1, 10.0.0.2"}
        )
        assert get_client_ip(request) == "203.0.113.7"

    def test_first_forwarded_hop(self):
        request = _request({"x-forwarded-for": " 198.51.100.1 , 10.0.0.2"})
        assert get_client_ip(request) == "198.51.100.1"

    def test_socket_peer_fallback(self):
        assert get_client_ip(_request({})) == "10.0.0.1"

    def test_unknown(self):
        assert get_client_ip(_request({}, host=None)) is None


class TestGetRateLimitIp:
    """Tests for get_rate_limit_ip."""

    def test_ignores_forwarded_headers_by_default(self):
        request = _request(
            {"cf-connecting-ip": "203.0.113.7", "x-forwarded-for": "198.51.100.1"}
        )
        assert get_rate_limit_ip(request) == "10.0.0.1"

    def test_uses_forwarded_headers_behind_trusted_proxy(self, monkeypatch):
        monkeypatch.setattr(settings, "trust_proxy_headers", True)
        request = _request({"x-forwarded-for": "198.51.100.1, 10.0.0.2"})
        assert get_rate_limit_ip(request) == "198.51.100.1"

    def test_unknown_peer(self):
        assert get_rate_limit_ip(_request({"x-forwarded-for": "198.51.100.1"}, host=None)) is None


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    def test_replaces_unsafe_characters(self):
        assert sanitize_filename("Ada's CV (final).pdf") == "Ada_s_CV__final_.pdf"

    def test_drops_directories(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("C:\\Users\\ada\\cv.docx") == "cv.docx"

    def test_empty_name(self):
        assert sanitize_filename(None) == "document"
        assert sanitize_filename("   ") == "document"


class TestBuildUploadObjectName:
    """Tests for build_upload_object_name."""

    def test_prefix_and_timestamp(self):
        assert (
            build_upload_object_name("my cv.pdf", now_ms=1700000000000)
            == "volunteers/1700000000000_my_cv.pdf"
        )

    def test_uses_current_time_by_default(self):
        name = build_upload_object_name("cv.pdf")
        timestamp = name.removeprefix("volunteers/").split("_", 1)[0]
        assert timestamp.isdigit()
        assert len(timestamp) >= 13
