"""
Volunteer Applications Shared Helpers

Small request and naming utilities shared by the routers and the service.
"""

import re
import time

from fastapi import Request

from lmghi_api.core.config import settings

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")

UPLOAD_PREFIX = "volunteers"


def get_client_ip(request: Request) -> str | None:
    """
    Best-effort caller IP.

    Prefers Cloudflare's CF-Connecting-IP, then the first X-Forwarded-For
    hop, then the socket peer address.
    """
    cf_ip = request.headers.get("cf-connecting-ip", "").strip()
    if cf_ip:
        return cf_ip

    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop

    return request.client.host if request.client else None


def get_rate_limit_ip(request: Request) -> str | None:
    """
    Caller IP used to key rate limits.

    The socket peer unless TRUST_PROXY_HEADERS is set; forwarded headers
    are otherwise chosen by the client and would give it a fresh window
    per request.
    """
    if settings.trust_proxy_headers:
        return get_client_ip(request)
    return request.client.host if request.client else None


def sanitize_filename(filename: str | None) -> str:
    """Replace anything outside ``[A-Za-z0-9._-]`` with underscores."""
    name = (filename or "").strip().replace("\\", "/").split("/")[-1]
    return _UNSAFE_FILENAME_CHARS.sub("_", name) or "document"


def build_upload_object_name(filename: str | None, now_ms: int | None = None) -> str:
    """Object key for an uploaded CV: ``volunteers/<epoch_ms>_<safe_name>``."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{UPLOAD_PREFIX}/{timestamp}_{sanitize_filename(filename)}"
