"""
Request Origin Checks

Public intake endpoints only accept browser requests coming from the
site itself: the configured production/local origins, plus preview
deployments of this project matched by a regular expression.
"""

import re
from urllib.parse import urlsplit

from starlette.requests import Request

from lmghi_api.core.config import settings


def normalize_origin(raw: str | None) -> str:
    """
    Reduce an Origin or Referer header value to ``scheme://host[:port]``.

    Returns an empty string when the value is missing or unparsable.
    """
    if not raw:
        return ""
    try:
        parts = urlsplit(raw.strip())
        port = parts.port
    except ValueError:
        return ""
    if parts.scheme not in ("http", "https") or not parts.hostname:
        return ""
    origin = f"{parts.scheme}://{parts.hostname}"
    if port is not None:
        origin = f"{origin}:{port}"
    return origin


def get_request_origin(request: Request) -> str:
    """Origin of the request, taken from Origin and falling back to Referer."""
    return normalize_origin(request.headers.get("origin") or request.headers.get("referer"))


def is_allowed_origin(
    origin: str,
    allowed: list[str] | None = None,
    preview_pattern: str | None = None,
) -> bool:
    """
    Check an already-normalized origin against the allow-list.

    An empty origin (no header, e.g. server-to-server callers) is allowed;
    those callers still have to pass human verification.
    """
    if not origin:
        return True

    allowed = settings.allowed_origins_list if allowed is None else allowed
    if origin in {normalize_origin(entry) for entry in allowed}:
        return True

    pattern = settings.preview_origin_regex if preview_pattern is None else preview_pattern
    return bool(pattern) and re.fullmatch(pattern, origin) is not None
