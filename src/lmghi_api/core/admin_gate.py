"""
Admin Access Gate

Coarse shared-secret protection for the admin surface. There are no user
accounts: a request is either UNVERIFIED or ADMITTED, and it is admitted
when it carries a cookie whose value equals ADMIN_DASH_TOKEN.

A one-time ``?token=<secret>`` query parameter promotes the query
credential to the cookie credential: the cookie is issued and the browser
is redirected to the same URL with the parameter removed.

The gate fails closed: with no secret configured every admin request is
rejected with a 500.
"""

import enum
import logging
import secrets
from dataclasses import dataclass

from fastapi import Request
from starlette.datastructures import URL, QueryParams
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import PlainTextResponse, RedirectResponse, Response

from lmghi_api.core.config import settings

logger = logging.getLogger(__name__)

ADMIN_PATH_PREFIX = "/admin"


class GateState(str, enum.Enum):
    """Per-request credential state."""

    UNVERIFIED = "unverified"
    ADMITTED = "admitted"


class GateAction(str, enum.Enum):
    """What the gate does with a request."""

    ADMIT = "admit"
    PROMOTE = "promote"  # query credential -> cookie, then redirect
    REJECT = "reject"
    MISCONFIGURED = "misconfigured"


@dataclass
class GateDecision:
    state: GateState
    action: GateAction
    status_code: int
    redirect_to: str | None = None
    message: str | None = None


class AdminAccessError(Exception):
    """Raised by the admin API dependency when the credential check fails."""

    def __init__(self, message: str, status_code: int):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def secrets_match(candidate: str | None, expected: str) -> bool:
    """Constant-time comparison of a presented credential with the secret."""
    if not candidate:
        return False
    return secrets.compare_digest(candidate.encode(), expected.encode())


def is_admin_path(path: str) -> bool:
    return path == ADMIN_PATH_PREFIX or path.startswith(f"{ADMIN_PATH_PREFIX}/")


def _strip_query_param(url: URL, name: str) -> str:
    stripped = url.remove_query_params(name)
    return f"{stripped.path}?{stripped.query}" if stripped.query else stripped.path


def evaluate_admin_request(
    url: URL,
    cookie_value: str | None,
    secret: str | None,
) -> GateDecision:
    """
    Decide whether a request to an admin path is admitted.

    Args:
        url: Full request URL (path and query are used)
        cookie_value: Value of the admin cookie, if present
        secret: Configured shared secret

    Returns:
        GateDecision describing the response the gate should produce
    """
    if not secret:
        return GateDecision(
            state=GateState.UNVERIFIED,
            action=GateAction.MISCONFIGURED,
            status_code=500,
            message="ADMIN_DASH_TOKEN not set",
        )

    query_token = QueryParams(url.query).get(settings.admin_query_param)
    if secrets_match(query_token, secret):
        return GateDecision(
            state=GateState.ADMITTED,
            action=GateAction.PROMOTE,
            status_code=307,
            redirect_to=_strip_query_param(url, settings.admin_query_param),
        )

    if secrets_match(cookie_value, secret):
        return GateDecision(state=GateState.ADMITTED, action=GateAction.ADMIT, status_code=200)

    return GateDecision(
        state=GateState.UNVERIFIED,
        action=GateAction.REJECT,
        status_code=403,
        message="Forbidden (admin)",
    )


def set_admin_cookie(response: Response, secret: str) -> None:
    """Issue the admin cookie carrying the shared secret."""
    response.set_cookie(
        key=settings.admin_cookie_name,
        value=secret,
        max_age=settings.admin_cookie_max_age,
        path="/",
        secure=True,
        httponly=True,
        samesite="lax",
    )


class AdminGateMiddleware(BaseHTTPMiddleware):
    """Intercepts every request under /admin and applies the gate."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not is_admin_path(request.url.path):
            return await call_next(request)

        secret = settings.admin_dash_token
        decision = evaluate_admin_request(
            request.url,
            request.cookies.get(settings.admin_cookie_name),
            secret,
        )

        if decision.action == GateAction.ADMIT:
            return await call_next(request)

        if decision.action == GateAction.PROMOTE:
            logger.info(f"Admin query credential promoted to cookie for {request.url.path}")
            response = RedirectResponse(decision.redirect_to, status_code=decision.status_code)
            set_admin_cookie(response, secret)
            return response

        if decision.action == GateAction.MISCONFIGURED:
            logger.error("Admin gate hit with no ADMIN_DASH_TOKEN configured")
        else:
            logger.warning(f"Admin gate rejected request to {request.url.path}")
        return PlainTextResponse(decision.message, status_code=decision.status_code)


async def require_admin_cookie(request: Request) -> None:
    """
    FastAPI dependency guarding the admin API.

    The API only accepts the cookie credential; query promotion is a
    page-level concern handled by the middleware.

    Raises:
        AdminAccessError: 500 if no secret is configured, 403 if the cookie is wrong
    """
    secret = settings.admin_dash_token
    if not secret:
        logger.error("Admin API hit with no ADMIN_DASH_TOKEN configured")
        raise AdminAccessError("ADMIN_DASH_TOKEN not set", status_code=500)

    if not secrets_match(request.cookies.get(settings.admin_cookie_name), secret):
        logger.warning(f"Admin API rejected request to {request.url.path}")
        raise AdminAccessError("Forbidden", status_code=403)
