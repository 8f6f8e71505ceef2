"""
Cloudflare Turnstile Verification

Server-side check of the one-time token produced by the Turnstile widget
on the application form. The token, the server secret, and (when known)
the caller IP are posted form-encoded to the siteverify endpoint, which
answers with a JSON document carrying a ``success`` boolean.
"""

import logging
from dataclasses import dataclass, field

import httpx

from lmghi_api.core.config import settings

logger = logging.getLogger(__name__)


class TurnstileNotConfiguredError(RuntimeError):
    """Raised when TURNSTILE_SECRET_KEY is not set."""


@dataclass
class TurnstileResult:
    """Outcome of a siteverify call."""

    success: bool
    error_codes: list[str] = field(default_factory=list)
    hostname: str | None = None


async def verify_turnstile_token(
    token: str,
    remote_ip: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> TurnstileResult:
    """
    Verify a Turnstile token with Cloudflare.

    Transport errors and malformed provider responses count as a failed
    verification; the caller decides how to report it.

    Args:
        token: Token issued to the browser by the widget
        remote_ip: Caller IP, forwarded to the provider when available
        client: Optional shared HTTP client (a short-lived one is created otherwise)

    Returns:
        TurnstileResult with the provider's verdict

    Raises:
        TurnstileNotConfiguredError: If no secret key is configured
    """
    secret = settings.turnstile_secret_key
    if not secret:
        raise TurnstileNotConfiguredError("TURNSTILE_SECRET_KEY not set.")

    form = {"secret": secret, "response": token}
    if remote_ip:
        form["remoteip"] = remote_ip

    try:
        if client is not None:
            response = await client.post(settings.turnstile_verify_url, data=form)
        else:
            async with httpx.AsyncClient(timeout=settings.turnstile_timeout_seconds) as owned:
                response = await owned.post(settings.turnstile_verify_url, data=form)
        payload = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Turnstile siteverify request failed: {e}")
        return TurnstileResult(success=False, error_codes=["request-failed"])

    if not isinstance(payload, dict):
        return TurnstileResult(success=False, error_codes=["invalid-response"])

    result = TurnstileResult(
        success=payload.get("success") is True,
        error_codes=list(payload.get("error-codes") or []),
        hostname=payload.get("hostname"),
    )
    if not result.success:
        logger.warning(f"Turnstile verification rejected: {result.error_codes}")
    return result
