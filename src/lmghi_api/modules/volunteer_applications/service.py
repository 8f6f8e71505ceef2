"""
Volunteer Applications Service Layer

Business logic for the volunteer intake pipeline and the admin review
surface. Orchestrates origin checks, rate limiting, human verification,
persistence, the CV relay and notification dispatch.

This module implements:
1. Submission Flow (strictly in this order):
   - Origin allow-list check (before anything else)
   - Per-IP rate limiting
   - Required field validation (fullName, email)
   - Turnstile verification, including the caller IP
   - Insert of exactly one row with status "pending"
   - Admin notification (non-fatal)

2. CV Relay:
   - Origin check and rate limiting
   - Content type and declared size checks before the file is read
   - Bounded read (at most one byte past the size cap)
   - Upload to object storage and URL resolution

3. Admin Review:
   - Listing with status filter, name/email search and a capped limit
   - Single-record status updates restricted to the status enum

Every failure before persistence is terminal for the request: nothing is
retried and nothing is written. Storage errors surface their underlying
message. Notification failures never fail a submission.
"""

import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lmghi_api.core.config import settings
from lmghi_api.core.origins import is_allowed_origin
from lmghi_api.core.rate_limit import check_rate_limit
from lmghi_api.core.storage import StorageNotConfiguredError, StorageUploadError, upload_document
from lmghi_api.core.turnstile import TurnstileNotConfiguredError, verify_turnstile_token
from lmghi_api.modules.volunteer_applications import repository
from lmghi_api.modules.volunteer_applications.helpers import build_upload_object_name
from lmghi_api.modules.volunteer_applications.models import (
    ApplicationStatus,
    VolunteerApplication,
)
from lmghi_api.modules.volunteer_applications.notifications import (
    EMAIL_FAILED_WARNING,
    dispatch_application_notifications,
)
from lmghi_api.modules.volunteer_applications.schemas import (
    IntakeResponse,
    UploadResponse,
    ValidatedApplication,
    VolunteerApplicationCreate,
)

logger = logging.getLogger(__name__)

ALLOWED_UPLOAD_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class ApplicationServiceError(Exception):
    """Base exception for application service errors.

    ``stage`` names the pipeline step that failed so callers can tell
    apart, e.g., a bot-check rejection from a storage outage.
    """

    def __init__(self, message: str, stage: str, status_code: int = 400):
        self.message = message
        self.stage = stage
        self.status_code = status_code
        super().__init__(message)


class OriginNotAllowedError(ApplicationServiceError):
    """Raised when the request comes from an origin outside the allow-list."""

    def __init__(self, origin: str):
        super().__init__(
            message=f"Forbidden origin: {origin}",
            stage="origin_check",
            status_code=403,
        )


class RateLimitExceededError(ApplicationServiceError):
    """Raised when a caller exceeds the public endpoint rate limit."""

    def __init__(self, window_seconds: int):
        minutes = max(1, window_seconds // 60)
        super().__init__(
            message=f"Too many requests. Please try again in {minutes} minute(s).",
            stage="rate_limit",
            status_code=429,
        )


class SubmissionValidationError(ApplicationServiceError):
    """Raised when the submission payload is missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message=message, stage="validation", status_code=400)


class TurnstileTokenMissingError(ApplicationServiceError):
    def __init__(self):
        super().__init__(message="Missing Turnstile token.", stage="turnstile", status_code=400)


class TurnstileVerificationError(ApplicationServiceError):
    def __init__(self):
        super().__init__(message="Verification failed.", stage="turnstile", status_code=403)


class ConfigurationError(ApplicationServiceError):
    """Raised when a required server setting is missing (fails closed)."""

    def __init__(self, message: str, stage: str):
        super().__init__(message=message, stage=stage, status_code=500)


class StorageError(ApplicationServiceError):
    """Raised when the database rejects a read or write."""

    def __init__(self, message: str, stage: str):
        super().__init__(message=message, stage=stage, status_code=500)


class UploadError(ApplicationServiceError):
    """Raised when a CV upload is rejected or fails."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message=message, stage="upload", status_code=status_code)


class InvalidAdminRequestError(ApplicationServiceError):
    """Raised when an admin list/update request carries invalid parameters."""

    def __init__(self, message: str, stage: str = "validation"):
        super().__init__(message=message, stage=stage, status_code=400)


class ApplicationNotFoundError(ApplicationServiceError):
    """Raised when an application is not found."""

    def __init__(self, application_id: UUID | None = None):
        message = (
            f"Application {application_id} not found" if application_id else "Application not found"
        )
        super().__init__(message=message, stage="db_update", status_code=404)


def _storage_error_message(error: SQLAlchemyError) -> str:
    """Underlying driver message without SQLAlchemy's statement dump."""
    original = getattr(error, "orig", None)
    return str(original) if original is not None else str(error)


def _file_too_large() -> UploadError:
    max_mb = settings.upload_max_bytes / (1024 * 1024)
    return UploadError(f"File too large. Maximum size is {max_mb:g} MB.", status_code=413)


def _first_validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "__root__")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def _check_origin_and_rate(origin: str, rate_limit_ip: str | None, action: str) -> None:
    if not is_allowed_origin(origin):
        logger.warning(f"[{action}] Forbidden origin: {origin}")
        raise OriginNotAllowedError(origin)

    caller = rate_limit_ip or "unknown"
    key = f"volunteer:{action}:{caller}"
    allowed = await check_rate_limit(
        key, settings.submission_rate_limit, settings.submission_rate_window_seconds
    )
    if not allowed:
        logger.warning(f"[{action}] Rate limit exceeded for {caller}")
        raise RateLimitExceededError(settings.submission_rate_window_seconds)


def validate_submission(payload: object) -> tuple[ValidatedApplication, str | None]:
    """
    Validate and normalize a submission payload.

    Args:
        payload: Decoded JSON body

    Returns:
        Tuple of (normalized applicant data, Turnstile token or None)

    Raises:
        SubmissionValidationError: If the body is not an object, a field is
            malformed, or fullName/email are missing
    """
    if not isinstance(payload, dict):
        raise SubmissionValidationError("Request body must be a JSON object.")

    try:
        data = VolunteerApplicationCreate.model_validate(payload)
    except ValidationError as e:
        raise SubmissionValidationError(_first_validation_message(e)) from e

    if not data.full_name or not data.email:
        raise SubmissionValidationError("fullName and email are required")

    try:
        validated = ValidatedApplication(
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
            role_interest=data.track,
            country=data.country,
            city=data.city,
            availability=data.availability,
            motivation=data.motivation,
            cv_url=data.cv_url,
        )
    except ValidationError as e:
        raise SubmissionValidationError(_first_validation_message(e)) from e

    return validated, data.turnstile_token


async def _verify_human(token: str | None, client_ip: str | None) -> None:
    if not token:
        logger.warning("Submission rejected: missing Turnstile token")
        raise TurnstileTokenMissingError()

    try:
        result = await verify_turnstile_token(token, remote_ip=client_ip)
    except TurnstileNotConfiguredError as e:
        logger.error("TURNSTILE_SECRET_KEY not set - rejecting submission")
        raise ConfigurationError(str(e), stage="turnstile") from e

    if not result.success:
        raise TurnstileVerificationError()


async def submit_application(
    db: AsyncSession,
    payload: object,
    *,
    origin: str,
    client_ip: str | None,
    rate_limit_ip: str | None = None,
) -> IntakeResponse:
    """
    Run the volunteer intake pipeline for one submission.

    Verification happens strictly before persistence, so any failure up
    to and including the Turnstile check leaves the database untouched.
    Resubmitting creates another row; deduplication is not attempted.

    Args:
        db: Database session
        payload: Decoded JSON body
        origin: Normalized Origin/Referer of the request ("" when absent)
        client_ip: Caller IP, forwarded to Turnstile
        rate_limit_ip: IP the rate limit is keyed on; falls back to client_ip

    Returns:
        Success envelope carrying the new application ID and, when the
        notification could not be delivered, a warning

    Raises:
        ApplicationServiceError: Any pre-persistence rejection or storage failure
    """
    await _check_origin_and_rate(origin, rate_limit_ip or client_ip, "submit")

    logger.info(
        "Env presence: "
        f"RESEND_API_KEY={bool(settings.resend_api_key)}, "
        f"RESEND_ACCOUNT_EMAIL={bool(settings.resend_account_email)}, "
        f"ADMIN_NOTIFY_EMAIL={bool(settings.admin_notify_email)}, "
        f"TURNSTILE_SECRET_KEY={bool(settings.turnstile_secret_key)}, "
        f"DATABASE_URL={bool(settings.database_url)}"
    )

    data, token = validate_submission(payload)
    await _verify_human(token, client_ip)

    try:
        application = await repository.create(db, data)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Volunteer application insert failed: {e}")
        raise StorageError(_storage_error_message(e), stage="db_insert") from e

    logger.info(f"Created volunteer application {application.id}")

    # Notification is best-effort: the row above is the record of truth
    warning = None
    try:
        result = await dispatch_application_notifications(application)
        warning = result.warning
    except Exception as e:
        logger.exception(f"Notification dispatch raised for application {application.id}: {e}")
        warning = EMAIL_FAILED_WARNING

    return IntakeResponse(ok=True, status=200, id=application.id, warning=warning)


async def relay_cv_upload(
    *,
    filename: str | None,
    content_type: str | None,
    size: int | None,
    read: Callable[[int], Awaitable[bytes]] | None,
    origin: str,
    rate_limit_ip: str | None,
) -> UploadResponse:
    """
    Store an applicant's CV and return a URL for the submission payload.

    Origin, rate limit, type and declared size are all checked before any
    of the file is read, and at most ``upload_max_bytes + 1`` bytes are
    ever read.

    Args:
        filename: Client-supplied file name
        content_type: Client-supplied MIME type
        size: Declared size in bytes, if known
        read: Reads up to the given number of bytes; None when no file was sent
        origin: Normalized Origin/Referer of the request
        rate_limit_ip: IP the rate limit is keyed on

    Raises:
        ApplicationServiceError: Origin/rate rejections, unsupported or
            oversized files, missing storage configuration, upload failures
    """
    await _check_origin_and_rate(origin, rate_limit_ip, "upload")

    if read is None:
        raise UploadError("No file uploaded.")

    normalized_type = (content_type or "").split(";")[0].strip().lower()
    if normalized_type not in ALLOWED_UPLOAD_CONTENT_TYPES:
        raise UploadError(
            f"Unsupported file type '{normalized_type or 'unknown'}'. Upload a PDF or Word document.",
            status_code=415,
        )

    max_bytes = settings.upload_max_bytes
    if size is not None and size > max_bytes:
        raise _file_too_large()

    data = await read(max_bytes + 1)
    if not data:
        raise UploadError("No file uploaded.")
    if len(data) > max_bytes:
        raise _file_too_large()

    object_name = build_upload_object_name(filename)

    try:
        url = await upload_document(object_name, data, normalized_type)
    except StorageNotConfiguredError as e:
        logger.error("CV upload attempted with object storage unconfigured")
        raise ConfigurationError(str(e), stage="upload") from e
    except StorageUploadError as e:
        raise UploadError(f"CV upload failed: {e}", status_code=502) from e

    return UploadResponse(ok=True, status=200, url=url)


# ============================================
# Admin Service Functions
# ============================================


def parse_status_filter(value: str | None) -> ApplicationStatus | None:
    """Map the ``status`` query value to a filter; "all" or empty means no filter."""
    value = (value or "all").strip().lower()
    if value == "all":
        return None
    try:
        return ApplicationStatus(value)
    except ValueError as e:
        raise InvalidAdminRequestError(f"Invalid status filter: {value}") from e


def clamp_limit(limit: int | None) -> int:
    """Apply the default and the hard upper bound to a requested row limit."""
    if limit is None:
        limit = settings.admin_list_default_limit
    return min(max(1, limit), settings.admin_list_max_limit)


async def admin_list_applications(
    db: AsyncSession,
    *,
    status: str | None = None,
    search: str | None = None,
    limit: int | None = None,
) -> list[VolunteerApplication]:
    """
    List applications for the admin review screen.

    Args:
        db: Database session
        status: Status value or "all"
        search: Free text matched case-insensitively against name or email
        limit: Requested row count (defaulted and capped)

    Returns:
        Applications newest first

    Raises:
        InvalidAdminRequestError: If the status filter is unknown
        StorageError: If the query fails
    """
    status_filter = parse_status_filter(status)
    search = (search or "").strip() or None
    limit = clamp_limit(limit)

    logger.info(
        f"Admin listing applications: status={status_filter}, search={search}, limit={limit}"
    )

    try:
        applications = await repository.list_applications(
            db, status=status_filter, search=search, limit=limit
        )
    except SQLAlchemyError as e:
        logger.error(f"Admin listing failed: {e}")
        raise StorageError(_storage_error_message(e), stage="db_query") from e

    logger.info(f"Returning {len(applications)} applications")
    return applications


async def admin_update_status(
    db: AsyncSession,
    application_id: str | None,
    status: str | None,
) -> VolunteerApplication:
    """
    Change the status of one application.

    Any value of the status enum may be set from any other; there is no
    batch update and no audit trail.

    Raises:
        InvalidAdminRequestError: If the ID is missing/malformed or the status is not in the enum
        ApplicationNotFoundError: If no application has this ID
        StorageError: If the update fails
    """
    if not application_id or not status:
        raise InvalidAdminRequestError("Invalid payload (id/status)")

    try:
        new_status = ApplicationStatus(status)
    except ValueError as e:
        raise InvalidAdminRequestError("Invalid payload (id/status)") from e

    try:
        parsed_id = UUID(str(application_id))
    except ValueError as e:
        raise InvalidAdminRequestError("Invalid payload (id/status)") from e

    try:
        application = await repository.update_status(db, parsed_id, new_status)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Status update failed for application {parsed_id}: {e}")
        raise StorageError(_storage_error_message(e), stage="db_update") from e

    if not application:
        logger.warning(f"Application not found: {parsed_id}")
        raise ApplicationNotFoundError(parsed_id)

    logger.info(f"Application {parsed_id} status set to {new_status.value}")
    return application
