"""
Volunteer Applications Router

Public endpoints used by the Get Involved form. No authentication: the
origin allow-list, per-IP rate limiting and Turnstile verification stand
in for it.

Endpoints:
- POST /volunteer - Submit a volunteer application
- POST /uploads/cv - Relay a CV to object storage, returns its URL

Every response, success or failure, is the JSON envelope
``{ok, status, stage?, message?, id?, warning?}`` with the HTTP status
mirrored in ``status``.
"""

import json
import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from lmghi_api.core.database import get_db
from lmghi_api.core.origins import get_request_origin, is_allowed_origin
from lmghi_api.modules.volunteer_applications import service
from lmghi_api.modules.volunteer_applications.helpers import get_client_ip, get_rate_limit_ip
from lmghi_api.modules.volunteer_applications.schemas import IntakeResponse, UploadResponse
from lmghi_api.modules.volunteer_applications.service import ApplicationServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_response(e: ApplicationServiceError) -> JSONResponse:
    """Convert service errors to the JSON envelope."""
    body = IntakeResponse(ok=False, status=e.status_code, stage=e.stage, message=e.message)
    return JSONResponse(
        status_code=e.status_code, content=body.model_dump(mode="json", exclude_none=True)
    )


def _unexpected_error_response(e: Exception) -> JSONResponse:
    body = IntakeResponse(
        ok=False,
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        stage="exception",
        message=str(e) or e.__class__.__name__,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json", exclude_none=True),
    )


@router.post(
    "/volunteer",
    response_model=IntakeResponse,
    response_model_exclude_none=True,
    summary="Submit Volunteer Application",
    description="""
Submit a volunteer application from the Get Involved form.

Processing order:
1. Origin/Referer must be an allowed site origin (403, stage `origin_check`)
2. Per-IP rate limit (429, stage `rate_limit`)
3. `fullName` and `email` are required (400, stage `validation`)
4. `turnstileToken` must be present (400) and accepted by Cloudflare (403), stage `turnstile`
5. One row is inserted with status `pending` (500, stage `db_insert`, on failure)
6. Admin mailboxes are notified; failures only add a `warning`
""",
    responses={
        400: {"description": "Validation error or missing Turnstile token"},
        403: {"description": "Forbidden origin or failed human verification"},
        429: {"description": "Too many submissions from this IP"},
        500: {"description": "Configuration or storage failure"},
    },
)
async def submit_volunteer_application(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Submit a volunteer application.

    The body is decoded here rather than by FastAPI so the origin check
    runs before the payload is looked at, and so malformed bodies are
    reported with the envelope.
    """
    origin = get_request_origin(request)
    client_ip = get_client_ip(request)

    try:
        if not is_allowed_origin(origin):
            # Reject before reading the body
            raise service.OriginNotAllowedError(origin)

        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise service.SubmissionValidationError("Request body must be valid JSON.") from e

        response = await service.submit_application(
            db,
            payload,
            origin=origin,
            client_ip=client_ip,
            rate_limit_ip=get_rate_limit_ip(request),
        )
        logger.info(f"Volunteer application submitted: id={response.id}")
        return response

    except ApplicationServiceError as e:
        if e.status_code >= 500:
            logger.error(f"Volunteer submission failed at {e.stage}: {e.message}")
        else:
            logger.warning(f"Volunteer submission rejected at {e.stage}: {e.message}")
        return _error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected error submitting volunteer application: {e}")
        return _unexpected_error_response(e)


@router.post(
    "/uploads/cv",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    summary="Upload CV",
    description="""
Upload an applicant CV (PDF or Word, size capped) to object storage.

Returns the URL to send as `cvUrl` in the application payload. The upload
must finish before the application is submitted.
""",
    responses={
        403: {"description": "Forbidden origin"},
        413: {"description": "File too large"},
        415: {"description": "Unsupported file type"},
        429: {"description": "Too many uploads from this IP"},
        500: {"description": "Object storage not configured"},
        502: {"description": "Object storage rejected the upload"},
    },
)
async def upload_cv(
    request: Request,
    file: UploadFile | None = File(None),
):
    """Relay an applicant document to blob storage.

    The file is handed over unread; the service reads it only after the
    origin, rate limit, type and declared size checks pass.
    """
    origin = get_request_origin(request)

    try:
        return await service.relay_cv_upload(
            filename=file.filename if file else None,
            content_type=file.content_type if file else None,
            size=file.size if file else None,
            read=file.read if file else None,
            origin=origin,
            rate_limit_ip=get_rate_limit_ip(request),
        )
    except ApplicationServiceError as e:
        logger.warning(f"CV upload rejected at {e.stage}: {e.message}")
        body = UploadResponse(ok=False, status=e.status_code, stage=e.stage, message=e.message)
        return JSONResponse(
            status_code=e.status_code, content=body.model_dump(mode="json", exclude_none=True)
        )
    except Exception as e:
        logger.exception(f"Unexpected error uploading CV: {e}")
        return _unexpected_error_response(e)
    finally:
        if file:
            await file.close()
