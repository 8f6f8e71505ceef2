"""
Volunteer Applications Admin Router

API endpoints behind the shared-secret admin gate, used by the admin
review page.

Endpoints:
- GET /admin/applications - List applications (status filter, search, limit)
- PATCH /admin/applications - Change one application's status

Security:
- Every endpoint requires the admin cookie (see core.admin_gate)
- 403 on a missing/wrong cookie, 500 when no secret is configured
- Responses use the admin envelope ``{ok, data?, message?}``
"""

import json
import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from lmghi_api.core.admin_gate import require_admin_cookie
from lmghi_api.core.database import get_db
from lmghi_api.modules.volunteer_applications import service
from lmghi_api.modules.volunteer_applications.schemas import (
    AdminActionResponse,
    ApplicationListResponse,
    ApplicationRecord,
    StatusUpdateRequest,
)
from lmghi_api.modules.volunteer_applications.service import ApplicationServiceError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin_cookie)])


def _handle_service_error(e: ApplicationServiceError) -> JSONResponse:
    """Convert service errors to the admin envelope."""
    body = AdminActionResponse(ok=False, message=e.message)
    return JSONResponse(status_code=e.status_code, content=body.model_dump(exclude_none=True))


def _parse_limit(raw: str | None) -> int | None:
    """Lenient integer parsing; anything unparsable falls back to the default."""
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


@router.get(
    "",
    response_model=ApplicationListResponse,
    response_model_exclude_none=True,
    summary="List Applications",
    description="""
List volunteer applications, newest first.

**Filters:**
- `status`: `pending`, `reviewed`, `shortlisted`, `rejected` or `all` (default)
- `q`: case-insensitive match against name OR email

**Limit:** `limit` defaults to 200 and is capped at 500.

**Access:** admin cookie only
""",
    responses={
        400: {"description": "Unknown status filter"},
        403: {"description": "Missing or invalid admin cookie"},
        500: {"description": "Admin secret not configured or database error"},
    },
)
async def list_applications(
    status: str | None = Query("all", description="Status filter or 'all'"),
    q: str | None = Query(None, description="Search name/email"),
    limit: str | None = Query(None, description="Maximum rows (default 200, max 500)"),
    db: AsyncSession = Depends(get_db),
):
    """List applications for the review table."""
    try:
        applications = await service.admin_list_applications(
            db, status=status, search=q, limit=_parse_limit(limit)
        )
    except ApplicationServiceError as e:
        return _handle_service_error(e)

    return ApplicationListResponse(
        ok=True,
        data=[ApplicationRecord.model_validate(app) for app in applications],
    )


@router.patch(
    "",
    response_model=AdminActionResponse,
    response_model_exclude_none=True,
    summary="Update Application Status",
    description="""
Set the status of a single application.

Body: `{"id": "<uuid>", "status": "pending|reviewed|shortlisted|rejected"}`.
Any other status value, or a missing/malformed id, is rejected with 400
and nothing is changed.
""",
    responses={
        400: {"description": "Invalid payload (id/status)"},
        403: {"description": "Missing or invalid admin cookie"},
        404: {"description": "Application not found"},
        500: {"description": "Admin secret not configured or database error"},
    },
)
async def update_application_status(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Apply a status change coming from the review table."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    if not isinstance(body, dict):
        return _handle_service_error(
            service.InvalidAdminRequestError("Invalid payload (id/status)")
        )

    update = StatusUpdateRequest(
        id=str(body["id"]) if body.get("id") is not None else None,
        status=str(body["status"]) if body.get("status") is not None else None,
    )

    try:
        application = await service.admin_update_status(db, update.id, update.status)
    except ApplicationServiceError as e:
        return _handle_service_error(e)

    logger.info(f"Admin set application {application.id} to {application.status.value}")
    return AdminActionResponse(ok=True)
