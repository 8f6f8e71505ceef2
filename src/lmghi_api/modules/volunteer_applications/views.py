"""
Volunteer Applications Pages

Server-rendered pages for the intake pipeline:
- GET /get-involved - application form with the Turnstile widget and CV upload
- GET /admin/applications - review table (behind the admin gate middleware)

Both pages are thin: all data goes through the JSON API.
"""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from lmghi_api.core.config import settings
from lmghi_api.modules.volunteer_applications.models import ApplicationStatus
from lmghi_api.modules.volunteer_applications.schemas import VOLUNTEER_TRACKS

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter(include_in_schema=False)


@router.get("/get-involved", response_class=HTMLResponse)
async def get_involved_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "get_involved.html",
        {
            "turnstile_site_key": settings.turnstile_site_key,
            "tracks": VOLUNTEER_TRACKS,
            "max_upload_mb": settings.upload_max_bytes // (1024 * 1024),
        },
    )


@router.get("/admin/applications", response_class=HTMLResponse)
async def admin_applications_page(request: Request) -> HTMLResponse:
    """Review table. Access is enforced by AdminGateMiddleware, not here."""
    return templates.TemplateResponse(
        request,
        "admin_applications.html",
        {"statuses": [s.value for s in ApplicationStatus]},
        headers={"Cache-Control": "no-store"},
    )
