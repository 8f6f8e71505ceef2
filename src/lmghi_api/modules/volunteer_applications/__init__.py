"""
Volunteer Applications Module

Handles the volunteer intake pipeline from the Get Involved form:
1. Origin allow-list check and per-IP rate limiting
2. Required field validation (fullName, email)
3. Cloudflare Turnstile human verification
4. Persistence of one application row (status "pending")
5. Best-effort admin notification email

API Endpoints:
- POST /volunteer - Submit an application
- POST /uploads/cv - Relay a CV to object storage
- GET /admin/applications - List applications (admin cookie)
- PATCH /admin/applications - Update one application's status (admin cookie)

Pages:
- GET /get-involved - Application form
- GET /admin/applications - Review table (admin gate)
"""

from .admin_router import router as admin_router
from .router import router
from .views import router as pages_router

__all__ = ["router", "admin_router", "pages_router"]
