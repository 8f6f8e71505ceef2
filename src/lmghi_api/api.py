from fastapi import APIRouter

from lmghi_api.modules.volunteer_applications import admin_router as admin_applications_router
from lmghi_api.modules.volunteer_applications import router as volunteer_router

api_router = APIRouter()

api_router.include_router(volunteer_router, tags=["Volunteer Applications"])

api_router.include_router(
    admin_applications_router,
    prefix="/admin/applications",
    tags=["Admin - Applications"],
)
