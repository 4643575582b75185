"""
API v1 package.

Contains versioned API routes for the resume builder: account workflows,
account administration and the template/resume catalog.
"""

from fastapi import APIRouter

from resume_builder.api.v1.admin import router as admin_router
from resume_builder.api.v1.catalog import router as catalog_router
from resume_builder.api.v1.routes import router as auth_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(catalog_router)
router.include_router(admin_router)

__all__ = ["router"]
