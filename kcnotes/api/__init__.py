"""
HTTP API routes.
"""

from fastapi import APIRouter

from kcnotes.api import auth

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
