"""
API v1 - compression method and browsing session endpoints.
"""
from fastapi import APIRouter
from compview.api.v1.methods import router as methods_router
from compview.api.v1.session import router as session_router

router = APIRouter()
router.include_router(methods_router)
router.include_router(session_router)
