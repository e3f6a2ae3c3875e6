"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from concerndesk.api.auth import router as auth_router
from concerndesk.api.concerns import router as concerns_router
from concerndesk.api.notifications import router as notifications_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(concerns_router)
api_router.include_router(notifications_router)
