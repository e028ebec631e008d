"""Top-level API router."""

from fastapi import APIRouter

from daybook.api.routes.auth import router as auth_router
from daybook.api.routes.calendar import router as calendar_router
from daybook.api.routes.clients import router as clients_router
from daybook.api.routes.exports import router as exports_router
from daybook.api.routes.health import router as health_router
from daybook.api.routes.me import router as me_router
from daybook.api.routes.preferences import router as preferences_router
from daybook.api.routes.revenue import router as revenue_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router)
api_router.include_router(me_router)
api_router.include_router(preferences_router)
api_router.include_router(clients_router)
api_router.include_router(calendar_router)
api_router.include_router(revenue_router)
api_router.include_router(exports_router)
