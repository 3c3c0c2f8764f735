"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.profile_routes import router as profile_router
from app.api.routes.internship_routes import router as internship_router
from app.api.routes.application_routes import router as application_router
from app.api.routes.task_routes import router as task_router
from app.api.routes.dashboard_routes import router as dashboard_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(internship_router)
api_router.include_router(application_router)
api_router.include_router(task_router)
api_router.include_router(dashboard_router)
