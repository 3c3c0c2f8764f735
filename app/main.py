"""
Remote Internship Platform - Main Application

FastAPI backend with:
- PostgreSQL for all records (profiles, internships, applications, tasks)
- JWT bearer tokens identifying the calling profile
- Lifecycle rules for applications, tasks and internships in app.services

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import DomainError, status_code_for
from app.db.postgres import check_database_connection

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Remote Internship Platform",
    description="""
    Employers post internships, students apply, and accepted interns work
    through tasks assigned by their employer.

    ## Features
    - **Internships**: Draft, publish, close; search open internships
    - **Applications**: Apply, shortlist, accept or reject
    - **Tasks**: Assign work to interns and track it to completion
    - **Dashboards**: Per-role summaries
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Typed lifecycle errors -> HTTP status + machine-readable code."""
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"detail": exc.message, "error": exc.code},
    )


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if check_database_connection() else "disconnected",
    }
