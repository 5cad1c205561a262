# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the ParaFort Compliance API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    ComplianceAPIException,
    compliance_exception_handler,
    validation_exception_handler,
)
from app.routers import health, businesses, compliance, notifications, analytics, admin, tasks
from app.routers.health import API_VERSION
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The scheduled jobs live in the Celery beat process, so the API only
    logs its configuration on startup.
    """
    logger.info(f"Starting ParaFort Compliance API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(
        f"Compliance timezone: {settings.COMPLIANCE_TIMEZONE}, "
        f"reminder intervals: {settings.reminder_intervals_list}"
    )
    if not settings.email_enabled:
        logger.warning("SENDGRID_API_KEY is not set; reminder emails will not be delivered")

    yield

    logger.info("Shutting down ParaFort Compliance API")


# Create FastAPI application
app = FastAPI(
    title="ParaFort Compliance API",
    description="""
## Business Compliance Calendar and Reminders

Keeps every registered business on top of its federal, state and maintenance
filings.

### How It Works

1. **Register a Business** - Entity type, state and formation date
2. **Calendar Generated** - Annual reports, franchise taxes, BOIR and more
3. **Reminders** - Emails at 30, 14, 7 and 1 days before each deadline
4. **Mark Complete** - Upload proof; recurring filings roll to next year

### Scheduled Jobs (Celery beat)

| Job | Schedule |
|-----|----------|
| Daily reminders | Every day at REMINDER_HOUR |
| Notification queue | Every 15 minutes |
| Overdue flagging | Hourly |
| Recurring events | 1st of the month |
| Weekly admin report | Mondays |

### Quick Start

```bash
# 1. Register a business
curl -X POST http://localhost:8000/api/v1/businesses \\
  -H "Authorization: Bearer $TOKEN" \\
  -H "Content-Type: application/json" \\
  -d '{"legal_name": "Acme LLC", "entity_type": "LLC", "state": "DE"}'

# 2. See what is due
curl http://localhost:8000/api/v1/compliance/dashboard \\
  -H "Authorization: Bearer $TOKEN"
```
""",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Authentication endpoints for verifying JWT tokens",
        },
        {
            "name": "Businesses",
            "description": "Register businesses and generate their compliance calendars",
        },
        {
            "name": "Compliance",
            "description": "Dashboard, compliance events, documents and filing guidance",
        },
        {
            "name": "Notifications",
            "description": "In-app notifications and dashboard reminders",
        },
        {
            "name": "Analytics",
            "description": "Compliance progress metrics and charts",
        },
        {
            "name": "Admin",
            "description": "Manual controls for the reminder jobs (admin role)",
        },
        {
            "name": "Tasks",
            "description": "Track async task progress",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(ComplianceAPIException)
async def handle_compliance_exception(request: Request, exc: ComplianceAPIException):
    """Handle custom compliance API exceptions."""
    return await compliance_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Business endpoints
app.include_router(
    businesses.router,
    prefix="/api/v1/businesses",
    tags=["Businesses"]
)

# Compliance analytics endpoints
app.include_router(
    analytics.router,
    prefix="/api/v1/compliance/analytics",
    tags=["Analytics"]
)

# Compliance calendar endpoints
app.include_router(
    compliance.router,
    prefix="/api/v1/compliance",
    tags=["Compliance"]
)

# Notification endpoints
app.include_router(
    notifications.router,
    prefix="/api/v1/notifications",
    tags=["Notifications"]
)

# Reminder administration endpoints
app.include_router(
    admin.router,
    prefix="/api/v1/admin/reminders",
    tags=["Admin"]
)

# Task status endpoints
app.include_router(
    tasks.router,
    prefix="/api/v1/tasks",
    tags=["Tasks"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "ParaFort Compliance API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
