# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Heat Awards API.
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
    HeatAwardsException,
    heat_awards_exception_handler,
    validation_exception_handler,
)
from app.routers import health, intake, payments, supplier, judging, admin, tasks
from app.auth import routes as auth_routes
from core.competition import get_rules, validate_competition_year

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

    Startup logs the environment and warns when the configured
    competition year looks stale.
    """
    logger.info(f"Starting Heat Awards API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Serving competition year {get_rules().year}")
    validate_competition_year()

    yield

    logger.info("Shutting down Heat Awards API")


app = FastAPI(
    title="Heat Awards API",
    description="""
## Hot Sauce Competition Backend

Runs a yearly hot sauce competition: suppliers enter sauces and pay entry
fees, judges apply, organisers pack judging boxes, judges score, and the
results are exported.

### Flow

1. **Enter** - Suppliers submit sauces (`POST /intake/supplier`) and get a payment quote
2. **Pay** - Checkout through Stripe; the webhook marks sauces paid
3. **Arrive** - Admins mark delivered sauces as arrived
4. **Pack** - Each bottle scan goes into a judge's box; 7 bottles box a sauce
5. **Judge** - Judges submit category scores
6. **Export** - Weighted results as CSV

### Entry Discounts

| Entries | Discount |
|---------|----------|
| 1 | 0% |
| 2-6 | 3-12% |
| 7-10 | 13% |
| 11-20 | 14% |
| 21+ | 16% |
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Caller identity and roles"},
        {"name": "Intake", "description": "Supplier and judge applications"},
        {"name": "Payments", "description": "Quotes, checkout and Stripe webhooks"},
        {"name": "Supplier", "description": "Supplier dashboard"},
        {"name": "Judging", "description": "Score submission"},
        {"name": "Admin", "description": "Packing, printables, results and email"},
        {"name": "Tasks", "description": "Track background email jobs"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

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

@app.exception_handler(HeatAwardsException)
async def handle_heat_awards_exception(request: Request, exc: HeatAwardsException):
    """Handle domain exceptions."""
    return await heat_awards_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Render request validation failures as {"error": ...}."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

API_PREFIX = "/api/v1"

app.include_router(auth_routes.router, prefix=API_PREFIX)
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(intake.router, prefix=API_PREFIX, tags=["Intake"])
app.include_router(payments.router, prefix=API_PREFIX, tags=["Payments"])
app.include_router(supplier.router, prefix=API_PREFIX, tags=["Supplier"])
app.include_router(judging.router, prefix=API_PREFIX, tags=["Judging"])
app.include_router(admin.router, prefix=API_PREFIX, tags=["Admin"])
app.include_router(tasks.router, prefix=f"{API_PREFIX}/tasks", tags=["Tasks"])


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "Heat Awards API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }
