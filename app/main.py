from contextlib import asynccontextmanager
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.v1.router import api_router
from app.core.exceptions import InventoryHubError
from app.database import init_db, async_session_factory


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: create any missing tables.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    await init_db()

    yield

    logger.info("Shutting down...")


# OpenAPI Tags with detailed descriptions
OPENAPI_TAGS = [
    {"name": "Authentication", "description": "Registration, login and JWT access tokens"},
    {"name": "Products", "description": "Product catalog with SKU uniqueness and soft delete"},
    {"name": "Inventory", "description": "Per-product stock records, adjustments and low-stock alerts"},
    {"name": "Orders", "description": "Order placement with atomic stock decrement, status tracking"},
    {"name": "Dashboard", "description": "Catalog, stock and revenue headline numbers"},
]

FULL_API_DESCRIPTION = """
## InventoryHub API

Small-business inventory and order management.

### Core Modules

| Module | Description |
|--------|-------------|
| **Authentication** | JWT bearer tokens, admin and staff roles |
| **Product Catalog** | Products with unique SKUs, soft delete |
| **Inventory** | One stock record per product, never negative |
| **Orders** | All-or-nothing placement across every cart line |

### Authentication

All `/api/*` endpoints except register and login require a JWT.
Include token in Authorization header: `Bearer <token>`

### Error Codes

| Code | Description |
|------|-------------|
| 400 | Bad Request - invalid input or not enough stock |
| 401 | Unauthorized - Invalid/expired token |
| 403 | Forbidden - role or ownership check failed |
| 404 | Not Found - Resource doesn't exist |
| 409 | Conflict - Duplicate SKU or e-mail |
| 500 | Internal Server Error |
"""

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=FULL_API_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=OPENAPI_TAGS,
    swagger_ui_parameters={
        "deepLinking": True,
        "persistAuthorization": True,
        "filter": True,
    },
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)


@app.exception_handler(InventoryHubError)
async def domain_exception_handler(request: Request, exc: InventoryHubError):
    """Map domain errors to their HTTP status with a uniform body."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "type": type(exc).__name__,
            **exc.extra(),
        },
    )


# Global exception handler for anything unexpected
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")

    error_detail = {
        "detail": str(exc) if settings.DEBUG else "Internal server error",
        "type": type(exc).__name__,
        "path": str(request.url.path),
        "method": request.method,
    }
    if settings.DEBUG:
        error_detail["traceback"] = traceback.format_exc()

    # Get origin from request
    origin = request.headers.get("origin", "")

    response = JSONResponse(
        status_code=500,
        content=error_detail
    )

    # Error responses skip CORSMiddleware, add the headers here
    if origin in settings.cors_origins_list or "*" in settings.cors_origins_list:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"

    return response


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database validation."""
    from sqlalchemy import text
    from datetime import datetime, timezone

    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown"
        }
    }

    # Check database connectivity
    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    # Return 503 if unhealthy
    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }
