"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.core.config import get_settings
from app.core.database import init_db
from app.core.exceptions import ApprovalError
from app.core.rate_limit import limiter
from app.routers import approvals, auth, editor_changes, health, projects

settings = get_settings()

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan events."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Story collaboration platform: editor change review and approval",
    version="0.1.0",
    lifespan=lifespan,
)


async def approval_error_handler(request: Request, exc: ApprovalError) -> JSONResponse:
    """Render domain errors as ``{error, details}`` bodies."""
    body = {"error": exc.message}
    if exc.details is not None:
        body["details"] = exc.details
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.details})")
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400."""
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"error": message, "details": jsonable_encoder(errors)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any uncaught failure as a 500 ``{error, details}`` body."""
    logger.exception(f"{request.method} {request.url.path} failed unexpectedly")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Error responses
app.add_exception_handler(ApprovalError, approval_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=settings.api_v1_prefix, tags=["auth"])
app.include_router(projects.router, prefix=settings.api_v1_prefix, tags=["projects"])
app.include_router(approvals.router, prefix=settings.api_v1_prefix, tags=["approvals"])
app.include_router(editor_changes.router, prefix=settings.api_v1_prefix, tags=["editor-changes"])
