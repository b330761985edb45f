"""Main FastAPI application instance."""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import make_asgi_app

from api.config import get_settings
from api.routers import health, screenplays
from core.exceptions import BreakdownException
from core.models import ErrorCode, ErrorDetail, ErrorResponse, error_details

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNSUPPORTED_FILE_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_FILE_DATA: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EMPTY_FILE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FILE_TOO_LARGE: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting Screenplay Breakdown API v0.1.0 in %s environment", settings.env)
    yield
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Screenplay Breakdown API",
    description="Screenplay text extraction (TXT, FDX, PDF) and scene segmentation",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,  # Hide in production
    redoc_url="/redoc" if settings.debug else None,  # Hide in production
    openapi_url="/openapi.json" if settings.debug else None,  # Hide in production
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,  # Explicit whitelist from config
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=[
        "Content-Type",
        "X-Request-ID",
        "X-Actor-User-Id",
        "X-Actor-Project-Id",
    ],
    expose_headers=["X-Request-ID"],
    max_age=600,  # Cache preflight requests for 10 minutes
)


@app.middleware("http")
async def assign_request_id(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Give every request an id (the caller's X-Request-ID or a new one)."""
    request.state.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


# Exception handlers
@app.exception_handler(BreakdownException)
async def breakdown_exception_handler(request: Request, exc: BreakdownException) -> JSONResponse:
    """Render coded service failures with their remediation hint."""
    code = getattr(exc, "code", None)
    if isinstance(code, ErrorCode):
        error = code.value
        status_code = _STATUS_BY_CODE.get(code, status.HTTP_422_UNPROCESSABLE_ENTITY)
    else:
        error = exc.__class__.__name__
        status_code = status.HTTP_400_BAD_REQUEST

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=exc.message,
            hint=getattr(exc, "hint", None),
            details=error_details(exc.details),
            request_id=_request_id(request),
        ).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    details = [
        ErrorDetail(
            field=".".join(str(loc) for loc in err["loc"]),
            message=err["msg"],
            error_code=err["type"],
        )
        for err in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            message="Request validation failed",
            details=details,
            request_id=_request_id(request),
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error("Unexpected error: %s", exc, exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="InternalServerError",
            message="An unexpected error occurred while processing the screenplay",
            request_id=_request_id(request),
        ).model_dump(),
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(screenplays.router, prefix="/v1/screenplays", tags=["Screenplays"])

if settings.metrics_enabled:
    app.mount("/metrics", make_asgi_app())


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "Screenplay Breakdown API v0.1.0",
        "health": "/health",
        "parse": "/v1/screenplays/parse",
        "scenes": "/v1/screenplays/scenes",
    }
