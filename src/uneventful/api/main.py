"""FastAPI application entry point."""

import logging
import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from uneventful.api.logging import RequestLog, log_request
from uneventful.api.models.responses import ErrorCodes, ErrorResponse
from uneventful.api.routes import (
    calendars_router,
    events_router,
    health_router,
    selection_router,
    session_router,
)
from uneventful.core.config import (
    API_DEBUG,
    API_VERSION,
    DB_PATH,
    GOOGLE_CLIENT_ID,
    LOG_LEVEL,
    SESSION_SECRET,
)
from uneventful.core.errors import (
    AuthFailure,
    NetworkFailure,
    OperationInProgress,
    ProviderError,
    ValidationFailure,
)
from uneventful.core.http_client import close_http_client

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: verify critical configuration
    if not GOOGLE_CLIENT_ID:
        warnings.warn("GOOGLE_CLIENT_ID is not set; sign-in will fail")
    if not SESSION_SECRET:
        warnings.warn("SESSION_SECRET is not set; sessions will not survive a restart")

    yield

    # Shutdown: release pooled connections
    await close_http_client()


app = FastAPI(
    title="Uneventful API",
    description="Bulk delete Google Calendar events across calendars",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)
app.state.db_path = DB_PATH

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Record every /v1 request in the request log."""
    if not request.url.path.startswith("/v1"):
        return await call_next(request)

    request_log = RequestLog.for_request(request)
    request.state.request_log = request_log
    response = await call_next(request)

    request_log.finish(
        response.status_code,
        error_code=getattr(request.state, "error_code", None),
        error_message=getattr(request.state, "error_message", None),
    )
    try:
        log_request(request_log, request.app.state.db_path)
    except Exception as e:
        # Don't fail the request if logging fails
        logger.warning("Request log write failed: %s", e)
    return response


def error_response(
    request: Request,
    status_code: int,
    error: str,
    code: str,
    details: list[str] | None = None,
) -> JSONResponse:
    request.state.error_code = code
    request.state.error_message = error
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code, details=details or []).model_dump(),
    )


@app.exception_handler(AuthFailure)
async def auth_failure_handler(request: Request, exc: AuthFailure):
    """Tear down the session's credentials and ask for a new sign-in."""
    session = getattr(request.state, "session", None)
    registry = getattr(request.state, "registry", None)
    if session is None or registry is None:
        return error_response(
            request, 401, "Invalid or missing session token", ErrorCodes.UNAUTHORIZED
        )

    registry.expire(session)
    return error_response(
        request,
        401,
        "Your session has expired. Please sign in again.",
        ErrorCodes.TOKEN_EXPIRED,
        [str(exc)],
    )


@app.exception_handler(NetworkFailure)
async def network_failure_handler(request: Request, exc: NetworkFailure):
    logger.warning("Network failure on %s: %s", request.url.path, exc)
    return error_response(
        request,
        503,
        "Could not reach Google Calendar. Please try again.",
        ErrorCodes.NETWORK_ERROR,
        [str(exc)],
    )


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    logger.warning("Provider error on %s: %s", request.url.path, exc)
    return error_response(
        request,
        502,
        "Google Calendar returned an error",
        ErrorCodes.UPSTREAM_ERROR,
        [exc.message],
    )


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return error_response(
        request, 422, "Invalid request", ErrorCodes.VALIDATION_ERROR, [str(exc)]
    )


@app.exception_handler(OperationInProgress)
async def operation_in_progress_handler(request: Request, exc: OperationInProgress):
    return error_response(
        request, 409, str(exc), ErrorCodes.OPERATION_IN_PROGRESS
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(request, 500, "Internal server error", ErrorCodes.INTERNAL_ERROR)


# Include routers
app.include_router(health_router)
app.include_router(session_router)
app.include_router(calendars_router)
app.include_router(events_router)
app.include_router(selection_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from uneventful.core.config import API_HOST, API_PORT

    uvicorn.run(
        "uneventful.api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
