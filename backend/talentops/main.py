"""TalentOps onboarding API.

Builds the FastAPI app: error envelopes for every failure path, CORS for
the onboarding console, the v1 candidates API and a health check.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from talentops.api.v1.router import router as v1_router
from talentops.core.config import settings
from talentops.core.database import dispose_engine
from talentops.core.errors import APIError
from talentops.core.responses import ErrorDetail, ErrorResponse

logger = structlog.get_logger()


def _envelope(
    status_code: int,
    code: str,
    message: str,
    details: list[dict] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Render an APIError raised by a service or router.

    5xx errors (persist and collaborator failures) are logged; 4xx errors
    are the operator's to fix and are only returned.
    """
    if exc.status_code >= 500:
        logger.warning(
            "upstream_failure",
            code=exc.code,
            message=exc.message,
            path=request.url.path,
        )
    return _envelope(exc.status_code, exc.code, exc.message, exc.details)


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render schema failures (wrong types, unknown fields) as VALIDATION_ERROR."""
    details = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return _envelope(400, "VALIDATION_ERROR", "Request body or query is invalid", details)


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler. Logs the traceback and hides it from the client."""
    logger.exception("unhandled_exception", exc_info=exc, path=request.url.path)
    return _envelope(500, "INTERNAL_ERROR", "An unexpected error occurred")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Release pooled database connections on shutdown."""
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    """Build the onboarding API application.

    Returns:
        FastAPI app with handlers, middleware and routers registered.
    """
    logging.getLogger("talentops").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="TalentOps Onboarding API",
        version="1.0.0",
        description="Employee onboarding pipeline and skills-gap analysis",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Authorization"],
    )

    # APIError before the Exception catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health")
    def health_check() -> dict:
        """Liveness check."""
        return {"status": "healthy"}

    return app


# uvicorn talentops.main:app
app = create_app()
