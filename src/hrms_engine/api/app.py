"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrms_engine import __version__
from hrms_engine.api.routes import (
    health_router,
    jobs_router,
    payroll_router,
    verification_router,
)
from hrms_engine.calculators import ConfigurationError, PayrollValidationError
from hrms_engine.database import dispose_db, init_db
from hrms_engine.services import (
    CompanyNotFoundError,
    PayrollConfigNotFoundError,
    QuotaStoreUnavailableError,
)
from hrms_engine.verification import (
    DocumentNotFoundError,
    InvalidTransitionError,
    InvalidUploadError,
    RejectionReasonRequiredError,
    StaleDocumentError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    init_db()
    yield
    # Shutdown
    await dispose_db()


def _error(status_code: int, detail: str, code: str, field: str | None = None) -> JSONResponse:
    content = {"detail": detail, "code": code}
    if field is not None:
        content["field"] = field
    return JSONResponse(status_code=status_code, content=content)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HRMS Engine API",
        description="Payroll, company verification and job-posting quotas",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollValidationError)
    async def payroll_validation_handler(
        request: Request, exc: PayrollValidationError
    ) -> JSONResponse:
        return _error(
            status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), "INVALID_EMPLOYEE", exc.field
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), "INVALID_CONFIG")

    @app.exception_handler(InvalidUploadError)
    async def upload_handler(request: Request, exc: InvalidUploadError) -> JSONResponse:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), "INVALID_UPLOAD", exc.field)

    @app.exception_handler(RejectionReasonRequiredError)
    async def rejection_reason_handler(
        request: Request, exc: RejectionReasonRequiredError
    ) -> JSONResponse:
        return _error(
            status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), "REASON_REQUIRED", "reason"
        )

    @app.exception_handler(CompanyNotFoundError)
    async def company_not_found_handler(
        request: Request, exc: CompanyNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc), "COMPANY_NOT_FOUND")

    @app.exception_handler(PayrollConfigNotFoundError)
    async def config_not_found_handler(
        request: Request, exc: PayrollConfigNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc), "CONFIG_NOT_FOUND")

    @app.exception_handler(DocumentNotFoundError)
    async def document_not_found_handler(
        request: Request, exc: DocumentNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc), "DOCUMENT_NOT_FOUND")

    @app.exception_handler(StaleDocumentError)
    async def stale_document_handler(request: Request, exc: StaleDocumentError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "STALE_DOCUMENT")

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition_handler(
        request: Request, exc: InvalidTransitionError
    ) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "INVALID_TRANSITION")

    @app.exception_handler(QuotaStoreUnavailableError)
    async def quota_unavailable_handler(
        request: Request, exc: QuotaStoreUnavailableError
    ) -> JSONResponse:
        logger.error("Quota store unavailable: %s", exc)
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Job posting is temporarily unavailable, please retry",
            "QUOTA_STORE_UNAVAILABLE",
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            "INTERNAL_ERROR",
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(verification_router, prefix="/api/v1")
    app.include_router(jobs_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
