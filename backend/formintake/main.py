"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from formintake.config import get_settings
from formintake.database import init_db
from formintake.errors import (
    ExternalServiceError,
    FieldValidationError,
    InvalidTransitionError,
    NotFoundError,
    SchemaParseError,
    UploadRejectedError,
)
from formintake.logging_config import setup_logging
from formintake.routers import templates, submissions, workflow, notifications, audit

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Form intake service started")
    yield


app = FastAPI(
    title="Form Intake & Review",
    description="Dynamic multi-page forms with autosave, AI generation from uploads, and a review workflow",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors -> HTTP

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(SchemaParseError)
@app.exception_handler(InvalidTransitionError)
@app.exception_handler(UploadRejectedError)
async def bad_request_handler(request: Request, exc):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})


@app.exception_handler(FieldValidationError)
async def field_validation_handler(request: Request, exc: FieldValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": exc.message,
            "errors": [e.model_dump() for e in exc.errors],
        },
    )


@app.exception_handler(ExternalServiceError)
async def external_service_handler(request: Request, exc: ExternalServiceError):
    logger.error(f"External service failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Include routers
app.include_router(templates.router, prefix="/api/templates", tags=["Templates"])
app.include_router(submissions.router, prefix="/api/submissions", tags=["Submissions"])
app.include_router(workflow.router, prefix="/api/workflow", tags=["Review Workflow"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(audit.router, prefix="/api/audit", tags=["Audit Trail"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "form-intake-backend"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Form Intake & Review API",
        "docs": "/docs",
        "health": "/health",
    }
