"""
Pubflow submission publishing service

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pubflow.api.middleware.request_id import RequestIdMiddleware
from pubflow.api.v1 import router as api_v1_router
from pubflow.config import Settings, get_settings
from pubflow.database import close_db, init_db
from pubflow.exceptions import PubflowError
from pubflow.logging_config import configure_logging, get_logger
from pubflow.schemas.common import ErrorResponse, HealthResponse
from pubflow.storage import create_storage_backend
from pubflow.workflow import WorkflowRegistry, load_registrations

settings = get_settings()
logger = get_logger(__name__)


def build_registry(settings: Settings) -> WorkflowRegistry:
    """
    Workflow catalog for this process: built-ins plus extension workflows
    from settings.workflow_files. Missing expected workflows are logged.
    """
    registry = WorkflowRegistry()
    missing = registry.validate(
        load_registrations(settings.workflow_files),
        expected_names=settings.extension_workflows,
    )
    for name in missing:
        logger.warning("Configured workflow %s is not registered", name)
    if settings.default_workflow not in registry:
        logger.warning("Default workflow %s is not registered", settings.default_workflow)
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info(
        "Database initialized; workflows: %s; storage: %s",
        ", ".join(app.state.workflows.names()),
        settings.storage_backend,
    )

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Submission workflow and storage-tier publishing.

    - **Workflows**: named state machines governing a submission's lifecycle
    - **Transitions**: permission-gated moves between workflow states
    - **Jobs**: audited publish / unpublish / retract runs moving content
      between the private and public storage tiers
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.state.workflows = build_registry(settings)
app.state.storage = create_storage_backend(settings)

app.add_middleware(RequestIdMiddleware)


def _error_response(request: Request, status_code: int, content: dict) -> JSONResponse:
    headers = {}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers["X-Request-ID"] = req_id
        if status_code >= 500:
            content["request_id"] = req_id
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


@app.exception_handler(PubflowError)
async def pubflow_exception_handler(request: Request, exc: PubflowError):
    """Domain errors carry their own status code."""
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.detail)
    else:
        logger.info("%s (%d): %s", type(exc).__name__, exc.status_code, exc.detail)
    content = ErrorResponse(detail=exc.detail, context=exc.context or None)
    return _error_response(request, exc.status_code, content.model_dump(exclude_none=True))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    content = ErrorResponse(detail=exc.detail)
    return _error_response(request, exc.status_code, content.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies answer 400."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        {"status": "error", "detail": "Validation error", "errors": errors},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    detail = str(exc) if settings.debug else "Internal server error"
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"status": "error", "detail": detail},
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Check application health."""
    return HealthResponse(
        version=settings.version,
        environment=settings.environment,
        workflows=len(request.app.state.workflows.names()),
        storage=settings.storage_backend if request.app.state.storage else "none",
    )


app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pubflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
