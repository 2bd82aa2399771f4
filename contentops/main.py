"""
ASGI entry point for the Content Operations Platform.

Run locally with:
    uvicorn contentops.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from contentops.api.deps import get_request_id
from contentops.api.middleware.request_id import RequestIdMiddleware
from contentops.api.v1 import router as api_v1_router
from contentops.config import get_settings
from contentops.database import close_db, init_db
from contentops.kernel.errors import DomainError
from contentops.logging_config import configure_logging, get_logger
from contentops.schemas.common import ErrorResponse, HealthResponse

settings = get_settings()
logger = get_logger(__name__)

LOCAL_ORIGINS = ("http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:3000")

API_DESCRIPTION = """
Admins curate posts and upload monthly metrics and reports for the founders assigned to
them. Founders review the posts written for them. Super-admins manage users,
maintain the admin/founder assignments and see the whole platform.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )
    logger.info("%s %s starting (%s)", settings.project_name, settings.version, settings.environment)
    await init_db()
    try:
        yield
    finally:
        await close_db()
        logger.info("Engine disposed")


def allowed_origins() -> list:
    origins = [settings.frontend_url]
    origins.extend(o for o in LOCAL_ORIGINS if o != settings.frontend_url)
    return origins


app = FastAPI(
    title=settings.project_name,
    description=API_DESCRIPTION,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Added last so CORS wraps the request-id middleware
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(request: Request, status_code: int, content: dict, headers=None) -> JSONResponse:
    merged = dict(headers or {})
    request_id = get_request_id(request)
    if request_id:
        merged["X-Request-ID"] = request_id
    return JSONResponse(status_code=status_code, content=content, headers=merged)


@app.exception_handler(DomainError)
async def handle_domain_error(request: Request, exc: DomainError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "%s on %s %s: %s",
        exc.code,
        request.method,
        request.url.path,
        exc.message,
        extra={"status_code": exc.status_code, "details": exc.details or None},
    )
    body = ErrorResponse(detail=exc.message, code=exc.code, request_id=get_request_id(request))
    return _error_response(request, exc.status_code, body.model_dump())


@app.exception_handler(HTTPException)
async def handle_http_exception(request: Request, exc: HTTPException):
    """Token failures raised by the auth dependencies keep their WWW-Authenticate header."""
    return _error_response(request, exc.status_code, {"detail": exc.detail}, exc.headers)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        {"detail": "Validation error", "errors": errors, "request_id": get_request_id(request)},
    )


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path)
    detail = f"{type(exc).__name__}: {exc}" if settings.debug else "Internal server error"
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"detail": detail, "request_id": get_request_id(request)},
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health():
    return HealthResponse(version=settings.version)


@app.get("/", tags=["Health"])
async def index():
    return {
        "name": settings.project_name,
        "version": settings.version,
        "api": settings.api_v1_prefix,
    }


app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("contentops.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
