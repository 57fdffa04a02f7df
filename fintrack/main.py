"""
FinTrack API: FastAPI application.

This is the entry point for the application. All routers and
exception handlers are registered here.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fintrack.config import get_settings
from fintrack.exceptions import FinTrackError
from fintrack.logging_config import configure_logging, get_logger
from fintrack.models.base import SessionLocal
from fintrack.bootstrap import ensure_bootstrap_admin
from fintrack.api.audit import router as audit_router
from fintrack.api.auth import router as auth_router
from fintrack.api.health import router as health_router
from fintrack.api.transactions import router as transactions_router
from fintrack.api.users import router as users_router

settings = get_settings()
configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        ensure_bootstrap_admin(db, settings)
    finally:
        db.close()
    logger.info("Application started", extra={"environment": settings.ENVIRONMENT})
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Bookkeeping backend with a transaction approval workflow",
    lifespan=lifespan,
)


# Framework-raised HTTP errors (unknown route, wrong method)
HTTP_KINDS = {404: "NotFound", 405: "MethodNotAllowed"}


def _error(status_code: int, kind: str, message: str, errors=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"kind": kind, "message": message, "errors": errors},
        },
    )


@app.exception_handler(FinTrackError)
async def fintrack_error_handler(request: Request, exc: FinTrackError):
    logger.info(
        "Request rejected",
        extra={
            "kind": exc.kind,
            "path": request.url.path,
            "method": request.method,
            "detail": exc.message,
        },
    )
    return _error(exc.status_code, exc.kind, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return _error(400, "BadRequest", "Request validation failed", errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    kind = HTTP_KINDS.get(exc.status_code, "HttpError")
    return _error(exc.status_code, kind, str(exc.detail))


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning(
        "Concurrent modification detected",
        extra={"path": request.url.path, "method": request.method},
    )
    return _error(
        409, "Conflict",
        "The record was modified by another request; reload and retry",
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(
        "Integrity constraint violated",
        extra={"path": request.url.path, "method": request.method},
    )
    return _error(409, "Conflict", "The request conflicts with existing data")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return _error(500, "InternalError", "An unexpected error occurred")


# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(transactions_router)
app.include_router(audit_router)


def run() -> None:
    """Serve the app with uvicorn; DEBUG enables auto-reload."""
    uvicorn.run(
        "fintrack.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    run()
