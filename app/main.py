"""
Leave Management API

Employees file leave requests; admins approve or reject them. Approval charges
the employee's leave ledger (monthly paid quota with carry-forward, CL/SL pools).

Run locally with:
    uvicorn app.main:app --reload
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

import app.models  # noqa: F401  registers every table on Base.metadata
from app.core.config import settings
from app.core.exceptions import AppException
from app.core.logging import setup_logging
from app.core.middleware import CorrelationIdMiddleware, LoggingMiddleware
from app.core.schemas import ApiResponse
from app.database import SessionLocal, init_db
from app.routers.api_router import api_router

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    logger.info("Database ready")
    yield
    logger.info("Shutting down")


def _error_response(
    status_code: int,
    message: str,
    code: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    body = ApiResponse.fail(message, code=code, details=details)
    return JSONResponse(status_code=status_code, content=body.to_dict())


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    # loc looks like ("body", "start_date") or ("query", "month")
    return [
        {"field": str(err["loc"][-1]) if err.get("loc") else "unknown", "msg": err["msg"]}
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = _field_errors(exc)
        logger.warning(f"Rejected malformed request to {request.url.path}", extra={"errors": errors})
        return _error_response(422, "Request validation failed", "VALIDATION_ERROR", {"errors": errors})

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        logger.warning(f"{exc.error_code}: {exc.message}", extra={"path": request.url.path})
        return _error_response(exc.status_code, exc.message, exc.error_code, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return _error_response(exc.status_code, message, f"HTTP_{exc.status_code}")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled server error", extra={"path": request.url.path})
        return _error_response(500, "An unexpected server error occurred.", "INTERNAL_ERROR")


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Leave requests, approvals and monthly paid-leave balances",
    lifespan=lifespan,
)

# Last added runs first: CORS, then correlation id, then request logging
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[settings.request_id_header, "X-Process-Time"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/", tags=["Health"])
def root():
    return {
        "message": settings.app_name,
        "version": settings.version,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Liveness check."""
    return {
        "status": "up",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "environment": settings.environment,
    }


@app.get("/readiness", tags=["Health"])
def readiness_check():
    """Readiness check: the database must answer; mail is reported but optional."""
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        raise HTTPException(status_code=503, detail="Service not ready")
    return {
        "status": "ready",
        "components": {
            "database": "connected",
            "email": "configured" if settings.email.smtp_host else "disabled",
        },
    }
