import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from .config import get_settings
from .errors import AppError, PermissionDenied, UpstreamFailure
from .migration_runner import run_migrations_once
from .routers import (
    auth,
    projects,
    statistics,
    teams,
    tickets,
    work_sessions,
)

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Postgres SQLSTATE for insufficient_privilege (row-level security denials)
INSUFFICIENT_PRIVILEGE = "42501"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.run_migrations_on_startup:
        try:
            run_migrations_once()
        except Exception:
            logger.exception("Database migration failed")
            raise
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key, session_cookie=settings.session_cookie)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse({"error": "Invalid request", "details": details}, status_code=400)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == INSUFFICIENT_PRIVILEGE:
        error: AppError = PermissionDenied(details=str(orig), code=code)
    else:
        error = UpstreamFailure(details=str(orig or exc), code=code)
    return JSONResponse(error.to_dict(), status_code=error.status_code)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


app.include_router(auth.router)
app.include_router(work_sessions.router)
app.include_router(tickets.router)
app.include_router(teams.router)
app.include_router(projects.router)
app.include_router(statistics.router)
