from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from supabase import Client

from app.core.config import Settings, get_settings, settings, validate_settings
from app.core.logging_config import setup_logging, get_logger
from app.core.exceptions import (
    SchoolPortalException,
    ConfigurationError,
    sanitize_error_message
)
from app.core.supabase import get_db
from app.api.router import api_router

# Setup logging first (before settings validation)
setup_logging()
logger = get_logger(__name__)

# Missing configuration is reported by the lifespan hook, not at import time
app_settings = settings if settings is not None else Settings.model_construct()


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        logger.info("Validating configuration...")
        validate_settings()
        current = get_settings()
        logger.info("Configuration validated successfully")
        logger.info(f"Starting {current.APP_NAME} v{current.APP_VERSION} ({current.ENVIRONMENT})")
        logger.info(f"Debug mode: {'ON' if current.DEBUG else 'OFF'}")
        logger.info(f"Calendar time zone: {current.TIMEZONE}")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        logger.error("Application startup failed due to configuration issues.")
        raise

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=app_settings.APP_NAME,
    version=app_settings.APP_VERSION,
    description="News and calendar backend for the school website",
    lifespan=lifespan,
    docs_url="/api/docs" if app_settings.DEBUG else None,
    redoc_url="/api/redoc" if app_settings.DEBUG else None,
    openapi_url="/api/openapi.json" if app_settings.DEBUG else None,
)


def _debug() -> bool:
    try:
        return get_settings().DEBUG
    except ConfigurationError:
        return False


def error_response(status_code: int, message: str, error=None) -> JSONResponse:
    """Every error keeps the {success: false, message} envelope."""
    content = {"success": False, "message": message}
    if error is not None and _debug():
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(SchoolPortalException)
async def portal_exception_handler(request: Request, exc: SchoolPortalException):
    """Handle custom application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"Application error: {exc.message}",
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
        }
    )
    return error_response(exc.status_code, exc.message, error=exc.details or exc.error_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query strings are a 400 ValidationError."""
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg", "Invalid request"))

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        f"Validation failed: {'; '.join(problems)}",
        error=[{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()],
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Endpoint not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Last-resort handler for anything the endpoints did not map."""
    logger.exception(
        f"Unhandled exception: {type(exc).__name__}",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        error=sanitize_error_message(exc),
    )


allowed_origins = list(dict.fromkeys([
    app_settings.FRONTEND_URL,
    "http://localhost:5000",
    "http://127.0.0.1:5000",
]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if not app_settings.DEBUG else ["*"],
    allow_credentials=not app_settings.DEBUG,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    current = get_settings()
    return {
        "success": True,
        "message": f"Welcome to {current.APP_NAME}",
        "version": current.APP_VERSION,
    }


@app.get("/health")
def health_check(db: Client = Depends(get_db)):
    """Liveness plus a storage probe; 503 when storage is unreachable."""
    current = get_settings()
    health_status = {
        "status": "healthy",
        "service": current.APP_NAME,
        "version": current.APP_VERSION,
        "environment": current.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        db.table(current.NEWS_TABLE).select("id", count="exact").limit(1).execute()
        health_status["database"] = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {type(e).__name__}")
        health_status["database"] = "disconnected"
        health_status["status"] = "degraded"

    status_code = status.HTTP_200_OK if health_status["status"] == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=health_status, status_code=status_code)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().PORT)
