import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from posevault.api.functions import router as functions_router
from posevault.api.galleries import router as galleries_router
from posevault.api.notifications import router as notifications_router
from posevault.api.share import router as share_router
from posevault.api.shares import router as shares_router
from posevault.api.storage import router as storage_router
from posevault.dependencies import get_s3_client_instance, set_s3_client_instance
from posevault.exceptions import InputError, InternalError, PoseVaultError, UpstreamError
from posevault.s3_service import AsyncS3Client

# Configure logging early: uvicorn imports this module when starting the app
from .logging_config import configure_logging


class AppSettings(BaseSettings):
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = AppSettings()
configure_logging(level=settings.log_level)

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "invalid_input",
    401: "unauthorized",
    403: "access_denied",
    404: "not_found",
    405: "method_not_allowed",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared object-store client on startup and release it on shutdown."""
    logger.info("Starting up application...")
    try:
        set_s3_client_instance(AsyncS3Client())
        logger.info("S3 client initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize S3 client: %s", e)
        raise

    yield

    logger.info("Shutting down application...")
    try:
        await get_s3_client_instance().close()
        logger.info("S3 client closed successfully")
    except RuntimeError as e:
        logger.error("Error during S3 client shutdown: %s", e)
    set_s3_client_instance(None)


app = FastAPI(title="PoseVault", redoc_url=None, redirect_slashes=False, lifespan=lifespan)


def _error_response(error: PoseVaultError, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_payload(), headers=headers)


# Registered before CORSMiddleware so it runs inside it and 500s keep the CORS headers
@app.middleware("http")
async def unhandled_error_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(InternalError("Internal server error"))


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PoseVaultError)
async def posevault_error_handler(request: Request, exc: PoseVaultError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return _error_response(exc)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    content = {"ok": False, "error": str(exc.detail), "code": HTTP_ERROR_CODES.get(exc.status_code, "http_error")}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error_response(InputError(message))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(UpstreamError("Database request failed", detail=str(exc)))


app.include_router(functions_router)
app.include_router(share_router)
app.include_router(storage_router)
app.include_router(shares_router)
app.include_router(galleries_router)
app.include_router(notifications_router)


@app.get("/")
def read_root():
    return {"message": "Hello from PoseVault!"}
