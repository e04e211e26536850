"""
SmileFactory Mailer API
FastAPI application that renders transactional emails and sends them through Resend.
"""

import logging
import os
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mailer.config import MailerSettings, get_cors_origins, load_settings
from mailer.routers import emails

SERVICE_NAME = "SmileFactory Mailer"
VERSION = "1.0.0"

# Configure logging to output to console
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=SERVICE_NAME,
    description="Welcome and custom HTML emails delivered via Resend",
    version=VERSION,
)

# Wildcard origins cannot be combined with credentials
_cors_origins = get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials="*" not in _cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(emails.router, prefix="/api", tags=["emails"])


# ---------------------------------------------------------------------------
# Error responses: every error body is {"success": false, "error": "..."}
# ---------------------------------------------------------------------------

def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return _error_response(404, "Endpoint not found")
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return _error_response(400, "Invalid request body")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(500, "Internal server error")


@app.on_event("startup")
async def log_startup() -> None:
    """
    Log where the API is listening and flag missing provider credentials.

    The port shown is taken from the ``PORT`` environment variable (default
    8000) so it matches how uvicorn was started in docker-compose/.env.
    """
    settings = load_settings()
    port = os.getenv("PORT", "8000")
    logger.info(
        "%s running at:\n"
        "  Local:      http://localhost:%s\n"
        "  Send email: POST http://localhost:%s/api/send-email\n"
        "  Provider:   %s (from %s)",
        SERVICE_NAME,
        port,
        port,
        settings.provider,
        settings.sender.formatted(),
    )
    if not settings.api_key:
        logger.warning("EMAIL_API_KEY is not set; every send will fail with a delivery error")


@app.get("/")
async def root():
    return {"message": SERVICE_NAME, "version": VERSION}


@app.get("/health")
async def health(settings: MailerSettings = Depends(emails.get_settings)):
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": VERSION,
        "provider": settings.provider,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
