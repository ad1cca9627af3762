from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import List
import logging

from meunps.database import engine, Base
import meunps.models  # noqa: F401  registers every table on Base.metadata
from meunps.config import get_settings, get_cors_origins
from meunps.routers import (
    admin,
    affiliate,
    app_config,
    auth,
    campaigns,
    contacts,
    email,
    entities,
    forms,
    profile,
    responses,
    webhooks,
)
from meunps.utils import utcnow

API_NAME = "Meu NPS API"
API_VERSION = "1.0.0"

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

cors_allow_origins: List[str] = get_cors_origins(settings)

if cors_allow_origins:
    logger.info("Allowing CORS origins: %s", cors_allow_origins)


# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title=API_NAME, version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"error": <detail>}."""
    detail = exc.detail
    if exc.status_code == 404 and detail == "Not Found":
        detail = "Route not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 carrying the first validation message."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"error": "Internal server error"}
    if not settings.is_production():
        content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.get("/health")
def health_check():
    """Liveness check"""
    return {"status": "OK", "timestamp": utcnow().isoformat(), "version": API_VERSION}


@app.get("/api")
def api_info():
    """API information endpoint"""
    return {"message": API_NAME, "version": API_VERSION}


app.include_router(auth.router)
app.include_router(campaigns.router)
app.include_router(entities.router)
app.include_router(contacts.router)
app.include_router(forms.router)
app.include_router(responses.router)
app.include_router(profile.router)
app.include_router(app_config.router)
app.include_router(affiliate.router)
app.include_router(admin.router)
app.include_router(email.router)
app.include_router(webhooks.router)
