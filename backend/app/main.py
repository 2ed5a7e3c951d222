# backend/app/main.py

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from app.api.v1 import auth, donations, history, lookup, profile, saved
from app.clients.google import GoogleOAuthClient
from app.clients.paypal import PayPalClient
from app.clients.upcitemdb import BarcodeLookupClient
from app.config import get_settings
from app.core.exceptions import PriceScanException
from app.core.logging_config import setup_logging
from app.storage import create_storage

# Get settings
settings = get_settings()

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    app.state.storage = create_storage(settings)
    await app.state.storage.initialize()
    app.state.barcode_client = BarcodeLookupClient.from_settings(settings)
    app.state.google_client = GoogleOAuthClient.from_settings(settings)
    app.state.paypal_client = PayPalClient.from_settings(settings)
    if not settings.google_oauth_enabled:
        logger.warning("Google credentials not set, Google sign-in is disabled")
    if not settings.paypal_enabled:
        logger.warning("PayPal credentials not set, donations are disabled")
    yield
    # Shutdown
    await app.state.barcode_client.close()
    await app.state.google_client.close()
    await app.state.paypal_client.close()
    await app.state.storage.close()


# Initialize FastAPI app
app = FastAPI(
    title="PriceScan API",
    description="Barcode scanning and store price comparison API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age_days * 24 * 60 * 60,
    https_only=settings.is_production,
)


# Exception handlers
@app.exception_handler(PriceScanException)
async def pricescan_exception_handler(
    request: Request, exc: PriceScanException
) -> JSONResponse:
    """Handle custom PriceScan exceptions."""
    content = {"message": exc.detail, "error_code": exc.error_code}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed or missing request fields."""
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"message": "Invalid request", "details": exc.errors()}),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Server error"})


# Health check endpoint
@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# Include routers
app.include_router(lookup.router, prefix="/api/lookup", tags=["Lookup"])
app.include_router(history.router, prefix="/api/history", tags=["History"])
app.include_router(saved.router, prefix="/api/saved", tags=["Saved"])
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(profile.router, prefix="/api/profile", tags=["Profile"])
app.include_router(donations.router, tags=["Donations"])


# Root endpoint
@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "message": "PriceScan API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
    }
