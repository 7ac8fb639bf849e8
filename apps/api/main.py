"""
Rankmaker - FastAPI Backend
Main application entry point: tier lists, voting, social features and media upload.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings, validate_security_settings
from database import dispose_db, init_db
from routers import auth, health, tierlists, upload, users
from routers.rate_limit import close_rate_limit_client

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print("🚀 Starting Rankmaker API...")
    validate_security_settings()
    try:
        await init_db()
        print("🗄️ Database schema verified.")
    except Exception as e:
        print(f"⚠️ Database bootstrap skipped: {e}")
    if not settings.MEDIA_HOST_URL:
        print("⚠️ MEDIA_HOST_URL not set; uploads will answer 503.")
    yield
    # Shutdown
    await close_rate_limit_client()
    await dispose_db()
    print("👋 Shutting down API...")


app = FastAPI(
    title="Rankmaker API",
    description="Create, share and vote on tier lists",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are InvalidInput (400), not 422."""
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid input", "errors": jsonable_encoder(exc.errors())},
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(tierlists.router, prefix="/tierlists", tags=["Tier Lists"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(upload.router, prefix="/upload", tags=["Upload"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Rankmaker API",
        "version": "0.1.0",
        "status": "running"
    }
