"""
DaanaRX Inventory Backend.

ARCHITECTURE:
- FastAPI Backend: lookup, validation, FEFO advisory, atomic stock writes
- SQL store (SQLite locally, Postgres in production): source of truth
- Web client: scanning, forms and labels (not part of this service)

STOCK MODEL:
- Every stock change is one commit: unit update/delete + audit transaction
- A unit that reaches zero is deleted; its transactions remain
- Out-of-order (non-FEFO) dispenses require explicit operator confirmation
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import units, dispense, records
from app.core.config import settings
from app.db.init_db import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database tables on startup."""
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="DaanaRX Inventory API",
    description="Check-in, lookup and FEFO-aware dispensing of donated medication units.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
        "X-User-Id",
    ],
    max_age=600,  # Cache preflight for 10 minutes
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response

app.include_router(units.router, prefix="/units", tags=["units"])
app.include_router(dispense.router, prefix="/dispense", tags=["dispense"])
app.include_router(records.router, tags=["records"])


@app.get("/health")
def health():
    return {"status": "ok"}
