"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Lifespan manager — logging setup, DB table creation, cleanup
  2. CORS middleware — allows the frontend origin to call the JSON actions
  3. Exception handlers — maps domain errors to HTTP responses
  4. Router registration — pages, auth, banks, transfers

Running locally:
    uvicorn bankdash.main:app --reload

For plain-HTTP local development set SESSION_COOKIE_SECURE=false, otherwise
the browser won't send the session cookie back.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import bankdash.models  # noqa: F401  (registers every table on Base.metadata)
from bankdash.config import settings
from bankdash.database import engine, Base
from bankdash.exceptions import register_exception_handlers
from bankdash.logging_config import setup_logging
from bankdash.routers import auth, banks, pages, transfers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Configures logging and creates any missing tables.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    setup_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(
        "%s %s started (Plaid: %s, Dwolla: %s)",
        settings.APP_NAME, settings.APP_VERSION, settings.PLAID_ENV, settings.DWOLLA_ENV,
    )
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Personal finance dashboard: onboarding, bank linking with Plaid, and transfers over Dwolla",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(pages.router)
app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(banks.router, prefix="/banks", tags=["Banks"])
app.include_router(transfers.router, prefix="/transfers", tags=["Transfers"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers and uptime monitors."""
    return {"status": "ok", "version": settings.APP_VERSION}
