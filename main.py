"""FastAPI application factory and main entry point."""

import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
import logging_config
from api import router as api_router
from api.errors import register_exception_handlers
from db import close_db, init_db
from services import janitor

# Setup logging
logging_config.setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    await init_db()
    janitor_task = None
    if config.settings.JANITOR_ENABLED:
        janitor_task = asyncio.create_task(janitor.run_forever())
    yield
    # Shutdown
    if janitor_task is not None:
        janitor_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await janitor_task
    await close_db()


# Create FastAPI app
app = FastAPI(
    title="Project Marketplace API",
    description="Freelance project bidding with escrow payments and work review",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:3001",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router.api_router, prefix=config.settings.API_PREFIX)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Project Marketplace API",
        "version": "0.1.0",
    }
