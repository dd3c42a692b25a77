# /blog_auto/main.py

import asyncio
import contextlib
import logging

# --- Core FastAPI Imports ---
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

# --- Application-specific Router Imports ---
from .routers import (
    generate_router,
    history_router,
    style_profiles_router,
    system_router,
)

# --- Startup Dependencies ---
from . import config
from .core.logging import setup_logging
from .db.database import init_db
from .services.generation_store import generation_store

logger = logging.getLogger(__name__)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    init_db()
    sweeper = asyncio.create_task(generation_store.run_sweeper(config.PROGRESS_SWEEP_INTERVAL_SECONDS))
    logger.info("Blog Auto backend started (max concurrent generations: %d)", config.MAX_CONCURRENT_GENERATIONS)
    yield
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="Blog Auto API",
    description="Generates Naver blog posts with the Claude CLI, scores them for SEO and keeps a history.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router Inclusion ---
app.include_router(generate_router.router, prefix="/api/generate", tags=["Generate"])
app.include_router(history_router.router, prefix="/api/history", tags=["History"])
app.include_router(style_profiles_router.router, prefix="/api/style-profiles", tags=["Style Profiles"])
app.include_router(system_router.router, prefix="/api", tags=["System"])


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """Liveness probe."""
    return {"status": "Blog Auto backend is running!", "version": app.version}
