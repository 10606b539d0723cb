# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.errors import register_exception_handlers
from src.api.middleware import EffectiveFilterCleanupMiddleware
from src.config import settings
from src.database import SessionLocal

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    if settings.SEED_RBAC_ON_STARTUP:
        from src.services.rbac_seed_service import seed_rbac_data

        logger.info("Seeding RBAC catalog and default roles...")
        db = SessionLocal()
        try:
            seed_rbac_data(db)
        finally:
            db.close()

    yield

    logger.info("Shutting down")


app = FastAPI(
    title="E-Learning Authorization",
    description="Role and scope based authorization for the e-learning platform",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(EffectiveFilterCleanupMiddleware)

register_exception_handlers(app)


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include API router after it's created
from src.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
