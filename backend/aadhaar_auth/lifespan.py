"""
Application lifespan management for startup and shutdown events
"""
import logging
from contextlib import asynccontextmanager

from .core.env import get_env_name, is_local_env
from .core.startup_validation import run_startup_validation
from .db import Base, get_engine
from .services.session_store import OTPSessionStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    """Validate configuration, start the OTP session sweep, stop it on shutdown"""
    logger.info(f"Starting Aadhaar auth service (ENV={get_env_name()})")

    run_startup_validation()

    if is_local_env():
        # Local/dev convenience; managed environments own their schema
        from . import models  # noqa: F401  registers tables on Base
        Base.metadata.create_all(bind=get_engine())
        logger.info("Database tables ensured (local environment)")

    store = OTPSessionStore()
    app.state.session_store = store
    await store.start()

    try:
        yield
    finally:
        logger.info("Shutting down Aadhaar auth service")
        await store.stop()
