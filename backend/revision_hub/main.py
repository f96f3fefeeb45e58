"""
Revision Hub API

FastAPI application for the bookmarked-question review scheduler.

Run locally:
    uvicorn revision_hub.main:app --app-dir backend --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from revision_hub import __version__
from revision_hub.config import settings
from revision_hub.db.base import init_db
from revision_hub.middleware.error_handling import setup_error_handling
from revision_hub.middleware.rate_limit import setup_rate_limiting
from revision_hub.routers import health, preferences, review

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on LOG_LEVEL and the debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Engine echo is controlled by DEBUG; keep its logger quiet otherwise
    if not debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info(f"{settings.APP_NAME} {__version__} started")
    yield
    logger.info(f"{settings.APP_NAME} shutting down")


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware and routers."""
    setup_logging(debug=settings.DEBUG)

    app = FastAPI(title=settings.APP_NAME, version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_error_handling(app, debug=settings.DEBUG)
    setup_rate_limiting(app, enabled=settings.RATE_LIMIT_ENABLED)

    app.include_router(health.router)
    app.include_router(review.router)
    app.include_router(preferences.router)

    return app


app = create_app()
