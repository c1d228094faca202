# wavy/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import settings
from .db.init import init_database
from .exception_handlers import setup_exception_handlers
from .logging_config import LoggingConfig
from .routers import auth, clients, content, cra, db, health, jobs, otp, trainings, users
from .security.rate_limit import RateLimitMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    logger.info(f"Wavy API started ({settings.APP_ENV})")
    yield


def create_app() -> FastAPI:
    LoggingConfig.setup_logging(settings)

    app = FastAPI(
        title="Wavy Services API",
        description="Recruitment site, training catalogue and CRA portal backend.",
        version=__version__,
        lifespan=lifespan,
    )

    # Registered before CORS so CORS stays the outermost layer
    app.add_middleware(RateLimitMiddleware)

    # --- CORS Middleware Configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    # --- API Routers ---
    app.include_router(health.router)
    for module in (auth, otp, users, jobs, trainings, clients, cra, content, db):
        app.include_router(module.router, prefix="/api")

    return app


app = create_app()
