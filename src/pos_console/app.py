"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .api.router import api_router
from .api.routes import health
from .cart import CartRegistry
from .config import get_settings
from .database import init_database
from .error_handlers import pos_console_exception_handler, sqlalchemy_exception_handler
from .exceptions import PosConsoleError
from .logging_config import get_logger, setup_logging

logger = get_logger("app")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    setup_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    init_database()

    app = FastAPI(title=settings.app_name, version=__version__)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
            allow_credentials="*" not in settings.cors_origins,
        )

    app.add_exception_handler(PosConsoleError, pos_console_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)

    # Carts live in process memory; idle or surplus ones are dropped.
    app.state.carts = CartRegistry(max_idle=settings.cart_idle_timeout, max_carts=settings.max_open_carts)

    app.include_router(health.router)
    app.include_router(api_router, prefix=settings.api_v1_prefix)
    logger.info("%s %s ready (api at %s)", settings.app_name, __version__, settings.api_v1_prefix)
    return app
