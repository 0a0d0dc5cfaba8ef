"""JSON error responses for domain and database failures."""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .exceptions import PosConsoleError
from .logging_config import get_logger

logger = get_logger("error_handlers")


async def pos_console_exception_handler(request: Request, exc: PosConsoleError) -> JSONResponse:
    """Cart and checkout failures: the error name, the failing step and a message."""

    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
        extra={"status_code": exc.status_code, "step": exc.step},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "step": exc.step, "detail": exc.message},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    if isinstance(exc, IntegrityError):
        error_msg = "Data integrity constraint violated"
        status_code = status.HTTP_409_CONFLICT
    else:
        error_msg = "Database error occurred"
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    logger.error(
        "Database error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        extra={"exception_type": type(exc).__name__},
        exc_info=True,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": error_msg, "step": None, "detail": str(getattr(exc, "orig", None) or exc)},
    )
