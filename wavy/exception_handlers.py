"""
Exception handlers for the FastAPI application.

Every error leaves the API as JSON with an ``error`` key, which is what the
frontend client reads. Token workflow failures additionally carry
``success: false`` and a user-facing ``message``.
"""

import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import FilterError, TableAccessDenied, TokenWorkflowError

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Données invalides", "details": jsonable_encoder(exc.errors())},
    )


async def token_workflow_handler(request: Request, exc: TokenWorkflowError) -> JSONResponse:
    content = {"success": False, "error": exc.error, "message": exc.message}
    content.update(exc.extra)
    return JSONResponse(status_code=exc.status_code, content=content)


async def filter_error_handler(request: Request, exc: FilterError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


async def table_access_handler(request: Request, exc: TableAccessDenied) -> JSONResponse:
    logger.info(f"Denied generic access to table '{exc.table}' on {request.method} {request.url.path}")
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"error": exc.message})


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "Conflit avec une donnée existante"},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all for unhandled exceptions.

    Logs the full traceback under an error id and returns that id so it can be
    quoted when the problem is reported.
    """
    error_id = uuid.uuid4().hex[:12]
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Erreur serveur", "error_id": error_id},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register every handler on ``app``."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(TokenWorkflowError, token_workflow_handler)
    app.add_exception_handler(FilterError, filter_error_handler)
    app.add_exception_handler(TableAccessDenied, table_access_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered")
