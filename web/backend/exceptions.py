#!/usr/bin/env python3
"""
Error handlers for the web application.

Screening errors raised by the core services are translated here so the
routers never build error responses themselves.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.screening.errors import (
    NotFoundError,
    ScreeningError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def screening_exception_handler(
    request: Request,
    exc: ScreeningError
) -> JSONResponse:
    """
    Handle screening service exceptions.

    Validation errors map to 400 and not-found errors to 404, both with the
    error message. Anything else is a 500 with a generic message; the real
    cause is only logged.
    """
    if isinstance(exc, ValidationError):
        logger.info(f"Rejected request to {request.url.path}: {exc}")
        status_code = 400
        message = str(exc)
    elif isinstance(exc, NotFoundError):
        status_code = 404
        message = str(exc)
    else:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
        status_code = 500
        message = "Internal server error"

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "code": exc.code,
            "type": exc.__class__.__name__
        }
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions with consistent format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )
