"""
Exception handlers for the FastAPI application.

This module registers exception handlers that convert application
exceptions to appropriate HTTP responses with consistent formatting.
"""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ErrorCode, FitSmartError


logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    details: Dict[str, Any] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        content["error"]["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def fitsmart_error_handler(request: Request, exc: FitSmartError) -> JSONResponse:
    """Handle all FitSmartError exceptions."""
    return create_error_response(
        status_code=exc.status_code,
        code=exc.code.value,
        message=exc.message,
        details=exc.details if exc.details else None,
    )


async def pydantic_validation_error_handler(
    request: Request,
    exc: PydanticValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors raised inside route code."""
    errors = [
        {
            "field": ".".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return create_error_response(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR.value,
        message="Request validation failed",
        details={"errors": errors},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return create_error_response(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR.value,
        message="An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the application."""
    app.add_exception_handler(FitSmartError, fitsmart_error_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_validation_error_handler)
    # Catches every other Exception, keep it last
    app.add_exception_handler(Exception, generic_exception_handler)
