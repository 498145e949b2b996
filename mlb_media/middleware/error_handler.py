"""
Error handling middleware for the MLB media import service.

This module turns service exceptions, request validation errors and
unexpected failures into the same structured JSON error body.
"""

import time
import logging
import traceback
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from mlb_media.core.exceptions import MediaBlockException, InternalError, ErrorCode


logger = logging.getLogger(__name__)


def _elapsed_ms(request: Request) -> float:
    start_time = getattr(request.state, 'start_time', None)
    if start_time is None:
        return 0.0
    return round((time.time() - start_time) * 1000, 2)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Outermost safety net for errors no exception handler claimed.

    Also stamps the request start time used for response timing.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.start_time = time.time()

        try:
            return await call_next(request)

        except MediaBlockException as e:
            return await handle_service_exception(request, e)

        except Exception as e:
            return await self._handle_unexpected_exception(request, e)

    async def _handle_unexpected_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        response_time = _elapsed_ms(request)

        logger.error(
            f"Unexpected error: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "response_time_ms": response_time,
                "traceback": traceback.format_exc()
            }
        )

        internal_error = InternalError()
        response_data = internal_error.to_dict()
        response_data["response_time_ms"] = response_time

        return JSONResponse(status_code=500, content=response_data)


async def handle_service_exception(request: Request, exc: MediaBlockException) -> JSONResponse:
    """Handle service exceptions raised by routes and dependencies."""
    response_time = _elapsed_ms(request)

    log_data = {
        "error_code": exc.error_code.value,
        "path": request.url.path,
        "method": request.method,
        "response_time_ms": response_time,
        "retryable": exc.retryable,
        "details": exc.details
    }

    if exc.status_code >= 500:
        logger.error(f"Request failed: {exc.message}", extra=log_data)
    else:
        logger.warning(f"Request failed: {exc.message}", extra=log_data)

    response_data = exc.to_dict()
    response_data["response_time_ms"] = response_time

    return JSONResponse(status_code=exc.status_code, content=response_data)


async def handle_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body/query validation errors."""
    errors = exc.errors()
    error_detail = errors[0] if errors else {}
    loc = error_detail.get('loc') or ['unknown']
    field_name = loc[-1]
    error_msg = error_detail.get('msg', 'Validation error')

    logger.warning(
        f"Validation error: {error_msg}",
        extra={"field": field_name, "path": request.url.path, "method": request.method}
    )

    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": ErrorCode.VALIDATION_ERROR.value,
            "message": f"Invalid {field_name}: {error_msg}",
            "suggestion": "Please check your input and try again",
            "retryable": False,
            "details": {
                "field": field_name,
                "validation_errors": jsonable_encoder(errors)
            },
            "response_time_ms": _elapsed_ms(request)
        }
    )


def register_exception_handlers(app: FastAPI):
    """Install the structured error handlers on an application."""
    app.add_exception_handler(MediaBlockException, handle_service_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_exception)
    app.add_middleware(ErrorHandlingMiddleware)
