"""FastAPI exception handlers for applications that embed the paginator."""

import logging
from typing import Any, Dict, List

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from .problem_details import ProblemDetailException, create_problem_response

logger = logging.getLogger(__name__)


def _request_context(request: Request) -> Dict[str, Any]:
    return {"path": str(request.url.path), "method": request.method}


def _summarize_errors(errors: List[Dict[str, Any]]) -> tuple[str, List[Dict[str, Any]]]:
    """Flatten pydantic errors into a readable message and a JSON-safe list."""
    messages = []
    safe_errors = []
    for error in errors:
        loc = " -> ".join(str(x) for x in error.get("loc", ()))
        messages.append(f"{loc}: {error['msg']}" if loc else error["msg"])
        safe_errors.append({
            "loc": [str(x) for x in error.get("loc", ())],
            "msg": error["msg"],
            "type": error["type"]
        })
    return "; ".join(messages), safe_errors


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances (InvalidCursorError, InvalidLimitError, ...)."""
    logger.info(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={**_request_context(request), "status_code": exc.status, "detail": exc.detail}
    )
    return exc.to_response(request)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors raised by FastAPI."""
    summary, errors = _summarize_errors(exc.errors())
    logger.info(
        f"Validation error: {len(errors)} errors",
        extra={**_request_context(request), "errors": errors}
    )
    return create_problem_response(
        status=422,
        title="Validation Error",
        detail=f"Validation failed: {summary}",
        request=request,
        validation_errors=errors
    )


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle direct pydantic validation errors, e.g. a bad PageRequest."""
    summary, errors = _summarize_errors(exc.errors())
    logger.info(
        f"Pydantic validation error: {len(errors)} errors",
        extra={**_request_context(request), "errors": errors}
    )
    return create_problem_response(
        status=400,
        title="Validation Error",
        detail=f"Data validation failed: {summary}",
        request=request,
        validation_errors=errors
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions, including store failures."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {exc}",
        extra={**_request_context(request), "exception_type": type(exc).__name__},
        exc_info=True
    )

    # Don't expose internal error details
    return create_problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred",
        request=request
    )


def register_exception_handlers(app):
    """Register all exception handlers with a FastAPI app."""
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, general_exception_handler)
