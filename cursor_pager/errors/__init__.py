"""Error handling module for cursor-pager."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    InvalidCursorError,
    InvalidLimitError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "InvalidCursorError",
    "InvalidLimitError",
    "create_problem_response",
    "register_exception_handlers"
]
