"""Problem Details (RFC 9457) errors raised by cursor-pager."""

from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


PROBLEM_JSON = "application/problem+json"


class ProblemDetail(BaseModel):
    """Problem Details as defined in RFC 9457."""

    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="A URI reference that identifies the specific occurrence")

    # Extensions (error_code, max_limit, ...) are carried as extra fields
    model_config = {"extra": "allow"}


class ProblemDetailException(Exception):
    """Base exception for errors that surface to callers as Problem Details."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: str = "about:blank",
        instance: Optional[str] = None,
        **extensions: Any
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.type_uri = type_uri
        self.instance = instance
        self.extensions = extensions
        super().__init__(detail or title)

    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to ProblemDetail model."""
        instance = self.instance
        if instance is None and request is not None:
            instance = str(request.url.path)

        return ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=instance,
            **self.extensions
        )

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Convert to JSONResponse with Problem Details format."""
        return _problem_json(self.status, self.to_problem_detail(request))


class BadRequestError(ProblemDetailException):
    """400 Bad Request error."""

    def __init__(self, detail: str, **extensions: Any):
        super().__init__(
            status=400,
            title="Bad Request",
            detail=detail,
            **extensions
        )


class InvalidCursorError(BadRequestError):
    """A pagination cursor is malformed, tampered with or minted for another sort order.

    Fatal to the single request; never retried.
    """

    def __init__(self, detail: str = "Invalid cursor", **extensions: Any):
        extensions.setdefault("error_code", "invalid_cursor")
        super().__init__(detail, **extensions)


class InvalidLimitError(BadRequestError):
    """A page limit is not a positive integer within the accepted range."""

    def __init__(self, detail: str, max_limit: Optional[int] = None, **extensions: Any):
        extensions.setdefault("error_code", "invalid_limit")
        if max_limit is not None:
            extensions["max_limit"] = max_limit
        super().__init__(detail, **extensions)


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response."""
    if instance is None and request is not None:
        instance = str(request.url.path)

    problem = ProblemDetail(
        type=type_uri,
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        **extensions
    )
    return _problem_json(status, problem)


def _problem_json(status: int, problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=problem.model_dump(mode="json", exclude_none=True),
        headers={"Content-Type": PROBLEM_JSON}
    )
