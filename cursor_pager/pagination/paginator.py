"""Cursor paginator: stable, resumable pages over a concurrently written collection."""

import logging
from typing import Any, List, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, Field

from ..config import get_settings
from ..errors.problem_details import BadRequestError, InvalidLimitError
from .cursor import CursorData, Direction, SortKey, decode_cursor, encode_cursor

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """The one operation the paginator needs from storage."""

    async def seek(self, position: Optional[tuple], limit: int, descending: bool) -> Sequence[Any]:
        """Return up to ``limit`` records strictly after ``position``.

        Ascending: records whose ``(sort fields..., id)`` tuple is greater than
        ``position``, in ascending order. Descending: records whose tuple is
        less than ``position``, in descending order. ``None`` means unbounded.
        """
        ...


class PageRequest(BaseModel):
    """Caller-facing request shape."""

    cursor: Optional[str] = Field(default=None, description="Cursor from a previous page")
    limit: Optional[int] = Field(default=None, description="Number of records per page")
    direction: Optional[Direction] = Field(default=None, description="forward or backward")


class Page(BaseModel):
    """Caller-facing response shape. ``data`` is always in canonical sort order."""

    data: List[Any] = Field(description="Records on this page")
    next_cursor: Optional[str] = Field(default=None, description="Cursor for the next page")
    prev_cursor: Optional[str] = Field(default=None, description="Cursor for the previous page")
    has_more: bool = Field(description="Whether more records lie beyond this page in the direction of travel")


class CursorPaginator:
    """Translate ``(cursor, limit, direction)`` into a bounded, ordered page.

    The paginator keeps no state between calls. Everything needed to resume
    lives in the cursor. No total count is computed.

    Stability relies on the store answering each seek from one consistent
    snapshot. A store without snapshot reads only guarantees that the
    already returned prefix is not repeated.
    """

    def __init__(
        self,
        store: RecordStore,
        sort_key: SortKey,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
        limit_policy: Optional[str] = None,
        max_cursor_length: Optional[int] = None
    ):
        settings = get_settings()
        self.store = store
        self.sort_key = sort_key
        self.max_page_size = settings.max_page_size if max_page_size is None else max_page_size
        self.limit_policy = settings.limit_policy if limit_policy is None else limit_policy
        self.max_cursor_length = settings.max_cursor_length if max_cursor_length is None else max_cursor_length

        for name in ("max_page_size", "max_cursor_length"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")
        if default_page_size is not None and not 1 <= default_page_size <= self.max_page_size:
            raise ValueError(f"default_page_size must be between 1 and {self.max_page_size}, got {default_page_size}")
        self.default_page_size = min(
            settings.default_page_size if default_page_size is None else default_page_size,
            self.max_page_size
        )

        if self.limit_policy not in ("reject", "clamp"):
            raise ValueError(f"Unknown limit policy: {self.limit_policy}")

    def encode_cursor(self, record: Any, direction: Direction = Direction.FORWARD) -> str:
        """Encode the position of ``record`` as an opaque cursor."""
        return encode_cursor(self.sort_key, record, direction)

    def decode_cursor(self, cursor: str) -> CursorData:
        """Decode a cursor minted by this paginator's sort key.

        Raises:
            InvalidCursorError: If the cursor is malformed
        """
        return decode_cursor(self.sort_key, cursor, max_length=self.max_cursor_length)

    def resolve_limit(self, limit: Optional[int]) -> int:
        """Apply the default page size and the limit policy.

        Raises:
            InvalidLimitError: If limit is not a positive integer, or exceeds
                the maximum under the "reject" policy
        """
        if limit is None:
            return self.default_page_size
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise InvalidLimitError("Limit must be an integer", max_limit=self.max_page_size)
        if limit < 1:
            raise InvalidLimitError("Limit must be at least 1", max_limit=self.max_page_size)
        if limit > self.max_page_size:
            if self.limit_policy == "clamp":
                logger.debug(f"Clamping limit {limit} to {self.max_page_size}")
                return self.max_page_size
            logger.warning(f"Rejected limit {limit} above maximum {self.max_page_size}")
            raise InvalidLimitError(
                f"Limit must not exceed {self.max_page_size}",
                max_limit=self.max_page_size
            )
        return limit

    async def fetch_page(
        self,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        direction: Union[Direction, str, None] = None
    ) -> Page:
        """Fetch one page.

        A request without a cursor is the absolute start (forward) or end
        (backward), so that side's cursor is null. Any non-empty page reached
        through a cursor gets a cursor pointing back the way it came, without
        probing the store. After deletions that cursor may lead to an empty
        page with ``has_more`` false.

        Args:
            cursor: Cursor from a previous page, None for the first page
                in the requested direction
            limit: Page size, None for the default
            direction: "forward" or "backward"; defaults to the cursor's own
                direction, or forward without a cursor

        Returns:
            Page in canonical order with continuation cursors

        Raises:
            InvalidCursorError: If the cursor is malformed
            InvalidLimitError: If the limit is out of range
            BadRequestError: If the direction is unknown
        """
        page_size = self.resolve_limit(limit)
        cursor_data = self.decode_cursor(cursor) if cursor is not None else None

        if direction is None:
            direction = cursor_data.direction if cursor_data else Direction.FORWARD
        else:
            try:
                direction = Direction(direction)
            except ValueError:
                raise BadRequestError(f"Invalid direction '{direction}', expected 'forward' or 'backward'")

        backward = direction is Direction.BACKWARD
        position = cursor_data.position if cursor_data else None

        # Backward reads against the canonical order, then flips back
        rows = list(await self.store.seek(position, page_size + 1, backward != self.sort_key.descending))

        has_more = len(rows) > page_size
        rows = rows[:page_size]
        if backward:
            rows.reverse()

        next_cursor = None
        prev_cursor = None
        if rows:
            if backward:
                if has_more:
                    prev_cursor = self.encode_cursor(rows[0], Direction.BACKWARD)
                if cursor_data is not None:
                    next_cursor = self.encode_cursor(rows[-1], Direction.FORWARD)
            else:
                if has_more:
                    next_cursor = self.encode_cursor(rows[-1], Direction.FORWARD)
                if cursor_data is not None:
                    prev_cursor = self.encode_cursor(rows[0], Direction.BACKWARD)

        logger.debug(
            f"Fetched page of {len(rows)} records "
            f"(direction={direction.value}, limit={page_size}, has_more={has_more})"
        )

        return Page(
            data=rows,
            next_cursor=next_cursor,
            prev_cursor=prev_cursor,
            has_more=has_more
        )

    async def paginate(self, request: PageRequest) -> Page:
        """Fetch the page described by a PageRequest."""
        return await self.fetch_page(
            cursor=request.cursor,
            limit=request.limit,
            direction=request.direction
        )
