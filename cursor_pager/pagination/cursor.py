"""Opaque cursor encoding for keyset pagination.

A cursor pins a position in an ordered collection: the values of the sort
fields of one record, followed by that record's unique id. Positions are
compared as whole tuples, so many records sharing a timestamp still page
without gaps or repeats.

Wire format: compact JSON, then URL-safe base64 with the padding stripped,
so a cursor can be used as a query parameter as is.
"""

import base64
import binascii
import logging
import math
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from ..errors.problem_details import InvalidCursorError

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Direction of travel through the collection."""

    FORWARD = "forward"
    BACKWARD = "backward"


class SortField(BaseModel):
    """A single sort component: a record field and the type its values coerce to."""

    name: str = Field(min_length=1, description="Record field name")
    type: Any = Field(default=str, description="Python type of the field's values")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class SortKey(BaseModel):
    """Total order over records: sort fields first, the unique id always last.

    Every component is sorted in the same direction (``order``).
    """

    fields: Tuple[SortField, ...] = ()
    id_field: str = "id"
    id_type: Any = int
    order: Literal["asc", "desc"] = "asc"

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def validate_field_names(self):
        names = self.field_names
        if len(set(names)) != len(names):
            raise ValueError(f"Sort field names must be unique: {list(names)}")
        if self.id_field in names:
            raise ValueError(f"Sort fields must not repeat the id field '{self.id_field}'")
        return self

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    @property
    def column_names(self) -> Tuple[str, ...]:
        """Every component in comparison order, id included."""
        return self.field_names + (self.id_field,)

    @property
    def descending(self) -> bool:
        return self.order == "desc"

    def position_of(self, record: Any) -> tuple:
        """Get the full comparison tuple ``(sort fields..., id)`` of a record."""
        return tuple(_field_value(record, name) for name in self.column_names)


class CursorData(BaseModel):
    """Decoded contents of a cursor."""

    fields: List[str] = Field(description="Sort field names the cursor was minted for")
    key: List[Any] = Field(description="Sort field values, in sort order")
    id: Any = Field(description="Unique id, the final tie-breaker")
    direction: Direction = Field(default=Direction.FORWARD, description="Direction of travel")

    @property
    def position(self) -> tuple:
        """The comparison tuple ``(*key, id)``."""
        return tuple(self.key) + (self.id,)


@lru_cache(maxsize=None)
def _adapter(tp: Any) -> TypeAdapter:
    # Infinities travel as "Infinity" / "-Infinity" instead of null
    return TypeAdapter(tp, config=ConfigDict(ser_json_inf_nan="strings"))


def _is_nan(value: Any) -> bool:
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, Decimal):
        return value.is_nan()
    return False


def _field_value(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record[name]
    return getattr(record, name)


def encode_cursor(
    sort_key: SortKey,
    record: Any,
    direction: Direction = Direction.FORWARD
) -> str:
    """Encode the position of a record as an opaque cursor.

    Args:
        sort_key: Sort definition of the collection
        record: Mapping or object exposing the sort fields and the id
        direction: Direction the cursor continues in

    Returns:
        URL-safe cursor string

    Raises:
        ValueError: If a sort field or the id is missing, null or NaN
    """
    try:
        position = sort_key.position_of(record)
    except (KeyError, AttributeError) as e:
        raise ValueError(f"Failed to encode cursor: record has no field {e}") from e

    for name, value in zip(sort_key.column_names, position):
        if value is None:
            raise ValueError(f"Failed to encode cursor: field '{name}' is null")
        if _is_nan(value):
            raise ValueError(f"Failed to encode cursor: field '{name}' is NaN, which has no order")

    types = [field.type for field in sort_key.fields]
    key = [_adapter(tp).dump_python(value, mode="json") for tp, value in zip(types, position)]
    item_id = _adapter(sort_key.id_type).dump_python(position[-1], mode="json")

    cursor_data = CursorData(
        fields=list(sort_key.field_names),
        key=key,
        id=item_id,
        direction=direction
    )
    raw = cursor_data.model_dump_json().encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(
    sort_key: SortKey,
    cursor: str,
    max_length: Optional[int] = None
) -> CursorData:
    """Decode a cursor and coerce its values back to the sort key's types.

    Args:
        sort_key: Sort definition of the collection
        cursor: Cursor string, as produced by encode_cursor()
        max_length: Reject cursors longer than this

    Returns:
        Decoded cursor data with typed key and id

    Raises:
        InvalidCursorError: If the cursor is malformed or does not fit the sort key
    """
    if not cursor:
        raise InvalidCursorError("Empty cursor provided")
    if not isinstance(cursor, str):
        raise InvalidCursorError("Cursor must be a string")
    if max_length is not None and len(cursor) > max_length:
        raise InvalidCursorError(f"Cursor exceeds {max_length} characters")

    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
        cursor_data = CursorData.model_validate_json(raw)
    except (ValueError, binascii.Error) as e:
        logger.warning(f"Rejected malformed cursor: {e}")
        raise InvalidCursorError("Invalid cursor format") from e

    if tuple(cursor_data.fields) != sort_key.field_names:
        logger.warning(f"Rejected cursor for sort fields {cursor_data.fields}, expected {list(sort_key.field_names)}")
        raise InvalidCursorError("Cursor does not match the current sort order")
    if len(cursor_data.key) != len(sort_key.fields):
        raise InvalidCursorError(
            f"Cursor has {len(cursor_data.key)} sort values, expected {len(sort_key.fields)}"
        )

    try:
        key = [
            _adapter(field.type).validate_python(value)
            for field, value in zip(sort_key.fields, cursor_data.key)
        ]
        item_id = _adapter(sort_key.id_type).validate_python(cursor_data.id)
    except ValueError as e:
        logger.warning(f"Rejected cursor with uncoercible values: {e}")
        raise InvalidCursorError("Cursor contains values of the wrong type") from e

    if any(value is None for value in key) or item_id is None:
        raise InvalidCursorError("Cursor contains null values")
    if any(_is_nan(value) for value in key) or _is_nan(item_id):
        raise InvalidCursorError("Cursor contains NaN values")

    return cursor_data.model_copy(update={"key": key, "id": item_id})
