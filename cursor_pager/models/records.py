"""Pydantic models for the default records table."""

from datetime import datetime
from typing import Dict, Any
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict

from ..pagination.cursor import SortField, SortKey


class Record(BaseModel):
    """A stored record, paged newest-last by creation time."""

    id: UUID = Field(description="Record UUID, the pagination tie-breaker")
    created_at: datetime = Field(description="Creation timestamp, immutable once assigned")
    body: Dict[str, Any] = Field(default_factory=dict, description="Record JSON data")

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "created_at": "2024-01-01T12:00:00Z",
                "body": {"title": "Meeting Notes", "tags": ["work", "meetings"]}
            }
        }
    )


# (created_at, id) ascending; id breaks timestamp ties
RECORD_SORT_KEY = SortKey(
    fields=(SortField(name="created_at", type=datetime),),
    id_field="id",
    id_type=UUID
)
