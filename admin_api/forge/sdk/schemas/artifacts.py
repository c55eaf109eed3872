from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer


class TaskRunArtifact(BaseModel):
    """A row of the task_run_artifacts table. Written by the execution system, never updated here."""

    execution_instance_id: UUID
    task_execution_id: UUID
    artifact_id: UUID
    artifact_type: str | None = None
    url: str | None = None
    content_type: str | None = None
    content_length: int | None = None
    status_code: int | None = None
    additional_data: dict[str, Any] | str | None = None
    created_at: datetime | None = None


class TaskRunArtifactDto(BaseModel):
    execution_instance_id: str
    task_execution_id: str
    artifact_id: str
    created_at: datetime | None = Field(
        None,
        description="When the execution system recorded the artifact.",
        examples=["2023-01-01T00:00:00Z"],
    )
    artifact_type: str | None = None
    url: str | None = None
    content_type: str | None = None
    content_length: int | None = None
    status_code: int | None = None
    additional_data: dict[str, Any] | str | None = None

    @field_serializer("created_at", when_used="json")
    def serialize_datetime_to_isoformat(self, value: datetime | None) -> str | None:
        return value.isoformat() if value else None
