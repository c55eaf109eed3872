from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(StrEnum):
    """
    Run status as reported by the execution system: Pending -> Running -> {Succeeded, Failed}.
    This service only reads it.
    """

    pending = "Pending"
    running = "Running"
    succeeded = "Succeeded"
    failed = "Failed"


class TaskBase(BaseModel):
    task_name: str = Field(
        ...,
        description="Human readable name of the task.",
        examples=["nightly-crawl"],
    )
    task_definition: str = Field(
        ...,
        description="Opaque serialized definition of the task, passed through untouched.",
        examples=['{"steps": []}'],
    )


class TaskRequest(TaskBase):
    pass


class Task(TaskBase):
    model_config = ConfigDict(from_attributes=True)

    task_id: int
    owner: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class TaskRun(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    task_run_id: int
    task_id: int
    status: TaskStatus
    start_time: datetime | None = None
    end_time: datetime | None = None
    error_message: str | None = None
    execution_instance_id: str | None = None
    created_at: datetime


class TaskDto(BaseModel):
    id: str
    task_name: str
    task_definition: str
    status: TaskStatus
    owner: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class TaskRunDto(BaseModel):
    task_run_id: str
    task_id: str
    status: TaskStatus
    start_time: datetime | None = None
    end_time: datetime | None = None
    error_message: str | None = None
    execution_instance_id: str | None = None
