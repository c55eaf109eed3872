from datetime import datetime
from uuid import UUID

import structlog

from admin_api.exceptions import (
    CacheUnavailable,
    InvalidExternalID,
    InvalidID,
    InvalidPagination,
    MappingError,
    PersistenceError,
    TaskNotFound,
    TaskRunNotFound,
)
from admin_api.forge.sdk.artifact.repository import BaseArtifactRepository
from admin_api.forge.sdk.db.client import AdminDB
from admin_api.forge.sdk.schemas.artifacts import TaskRunArtifact, TaskRunArtifactDto
from admin_api.forge.sdk.schemas.tasks import Task, TaskDto, TaskRequest, TaskRun, TaskRunDto, TaskStatus
from admin_api.forge.sdk.services.task_cache import TaskCache

LOG = structlog.get_logger()


def parse_id(raw_id: str, kind: str = "task") -> int:
    """Parse a caller supplied identifier. Only positive base 10 integers are accepted."""
    if not raw_id.isascii() or not raw_id.isdigit():
        LOG.error("Failed to parse id", kind=kind, raw_id=raw_id)
        raise InvalidID(raw_id, kind=kind)
    parsed = int(raw_id)
    if parsed <= 0:
        LOG.error("Failed to parse id", kind=kind, raw_id=raw_id)
        raise InvalidID(raw_id, kind=kind)
    return parsed


class TaskService:
    """
    Task, run and artifact queries.

    Single task reads are cache-aside: the derived status is computed when the DTO is
    materialized on a miss and then served from the cache until the entry expires.
    """

    def __init__(
        self,
        database: AdminDB,
        task_cache: TaskCache,
        artifact_repository: BaseArtifactRepository,
        max_artifact_page_size: int = 100,
    ) -> None:
        self.database = database
        self.task_cache = task_cache
        self.artifact_repository = artifact_repository
        self.max_artifact_page_size = max_artifact_page_size

    async def get_tasks_by_user(self, user_id: str) -> list[TaskDto]:
        try:
            tasks = await self.database.get_tasks_by_owner(user_id)
        except PersistenceError:
            LOG.error("Failed to find tasks", user_id=user_id)
            raise

        task_dtos: list[TaskDto] = []
        for task in tasks:
            task_dtos.append(await self.map_task_to_dto(task))
        return task_dtos

    async def get_task_by_id(self, task_id: str) -> TaskDto:
        parsed_task_id = parse_id(task_id)

        try:
            cached = await self.task_cache.get(parsed_task_id)
        except CacheUnavailable:
            LOG.warning("Task cache unavailable, reading from the database", task_id=parsed_task_id)
            cached = None
        if cached is not None:
            return cached

        task = await self.database.get_task(parsed_task_id)
        if not task:
            raise TaskNotFound(task_id)

        task_dto = await self.map_task_to_dto(task)

        try:
            await self.task_cache.set(task_dto)
        except CacheUnavailable:
            LOG.warning("Failed to populate task cache", task_id=parsed_task_id)

        return task_dto

    async def create_task(self, task: TaskRequest, user_id: str) -> Task:
        created = await self.database.create_task(
            task_name=task.task_name,
            task_definition=task.task_definition,
            owner=user_id,
        )
        LOG.info("Task created", task_id=created.task_id, owner=user_id)
        return created

    async def update_task(self, task: TaskRequest, user_id: str, task_id: str) -> Task:
        parsed_task_id = parse_id(task_id)

        existing_task = await self.database.get_task(parsed_task_id)
        if not existing_task:
            LOG.error("Task not found", task_id=parsed_task_id, user_id=user_id)
            raise TaskNotFound(task_id)

        updated_task = await self.database.update_task(
            parsed_task_id,
            task_name=task.task_name,
            task_definition=task.task_definition,
            updated_at=datetime.utcnow(),
        )
        await self._invalidate_cached_task(parsed_task_id)
        LOG.info("Task updated", task_id=parsed_task_id, user_id=user_id)
        return updated_task

    async def delete_task(self, task_id: str) -> Task:
        parsed_task_id = parse_id(task_id)

        deleted_task = await self.database.soft_delete_task(parsed_task_id, deleted_at=datetime.utcnow())
        if not deleted_task:
            LOG.error("Task not found", task_id=parsed_task_id)
            raise TaskNotFound(task_id)

        await self._invalidate_cached_task(parsed_task_id)
        LOG.info("Task deleted", task_id=parsed_task_id)
        return deleted_task

    async def list_task_runs(self, task_id: str) -> list[TaskRunDto]:
        parsed_task_id = parse_id(task_id)
        task_runs = await self.database.list_runs_for_task(parsed_task_id)
        return [self.map_task_run_to_dto(task_run) for task_run in task_runs]

    async def get_task_run_artifacts(self, task_run_id: str, page: int, page_size: int) -> list[TaskRunArtifactDto]:
        parsed_task_run_id = parse_id(task_run_id, kind="task run")
        if page < 1 or page_size < 1:
            LOG.error("Invalid artifact pagination", task_run_id=parsed_task_run_id, page=page, page_size=page_size)
            raise InvalidPagination(page, page_size)
        if page_size > self.max_artifact_page_size:
            LOG.warning(
                "Clamping artifact page size",
                task_run_id=parsed_task_run_id,
                requested_page_size=page_size,
                max_page_size=self.max_artifact_page_size,
            )
            page_size = self.max_artifact_page_size

        task_run = await self.database.get_task_run(parsed_task_run_id)
        if not task_run:
            raise TaskRunNotFound(task_run_id)

        try:
            execution_instance_id = UUID(task_run.execution_instance_id or "")
        except ValueError:
            LOG.error(
                "Error parsing execution instance id to UUID",
                task_run_id=parsed_task_run_id,
                execution_instance_id=task_run.execution_instance_id,
            )
            raise InvalidExternalID(task_run.execution_instance_id, task_run_id=task_run_id)

        offset = (page - 1) * page_size
        artifacts = await self.artifact_repository.list_artifacts_by_execution_instance_id(
            execution_instance_id,
            limit=page_size,
            offset=offset,
        )
        return [self.map_task_run_artifact_to_dto(artifact) for artifact in artifacts]

    async def map_task_to_dto(self, task: Task) -> TaskDto:
        try:
            latest_run = await self.database.get_latest_run_for_task(task.task_id)
        except PersistenceError as e:
            LOG.error("Error while mapping task to dto", task_id=task.task_id)
            raise MappingError(str(task.task_id), e.message) from e

        status = latest_run.status if latest_run else TaskStatus.pending

        return TaskDto(
            id=str(task.task_id),
            task_name=task.task_name,
            task_definition=task.task_definition,
            status=status,
            owner=task.owner,
            created_at=task.created_at,
            updated_at=task.updated_at,
            deleted_at=task.deleted_at,
        )

    @staticmethod
    def map_task_run_to_dto(task_run: TaskRun) -> TaskRunDto:
        return TaskRunDto(
            task_run_id=str(task_run.task_run_id),
            task_id=str(task_run.task_id),
            status=task_run.status,
            start_time=task_run.start_time,
            end_time=task_run.end_time,
            error_message=task_run.error_message,
            execution_instance_id=task_run.execution_instance_id,
        )

    @staticmethod
    def map_task_run_artifact_to_dto(artifact: TaskRunArtifact) -> TaskRunArtifactDto:
        return TaskRunArtifactDto(
            execution_instance_id=str(artifact.execution_instance_id),
            task_execution_id=str(artifact.task_execution_id),
            artifact_id=str(artifact.artifact_id),
            created_at=artifact.created_at,
            artifact_type=artifact.artifact_type,
            url=artifact.url,
            content_type=artifact.content_type,
            content_length=artifact.content_length,
            status_code=artifact.status_code,
            additional_data=artifact.additional_data,
        )

    async def _invalidate_cached_task(self, task_id: int) -> None:
        try:
            await self.task_cache.invalidate(task_id)
        except CacheUnavailable:
            # the entry still expires on its own once the ttl runs out
            LOG.warning("Failed to invalidate cached task", task_id=task_id)
