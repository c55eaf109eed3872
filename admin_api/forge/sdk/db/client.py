from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import pool, select
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from admin_api.config import settings
from admin_api.exceptions import TaskNotFound
from admin_api.forge.sdk.db.base_alchemy_db import BaseAlchemyDB, db_operation
from admin_api.forge.sdk.db.models import TaskModel, TaskRunModel
from admin_api.forge.sdk.db.utils import convert_to_task, convert_to_task_run
from admin_api.forge.sdk.schemas.tasks import Task, TaskRun

LOG = structlog.get_logger()


DB_CONNECT_ARGS: dict[str, Any] = {}

if "postgresql+psycopg" in settings.DATABASE_STRING:
    DB_CONNECT_ARGS = {"options": f"-c statement_timeout={settings.DATABASE_STATEMENT_TIMEOUT_MS}"}
elif "postgresql+asyncpg" in settings.DATABASE_STRING:
    DB_CONNECT_ARGS = {"server_settings": {"statement_timeout": str(settings.DATABASE_STATEMENT_TIMEOUT_MS)}}


class AdminDB(BaseAlchemyDB):
    def __init__(self, database_string: str, debug_enabled: bool = False, db_engine: AsyncEngine | None = None) -> None:
        super().__init__(
            db_engine
            or create_async_engine(
                database_string,
                connect_args=DB_CONNECT_ARGS,
                poolclass=pool.NullPool if settings.DISABLE_CONNECTION_POOL else None,
            )
        )
        self.debug_enabled = debug_enabled

    @db_operation("create_task")
    async def create_task(self, task_name: str, task_definition: str, owner: str) -> Task:
        async with self.Session() as session:
            new_task = TaskModel(
                task_name=task_name,
                task_definition=task_definition,
                owner=owner,
            )
            session.add(new_task)
            await session.commit()
            await session.refresh(new_task)
            return convert_to_task(new_task, self.debug_enabled)

    @db_operation("get_task")
    async def get_task(self, task_id: int) -> Task | None:
        """Get a live (not soft deleted) task by its id"""
        async with self.Session() as session:
            if task_obj := (
                await session.scalars(
                    select(TaskModel).filter_by(task_id=task_id).filter(TaskModel.deleted_at.is_(None))
                )
            ).first():
                return convert_to_task(task_obj, self.debug_enabled)
            LOG.info("Task not found", task_id=task_id)
            return None

    @db_operation("get_tasks_by_owner")
    async def get_tasks_by_owner(self, owner: str) -> list[Task]:
        async with self.Session() as session:
            tasks = (
                await session.scalars(
                    select(TaskModel)
                    .filter_by(owner=owner)
                    .filter(TaskModel.deleted_at.is_(None))
                    .order_by(TaskModel.created_at, TaskModel.task_id)
                )
            ).all()
            return [convert_to_task(task, self.debug_enabled) for task in tasks]

    @db_operation("update_task")
    async def update_task(
        self,
        task_id: int,
        task_name: str,
        task_definition: str,
        updated_at: datetime,
    ) -> Task:
        async with self.Session() as session:
            task = (
                await session.scalars(
                    select(TaskModel).filter_by(task_id=task_id).filter(TaskModel.deleted_at.is_(None))
                )
            ).first()
            if not task:
                raise TaskNotFound(str(task_id))
            task.task_name = task_name
            task.task_definition = task_definition
            task.updated_at = updated_at
            await session.commit()
            await session.refresh(task)
            return convert_to_task(task, self.debug_enabled)

    @db_operation("soft_delete_task")
    async def soft_delete_task(self, task_id: int, deleted_at: datetime) -> Task | None:
        async with self.Session() as session:
            task = (
                await session.scalars(
                    select(TaskModel).filter_by(task_id=task_id).filter(TaskModel.deleted_at.is_(None))
                )
            ).first()
            if not task:
                return None
            task.deleted_at = deleted_at
            await session.commit()
            await session.refresh(task)
            return convert_to_task(task, self.debug_enabled)

    @db_operation("get_task_run")
    async def get_task_run(self, task_run_id: int) -> TaskRun | None:
        async with self.Session() as session:
            if task_run := (await session.scalars(select(TaskRunModel).filter_by(task_run_id=task_run_id))).first():
                return convert_to_task_run(task_run, self.debug_enabled)
            LOG.info("Task run not found", task_run_id=task_run_id)
            return None

    @db_operation("list_runs_for_task")
    async def list_runs_for_task(self, task_id: int) -> list[TaskRun]:
        async with self.Session() as session:
            task_runs = (await session.scalars(select(TaskRunModel).filter_by(task_id=task_id))).all()
            return [convert_to_task_run(task_run, self.debug_enabled) for task_run in task_runs]

    @db_operation("get_latest_run_for_task")
    async def get_latest_run_for_task(self, task_id: int) -> TaskRun | None:
        async with self.Session() as session:
            task_run = (
                await session.scalars(
                    select(TaskRunModel)
                    .filter_by(task_id=task_id)
                    .order_by(TaskRunModel.created_at.desc(), TaskRunModel.task_run_id.desc())
                    .limit(1)
                )
            ).first()
            if task_run is None:
                return None
            return convert_to_task_run(task_run, self.debug_enabled)
