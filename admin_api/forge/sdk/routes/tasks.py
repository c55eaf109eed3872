from fastapi import Depends, Path, Query, status

from admin_api.forge import app
from admin_api.forge.sdk.routes.routers import base_router
from admin_api.forge.sdk.schemas.artifacts import TaskRunArtifactDto
from admin_api.forge.sdk.schemas.tasks import Task, TaskDto, TaskRequest, TaskRunDto
from admin_api.forge.sdk.schemas.users import User, UserRole
from admin_api.forge.sdk.services.user_auth_service import require_roles

task_access = require_roles(UserRole.member, UserRole.admin)


@base_router.get("/tasks", tags=["Tasks"], response_model=list[TaskDto])
async def get_tasks(current_user: User = Depends(task_access)) -> list[TaskDto]:
    return await app.TASK_SERVICE.get_tasks_by_user(current_user.id or "")


@base_router.post("/tasks", tags=["Tasks"], response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(task: TaskRequest, current_user: User = Depends(task_access)) -> Task:
    return await app.TASK_SERVICE.create_task(task, current_user.id or "")


@base_router.get("/tasks/{task_id}", tags=["Tasks"], response_model=TaskDto)
async def get_task(
    task_id: str = Path(..., description="The id of the task", examples=["42"]),
    current_user: User = Depends(task_access),
) -> TaskDto:
    return await app.TASK_SERVICE.get_task_by_id(task_id)


@base_router.put("/tasks/{task_id}", tags=["Tasks"], response_model=Task)
async def update_task(
    task: TaskRequest,
    task_id: str = Path(..., description="The id of the task", examples=["42"]),
    current_user: User = Depends(task_access),
) -> Task:
    return await app.TASK_SERVICE.update_task(task, current_user.id or "", task_id)


@base_router.delete("/tasks/{task_id}", tags=["Tasks"], response_model=Task)
async def delete_task(
    task_id: str = Path(..., description="The id of the task", examples=["42"]),
    current_user: User = Depends(task_access),
) -> Task:
    return await app.TASK_SERVICE.delete_task(task_id)


@base_router.get("/tasks/{task_id}/runs", tags=["Tasks"], response_model=list[TaskRunDto])
async def list_task_runs(
    task_id: str = Path(..., description="The id of the task", examples=["42"]),
    current_user: User = Depends(task_access),
) -> list[TaskRunDto]:
    return await app.TASK_SERVICE.list_task_runs(task_id)


@base_router.get("/runs/{task_run_id}/artifacts", tags=["Tasks"], response_model=list[TaskRunArtifactDto])
async def get_task_run_artifacts(
    task_run_id: str = Path(..., description="The id of the task run", examples=["7"]),
    page: int = Query(1),
    page_size: int = Query(10),
    current_user: User = Depends(task_access),
) -> list[TaskRunArtifactDto]:
    return await app.TASK_SERVICE.get_task_run_artifacts(task_run_id, page=page, page_size=page_size)
