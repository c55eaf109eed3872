import structlog

from admin_api.exceptions import MappingError
from admin_api.forge.sdk.db.models import TaskModel, TaskRunModel
from admin_api.forge.sdk.schemas.tasks import Task, TaskRun, TaskStatus

LOG = structlog.get_logger()


def convert_to_task(task_obj: TaskModel, debug_enabled: bool = False) -> Task:
    if debug_enabled:
        LOG.debug("Converting TaskModel to Task", task_id=task_obj.task_id)
    return Task(
        task_id=task_obj.task_id,
        task_name=task_obj.task_name,
        task_definition=task_obj.task_definition,
        owner=task_obj.owner,
        created_at=task_obj.created_at,
        updated_at=task_obj.updated_at,
        deleted_at=task_obj.deleted_at,
    )


def convert_to_task_run(task_run_obj: TaskRunModel, debug_enabled: bool = False) -> TaskRun:
    if debug_enabled:
        LOG.debug("Converting TaskRunModel to TaskRun", task_run_id=task_run_obj.task_run_id)
    try:
        status = TaskStatus(task_run_obj.status)
    except ValueError as e:
        LOG.error(
            "Unknown task run status",
            task_run_id=task_run_obj.task_run_id,
            task_id=task_run_obj.task_id,
            status=task_run_obj.status,
        )
        raise MappingError(str(task_run_obj.task_id), f"unknown task run status {task_run_obj.status!r}") from e
    return TaskRun(
        task_run_id=task_run_obj.task_run_id,
        task_id=task_run_obj.task_id,
        status=status,
        start_time=task_run_obj.start_time,
        end_time=task_run_obj.end_time,
        error_message=task_run_obj.error_message,
        execution_instance_id=task_run_obj.execution_instance_id,
        created_at=task_run_obj.created_at,
    )
