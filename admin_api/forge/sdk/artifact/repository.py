import asyncio
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from itertools import islice
from typing import Any, Callable
from uuid import UUID

import structlog
from cassandra import DriverException
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Cluster, NoHostAvailable, Session
from cassandra.query import SimpleStatement, dict_factory

from admin_api.config import Settings
from admin_api.exceptions import PersistenceError
from admin_api.forge.sdk.schemas.artifacts import TaskRunArtifact

LOG = structlog.get_logger()

ARTIFACT_COLUMNS = (
    "execution_instance_id",
    "task_execution_id",
    "artifact_id",
    "artifact_type",
    "url",
    "content_type",
    "content_length",
    "status_code",
    "additional_data",
    "created_at",
)


class BaseArtifactRepository(ABC):
    @abstractmethod
    async def list_artifacts_by_execution_instance_id(
        self,
        execution_instance_id: UUID,
        limit: int,
        offset: int,
    ) -> list[TaskRunArtifact]:
        """Return at most `limit` artifacts of one execution instance, skipping the first `offset` rows."""


def create_cassandra_session_factory(settings: Settings) -> Callable[[], Session]:
    def connect() -> Session:
        auth_provider = None
        if settings.CASSANDRA_USERNAME:
            auth_provider = PlainTextAuthProvider(
                username=settings.CASSANDRA_USERNAME,
                password=settings.CASSANDRA_PASSWORD or "",
            )
        cluster = Cluster(
            contact_points=settings.CASSANDRA_HOSTS,
            port=settings.CASSANDRA_PORT,
            auth_provider=auth_provider,
        )
        LOG.info("Connecting to cassandra", hosts=settings.CASSANDRA_HOSTS, keyspace=settings.CASSANDRA_KEYSPACE)
        return cluster.connect(settings.CASSANDRA_KEYSPACE)

    return connect


class CassandraArtifactRepository(BaseArtifactRepository):
    """
    Reads task run artifacts from cassandra. The table is partitioned by execution_instance_id and
    rows come back in clustering order. CQL has no OFFSET, so the offset is applied by skipping rows
    while the driver pages through the partition.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        table: str = "task_run_artifacts",
        fetch_size: int = 500,
    ) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None
        self._lock = threading.Lock()
        self.table = table
        self.fetch_size = fetch_size

    def _get_session(self) -> Session:
        with self._lock:
            if self._session is None:
                session = self._session_factory()
                session.row_factory = dict_factory
                self._session = session
            return self._session

    def _list_artifacts(self, execution_instance_id: UUID, limit: int, offset: int) -> list[TaskRunArtifact]:
        statement = SimpleStatement(
            f"SELECT {', '.join(ARTIFACT_COLUMNS)} FROM {self.table} WHERE execution_instance_id = %s",
            fetch_size=self.fetch_size,
        )
        rows = self._get_session().execute(statement, (execution_instance_id,))
        return [_row_to_artifact(row) for row in islice(rows, offset, offset + limit)]

    async def list_artifacts_by_execution_instance_id(
        self,
        execution_instance_id: UUID,
        limit: int,
        offset: int,
    ) -> list[TaskRunArtifact]:
        try:
            return await asyncio.to_thread(self._list_artifacts, execution_instance_id, limit, offset)
        except (DriverException, NoHostAvailable) as e:
            LOG.error(
                "Failed to list task run artifacts",
                execution_instance_id=str(execution_instance_id),
                limit=limit,
                offset=offset,
                exc_info=True,
            )
            raise PersistenceError("list_artifacts_by_execution_instance_id", str(e)) from e


def _row_to_artifact(row: Mapping[str, Any]) -> TaskRunArtifact:
    additional_data = row.get("additional_data")
    if isinstance(additional_data, Mapping):
        additional_data = dict(additional_data)
    return TaskRunArtifact(
        execution_instance_id=row["execution_instance_id"],
        task_execution_id=row["task_execution_id"],
        artifact_id=row["artifact_id"],
        artifact_type=row.get("artifact_type"),
        url=row.get("url"),
        content_type=row.get("content_type"),
        content_length=row.get("content_length"),
        status_code=row.get("status_code"),
        additional_data=additional_data,
        created_at=row.get("created_at"),
    )
