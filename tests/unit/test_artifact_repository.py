from datetime import datetime
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest
from cassandra.cluster import NoHostAvailable
from cassandra.query import dict_factory

from admin_api.exceptions import PersistenceError
from admin_api.forge.sdk.artifact.repository import CassandraArtifactRepository

EXECUTION_INSTANCE_ID = UUID("3f2b8c1e-5d4a-4e7b-9c0d-1a2b3c4d5e6f")


def make_rows(count: int) -> list[dict]:
    return [
        {
            "execution_instance_id": EXECUTION_INSTANCE_ID,
            "task_execution_id": UUID(int=i),
            "artifact_id": uuid4(),
            "artifact_type": "screenshot",
            "url": f"s3://artifacts/{i}.png",
            "content_type": "image/png",
            "content_length": 1024,
            "status_code": 200,
            "additional_data": {"step": str(i)},
            "created_at": datetime(2024, 5, 1, 12, 0, i % 60),
        }
        for i in range(count)
    ]


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock()
    session.execute.return_value = iter(make_rows(25))
    return session


@pytest.mark.asyncio
async def test_list_artifacts_applies_offset_and_limit(session: MagicMock) -> None:
    repository = CassandraArtifactRepository(lambda: session, table="task_run_artifacts", fetch_size=7)

    artifacts = await repository.list_artifacts_by_execution_instance_id(EXECUTION_INSTANCE_ID, limit=10, offset=20)

    assert [artifact.task_execution_id for artifact in artifacts] == [UUID(int=i) for i in range(20, 25)]
    assert artifacts[0].additional_data == {"step": "20"}

    statement, parameters = session.execute.call_args.args
    assert "FROM task_run_artifacts WHERE execution_instance_id = %s" in statement.query_string
    assert statement.fetch_size == 7
    assert parameters == (EXECUTION_INSTANCE_ID,)
    assert session.row_factory is dict_factory


@pytest.mark.asyncio
async def test_list_artifacts_offset_past_end(session: MagicMock) -> None:
    repository = CassandraArtifactRepository(lambda: session)

    artifacts = await repository.list_artifacts_by_execution_instance_id(EXECUTION_INSTANCE_ID, limit=10, offset=30)

    assert artifacts == []


@pytest.mark.asyncio
async def test_session_is_created_once(session: MagicMock) -> None:
    session_factory = MagicMock(return_value=session)
    repository = CassandraArtifactRepository(session_factory)

    await repository.list_artifacts_by_execution_instance_id(EXECUTION_INSTANCE_ID, limit=1, offset=0)
    session.execute.return_value = iter(make_rows(1))
    await repository.list_artifacts_by_execution_instance_id(EXECUTION_INSTANCE_ID, limit=1, offset=0)

    session_factory.assert_called_once()


@pytest.mark.asyncio
async def test_driver_failure_raises_persistence_error() -> None:
    session = MagicMock()
    session.execute.side_effect = NoHostAvailable("Unable to connect to any servers", {})
    repository = CassandraArtifactRepository(lambda: session)

    with pytest.raises(PersistenceError):
        await repository.list_artifacts_by_execution_instance_id(EXECUTION_INSTANCE_ID, limit=10, offset=0)
