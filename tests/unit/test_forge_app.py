from unittest.mock import MagicMock

from admin_api.config import Settings
from admin_api.forge.forge_app import create_cache, create_forge_app
from admin_api.forge.sdk.artifact.repository import CassandraArtifactRepository
from admin_api.forge.sdk.cache.local import LocalCache
from admin_api.forge.sdk.cache.redis_cache import RedisCache


def test_create_cache_by_type() -> None:
    assert isinstance(create_cache(Settings(CACHE_TYPE="local")), LocalCache)
    assert isinstance(create_cache(Settings(CACHE_TYPE="redis", REDIS_URL="redis://localhost:6379/1")), RedisCache)


def test_create_forge_app_wires_services() -> None:
    database = MagicMock()

    app = create_forge_app(db=database)

    assert app.DATABASE is database
    assert app.TASK_SERVICE.database is database
    assert app.TASK_SERVICE.task_cache is app.TASK_CACHE
    assert app.TASK_CACHE.cache is app.CACHE
    assert isinstance(app.ARTIFACT_REPOSITORY, CassandraArtifactRepository)
    assert app.IDENTITY_GATEWAY.client is app.IDENTITY_CLIENT
    assert app.IDENTITY_GATEWAY.role_mapper is app.ROLE_MAPPER
    assert app.authentication_function is None


def test_auth0_base_url() -> None:
    assert Settings(AUTH0_DOMAIN="tenant.us.auth0.com").auth0_base_url == "https://tenant.us.auth0.com"
    assert Settings(AUTH0_DOMAIN="https://tenant.us.auth0.com/").auth0_base_url == "https://tenant.us.auth0.com"
