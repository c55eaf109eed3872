from __future__ import annotations

from typing import Any, Awaitable, Callable

from fastapi import FastAPI
from redis.asyncio import Redis

from admin_api.config import Settings
from admin_api.forge.sdk.artifact.repository import (
    BaseArtifactRepository,
    CassandraArtifactRepository,
    create_cassandra_session_factory,
)
from admin_api.forge.sdk.cache.base import BaseCache
from admin_api.forge.sdk.cache.local import LocalCache
from admin_api.forge.sdk.cache.redis_cache import RedisCache
from admin_api.forge.sdk.db.client import AdminDB
from admin_api.forge.sdk.identity.auth0_client import Auth0ManagementClient
from admin_api.forge.sdk.identity.gateway import IdentityGateway
from admin_api.forge.sdk.identity.role_mapper import RoleMapper
from admin_api.forge.sdk.services.task_cache import TaskCache
from admin_api.forge.sdk.services.task_service import TaskService
from admin_api.forge.sdk.settings_manager import SettingsManager


class ForgeApp:
    """Container for shared services"""

    SETTINGS_MANAGER: Settings
    DATABASE: AdminDB
    CACHE: BaseCache
    TASK_CACHE: TaskCache
    ARTIFACT_REPOSITORY: BaseArtifactRepository
    TASK_SERVICE: TaskService
    IDENTITY_CLIENT: Auth0ManagementClient
    ROLE_MAPPER: RoleMapper
    IDENTITY_GATEWAY: IdentityGateway
    # turns a bearer token into validated claims. token verification lives outside this service.
    authentication_function: Callable[[str], Awaitable[Any]] | None
    setup_api_app: Callable[[FastAPI], None] | None
    api_app_startup_event: Callable[[], Awaitable[None]] | None
    api_app_shutdown_event: Callable[[], Awaitable[None]] | None


def create_cache(settings: Settings) -> BaseCache:
    if settings.CACHE_TYPE == "redis":
        return RedisCache(Redis.from_url(settings.REDIS_URL, decode_responses=True))
    return LocalCache(maxsize=settings.LOCAL_CACHE_MAX_ITEMS)


def create_forge_app(
    db: AdminDB | None = None,
    artifact_repository: BaseArtifactRepository | None = None,
) -> ForgeApp:
    """Create and initialize a ForgeApp instance with all services"""
    settings: Settings = SettingsManager.get_settings()

    app = ForgeApp()

    app.SETTINGS_MANAGER = settings
    app.DATABASE = db or AdminDB(settings.DATABASE_STRING, debug_enabled=settings.DEBUG_MODE)

    app.CACHE = create_cache(settings)
    app.TASK_CACHE = TaskCache(app.CACHE, ttl=settings.TASK_CACHE_TTL_SECONDS)

    app.ARTIFACT_REPOSITORY = artifact_repository or CassandraArtifactRepository(
        create_cassandra_session_factory(settings),
        table=settings.ARTIFACT_TABLE,
        fetch_size=settings.ARTIFACT_FETCH_SIZE,
    )
    app.TASK_SERVICE = TaskService(
        app.DATABASE,
        app.TASK_CACHE,
        app.ARTIFACT_REPOSITORY,
        max_artifact_page_size=settings.ARTIFACT_MAX_PAGE_SIZE,
    )

    app.IDENTITY_CLIENT = Auth0ManagementClient(
        settings.auth0_base_url,
        settings.AUTH0_CLIENT_ID,
        settings.AUTH0_CLIENT_SECRET,
        timeout=settings.AUTH0_REQUEST_TIMEOUT_SECONDS,
    )
    app.ROLE_MAPPER = RoleMapper.from_settings(settings)
    app.IDENTITY_GATEWAY = IdentityGateway(
        app.IDENTITY_CLIENT,
        app.ROLE_MAPPER,
        page_size=settings.IDENTITY_PAGE_SIZE,
    )

    app.authentication_function = None
    app.setup_api_app = None
    app.api_app_startup_event = None
    app.api_app_shutdown_event = None

    return app
