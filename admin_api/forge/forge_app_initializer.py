import structlog

from admin_api.config import settings
from admin_api.forge import set_force_app_instance
from admin_api.forge.forge_app import ForgeApp, create_forge_app
from admin_api.forge.sdk.artifact.repository import BaseArtifactRepository
from admin_api.forge.sdk.db.client import AdminDB

LOG = structlog.get_logger()


def start_forge_app(
    db: AdminDB | None = None,
    artifact_repository: BaseArtifactRepository | None = None,
) -> ForgeApp:
    force_app_instance = create_forge_app(db, artifact_repository)
    set_force_app_instance(force_app_instance)

    if settings.ADDITIONAL_MODULES:
        for module in settings.ADDITIONAL_MODULES:
            LOG.info("Loading additional module to set up api app", module=module)
            app_module = __import__(module)
            configure_app_fn = getattr(app_module, "configure_app", None)
            if not configure_app_fn:
                raise RuntimeError(f"Missing configure_app function in {module}")

            configure_app_fn(force_app_instance)
        LOG.info(
            "Additional modules loaded to set up api app",
            modules=settings.ADDITIONAL_MODULES,
        )

    return force_app_instance
