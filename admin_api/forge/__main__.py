import structlog
import uvicorn
from dotenv import load_dotenv

from admin_api.config import settings

LOG = structlog.stdlib.get_logger()


if __name__ == "__main__":
    port = settings.PORT
    LOG.info("Admin api server starting.", host="0.0.0.0", port=port)
    load_dotenv()

    reload = settings.ENV == "local"

    uvicorn.run(
        "admin_api.forge.api_app:create_api_app",
        host="0.0.0.0",
        port=port,
        log_level="info",
        reload=reload,
        factory=True,
    )
