import logging

import uvicorn

from .config.settings import get_settings
from .main import app

logger = logging.getLogger(__name__)


def run() -> None:
    settings = get_settings()
    logger.info(f"Quick Bazaar Server is running on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
