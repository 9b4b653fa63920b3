import logging
import sys

from aiohttp import web

from . import VERSION
from .api import create_app
from .config import load_config
from .constants import APP_NAME, CACHE_VERSION, SCHEMA_VERSION
from .services import AppServices

logger = logging.getLogger("FaithDive")


def _log_banner(config):
    banner = f" {APP_NAME} Initialization "
    logger.info("=" * 40 + banner + "=" * 40)
    logger.info(f"Version: {VERSION}")
    logger.info(f"Schema version: {SCHEMA_VERSION}")
    logger.info(f"Offline cache version: {CACHE_VERSION}")
    logger.info(f"Environment: {config['env']}")
    if not config["bible_api_key"]:
        logger.warning("BIBLE_API_KEY is not set; scripture lookups will fail")
    logger.info("=" * (80 + len(banner)))


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    config = load_config()
    _log_banner(config)
    services = AppServices(config).initialize()
    app = create_app(services)

    async def close_services(_app):
        services.close()

    app.on_cleanup.append(close_services)
    logger.info("%s server running on http://localhost:%s", APP_NAME, config["port"])
    web.run_app(app, host=config["host"], port=config["port"], print=None)
