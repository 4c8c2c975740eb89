from prwarden.config.settings import QUEUE_MODE
from prwarden.events.dispatcher import redis_connection
from prwarden.utils.logger import logger, setup_logger

# Set up logging for the worker
setup_logger()

if QUEUE_MODE not in ("redis", "redislite"):
    raise ValueError(f"Invalid QUEUE_MODE for worker: {QUEUE_MODE}")

logger.info(f"Worker using {QUEUE_MODE} for event queue.")
# Shares the file-based instance with the app when QUEUE_MODE is redislite
REDIS_CONNECTION = redis_connection()
