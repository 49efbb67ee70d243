import os
import sys

from loguru import logger

from app.settings import settings

os.makedirs(settings.LOG_DIR, exist_ok=True)
log_file = os.path.join(settings.LOG_DIR, "squads.log")

# Remove default handler to avoid duplicate logs
logger.remove()

# Console handler
logger.add(
    sys.stdout,
    level=settings.LOG_LEVEL,
    enqueue=True,
    backtrace=False,
    diagnose=False,
    serialize=settings.LOG_JSON,
)

# File handler with rotation & retention; diagnose stays off so bound
# SQL parameters never land on disk
logger.add(
    log_file,
    rotation="10 MB",
    retention="7 days",
    compression="zip",
    level=settings.LOG_LEVEL,
    enqueue=True,
    diagnose=False,
    serialize=settings.LOG_JSON,
)
