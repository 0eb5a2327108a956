from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.config import settings
from core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles application startup. Storage settings are only read at the point
    of use, so missing values are reported here but never block startup.
    """
    for name in ("OUTPUT_STORAGE_ACCOUNT", "OUTPUT_STORAGE_CONTAINER", "STORAGE_ACCOUNT", "STORAGE_CONTAINER"):
        if not getattr(settings, name):
            logger.warning(f"{name} is not set; requests that need it will fail")
    logger.info("Lifespan startup: Ready to serve requests.")
    yield
    logger.info("Lifespan shutdown.")
