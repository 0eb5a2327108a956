# app/core/logger.py
import logging
from core.config import settings

logger = logging.getLogger("autotier-logger")
logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
logger.propagate = False

# Always add a console handler with a simple, structured-ish format
_console = logging.StreamHandler()
_console.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
_console.setFormatter(logging.Formatter(
    fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
))
logger.addHandler(_console)

# Quiet the per-request HTTP logging of the Azure SDK unless debugging
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(
    logging.DEBUG if settings.DEBUG else logging.WARNING
)
