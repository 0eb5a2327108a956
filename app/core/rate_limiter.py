from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

# Upload and download endpoints only; Event Grid webhooks are never throttled
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
limit_param = f"{settings.RATE_LIMIT_MIN}/minute"
