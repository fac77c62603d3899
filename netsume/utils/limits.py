from slowapi import Limiter
from slowapi.util import get_remote_address

from netsume.services.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def ai_rate_limit() -> str:
    return get_settings().AI_RATE_LIMIT
