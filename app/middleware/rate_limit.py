"""
Rate limiting shared by the application and its routers.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

WEATHER_RATE_LIMIT = f"{settings.rate_limit_requests}/minute"

limiter = Limiter(key_func=get_remote_address)

RATE_LIMIT_RESPONSES = {
    429: {"description": f"Rate limit exceeded ({WEATHER_RATE_LIMIT} per client)"},
}
