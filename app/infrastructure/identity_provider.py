"""
Infrastructure layer: Identity provider boundary.

Sign-up, sign-in, password reset and sessions live entirely in the external
provider; this module only resolves an access token to the current user.
"""
import abc
import logging
from typing import Dict, Optional

from supabase import AsyncClient, AuthError

from app.domain.models import User

logger = logging.getLogger(__name__)


class IdentityProvider(abc.ABC):
    """Resolves bearer tokens to users."""

    @abc.abstractmethod
    async def get_user(self, access_token: str) -> Optional[User]:
        """Return the token's user, or None when the token is not valid."""


class StaticIdentityProvider(IdentityProvider):
    """Fixed token table, for local development and tests."""

    def __init__(self, tokens: Optional[Dict[str, User]] = None):
        self.tokens = dict(tokens or {})

    @classmethod
    def from_settings(cls, raw_tokens: Dict[str, dict]) -> "StaticIdentityProvider":
        return cls({token: User(**fields) for token, fields in raw_tokens.items()})

    async def get_user(self, access_token: str) -> Optional[User]:
        return self.tokens.get(access_token)


class SupabaseIdentityProvider(IdentityProvider):
    """Validates tokens against Supabase Auth."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def get_user(self, access_token: str) -> Optional[User]:
        try:
            response = await self.client.auth.get_user(access_token)
        except AuthError as e:
            logger.info(f"Rejected access token: {e}")
            return None
        if response is None or response.user is None:
            return None

        auth_user = response.user
        metadata = auth_user.user_metadata or {}
        return User(
            id=auth_user.id,
            email=auth_user.email or "",
            name=metadata.get("full_name", ""),
            avatar_url=metadata.get("avatar_url"),
        )
