# core/auth.py
"""Bearer token verification against the identity provider."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging
import os

import requests

from core.errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass
class Identity:
    subject_id: str
    claims: Dict[str, Any] = field(default_factory=dict)


class TokenVerifier:
    def verify(self, token: str) -> Identity:
        raise NotImplementedError


class SupabaseTokenVerifier(TokenVerifier):
    """Resolve an access token to its user with Supabase Auth (``GET /auth/v1/user``)"""

    def __init__(self, url: Optional[str], anon_key: Optional[str], timeout: float = 10):
        self.url = (url or '').rstrip('/')
        self.anon_key = anon_key or ''
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> 'SupabaseTokenVerifier':
        return cls(os.getenv('SUPABASE_URL'), os.getenv('SUPABASE_ANON_KEY'))

    def verify(self, token: str) -> Identity:
        """
        Raises:
            AuthenticationError: If the token is missing, invalid or expired,
                or the provider cannot be reached
        """
        if not token:
            raise AuthenticationError("Unauthorized")
        if not self.url or not self.anon_key:
            logger.warning("Token verification is not configured")
            raise AuthenticationError("Authentication is not configured")
        try:
            response = requests.get(
                f"{self.url}/auth/v1/user",
                headers={'Authorization': f'Bearer {token}', 'apikey': self.anon_key},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning(f"Token verification request failed: {e}")
            raise AuthenticationError("Authentication error")
        if response.status_code != 200:
            logger.warning(f"Token rejected with status {response.status_code}")
            raise AuthenticationError("Invalid or expired token")
        user = response.json()
        if not user.get('id'):
            raise AuthenticationError("Invalid or expired token")
        claims = dict(user.get('user_metadata') or {})
        claims.update({'email': user.get('email'), 'phone': user.get('phone')})
        return Identity(subject_id=user['id'], claims=claims)
