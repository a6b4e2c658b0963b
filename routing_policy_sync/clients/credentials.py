"""
Scoped credentials for the remote services.

A Credential is created by the caller and passed to each client. Clients
check its expiry before every request; nothing is cached between calls.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ..exceptions import AuthenticationError
from ..models import coerce_int

CLAIM_PREFIX = "https://natterbox.com/claim/"
DEFAULT_SCOPE = "routing-policies:admin"
DEFAULT_LIFETIME_SECONDS = 300


@dataclass
class Credential:
    """
    Bearer token scoped for policy administration.

    Attributes:
        token: Raw bearer token
        scope: Scope the token was issued for
        expires_at: Expiry time; None means the token never expires
        claims: Decoded token claims, if the token is a JWT
    """

    token: str
    scope: str = DEFAULT_SCOPE
    expires_at: Optional[datetime] = None
    claims: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_jwt(
        cls,
        token: str,
        scope: str = DEFAULT_SCOPE,
        default_lifetime: int = DEFAULT_LIFETIME_SECONDS,
    ) -> "Credential":
        """
        Build a credential from a JWT.

        The signature is not verified here; the remote services do that.
        Tokens without an ``exp`` claim are given ``default_lifetime`` seconds.

        Raises:
            AuthenticationError: If the token cannot be decoded
        """
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {str(e)}", status_code=None)

        exp = claims.get("exp")
        if exp is not None:
            expires_at = datetime.fromtimestamp(int(exp), tz=timezone.utc)
        else:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=default_lifetime)

        return cls(token=token, scope=scope, expires_at=expires_at, claims=claims)

    def is_expired(self, leeway: int = 0) -> bool:
        """Whether the credential expires within ``leeway`` seconds from now."""
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) + timedelta(seconds=leeway) >= self.expires_at

    @property
    def organization_id(self) -> Optional[int]:
        return coerce_int(self.claims.get(f"{CLAIM_PREFIX}orgId"))

    @property
    def user_id(self) -> Optional[int]:
        return coerce_int(self.claims.get(f"{CLAIM_PREFIX}userId"))

    @property
    def username(self) -> Optional[str]:
        return self.claims.get(f"{CLAIM_PREFIX}username")

    def __repr__(self) -> str:
        return f"Credential(scope='{self.scope}', expires_at={self.expires_at!r})"
