"""
Access token verification.

Tokens are issued by the identity provider; this service only decodes them
to find the acting user.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from pubflow.config import get_settings


class AccessTokenPayload(BaseModel):
    """JWT access token claims used by this service."""

    sub: uuid.UUID  # User ID
    exp: datetime
    email: Optional[str] = None


class TokenVerifier:
    def __init__(self, secret_key: Optional[str] = None, algorithm: Optional[str] = None):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm

    def verify_access_token(self, token: str) -> Optional[AccessTokenPayload]:
        """
        Decode and check an access token.

        Returns:
            The claims if the signature and expiry are valid, None otherwise
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("type", "access") != "access":
            return None
        try:
            return AccessTokenPayload.model_validate(payload)
        except ValidationError:
            return None

    def create_access_token(
        self,
        user_id: uuid.UUID,
        email: Optional[str] = None,
        expires_delta: timedelta = timedelta(minutes=30),
    ) -> str:
        """Mint a token. Used by service accounts and tests."""
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "exp": now + expires_delta,
            "iat": now,
            "type": "access",
        }
        if email:
            claims["email"] = email
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
