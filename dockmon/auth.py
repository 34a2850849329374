"""
Username/password login and signed session tokens.

Tokens are HS256 JWTs carrying the username and an expiry. Verification is
all the streaming core depends on; issuing happens at the login endpoint.
"""

import logging
import secrets
import time
from typing import Any, Dict, Optional

import jwt
from fastapi import Header, Request

from .config import AuthConfig
from .errors import AuthError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenAuthority:
    """Checks credentials, issues tokens and verifies them."""

    def __init__(self, auth_config: AuthConfig):
        self.config = auth_config

    def check_credentials(self, username: str, password: str) -> bool:
        """Constant-time comparison against the configured credentials."""
        user_ok = secrets.compare_digest(username.encode(), self.config.username.encode())
        password_ok = secrets.compare_digest(password.encode(), self.config.password.encode())
        return user_ok and password_ok

    def issue(self, username: str) -> str:
        """Sign a token for ``username`` that expires after the configured TTL."""
        now = int(time.time())
        claims = {
            "username": username,
            "iat": now,
            "exp": now + self.config.token_ttl
        }
        return jwt.encode(claims, self.config.secret, algorithm=ALGORITHM)

    def login(self, username: str, password: str) -> str:
        """
        Verify credentials and issue a token.

        Raises:
            AuthError: If the credentials do not match
        """
        if not self.check_credentials(username, password):
            logger.warning(f"Failed login attempt for user '{username}'")
            raise AuthError("Invalid credentials")
        logger.info(f"User '{username}' logged in")
        return self.issue(username)

    def verify(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Raises:
            AuthError: If the token is missing, malformed, forged or expired
        """
        if not token:
            raise AuthError("Authentication token required")
        try:
            return jwt.decode(
                token,
                self.config.secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "username"]}
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthError("Invalid token") from e


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer ...`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


async def require_user(request: Request, authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    """FastAPI dependency returning the claims of a valid bearer token."""
    authority: TokenAuthority = request.app.state.authority
    return authority.verify(bearer_token(authorization))
