"""JWT utilities for authentication using authlib"""

from typing import Dict, Optional

from authlib.jose import JoseError, JsonWebToken
from authlib.jose.errors import InvalidTokenError

from fellowship.auth.models import User
from fellowship.config import config
from fellowship.logging_config import get_logger

logger = get_logger(__name__)


class JWTUtils:
    """Verifies HS256 access tokens signed with the shared JWT secret"""

    def __init__(self, secret: Optional[str] = None):
        self.jwt = JsonWebToken(["HS256"])
        self._secret = secret

    @property
    def secret(self) -> str:
        secret = self._secret or config.get("jwt_secret")
        if not secret:
            raise InvalidTokenError("JWT_SECRET must be configured")
        return secret

    def verify_token(self, token: str) -> Dict:
        """
        Verify signature and expiry of a token and return its claims

        Raises:
            InvalidTokenError: If token is invalid or expired
        """
        try:
            claims = self.jwt.decode(token, self.secret)
            # Checks exp/nbf/iat when present
            claims.validate()
            return dict(claims)

        except JoseError as e:
            logger.warning(f"JWT validation failed: {e}")
            raise InvalidTokenError(f"Token validation failed: {str(e)}")
        except (ValueError, TypeError) as e:
            logger.warning(f"Malformed token: {e}")
            raise InvalidTokenError("Malformed token")

    async def extract_user(self, token: str) -> User:
        """
        Extract the owner identity and role from a token

        Args:
            token: JWT token string

        Returns:
            User object with user_id, role and claims

        Raises:
            InvalidTokenError: If token is invalid or missing a subject
        """
        claims = self.verify_token(token)
        user_id = claims.get("sub") or claims.get("userId")

        if not user_id:
            raise InvalidTokenError("Token missing 'sub' claim")

        user_claims = {
            "exp": claims.get("exp"),
            "iat": claims.get("iat"),
            "role": claims.get("role"),
        }

        return User(user_id=str(user_id), role=claims.get("role"), claims=user_claims)


# Global JWT utilities instance
jwt_utils = JWTUtils()
