"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- Session token issue/verification (signed claim set with fixed expiry)
"""

from datetime import datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from internlink.core.config import Settings
from internlink.core.errors import AuthError


def build_password_context(rounds: int = 12) -> CryptContext:
    """bcrypt context; salts are generated per hash."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


class TokenError(AuthError):
    code = "TokenInvalid"


def token_missing() -> TokenError:
    return TokenError("No token provided", code="TokenMissing", status_code=401)


def token_invalid() -> TokenError:
    return TokenError("Invalid token", code="TokenInvalid", status_code=403)


def token_expired() -> TokenError:
    return TokenError("Token has expired", code="TokenExpired", status_code=401)


class TokenCodec:
    """Signs and verifies session claim sets."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 1440):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.ttl = timedelta(minutes=expire_minutes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(settings.jwt_secret_key, settings.jwt_algorithm, settings.jwt_expire_minutes)

    def issue(self, claims: dict, ttl: Optional[timedelta] = None) -> str:
        """Create a signed token. `claims` must include the user id as "id"."""
        to_encode = claims.copy()
        to_encode["sub"] = str(claims["id"])
        to_encode["exp"] = datetime.utcnow() + (ttl if ttl is not None else self.ttl)
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> dict:
        """Decode a token, raising TokenError (missing / invalid / expired)."""
        if not token:
            raise token_missing()
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise token_expired()
        except JWTError:
            raise token_invalid()

        if not claims.get("sub") or not claims.get("role"):
            raise token_invalid()
        return claims
