import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from passlib.context import CryptContext
from jose import jwt, JWTError

from military_assets.constants.error_codes import ErrorCode
from military_assets.core.config import (
    JWT_ACCESS_SECRET_KEY,
    JWT_ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRE_DAYS,
    BCRYPT_ROUNDS,
)
from military_assets.core.exceptions import UnauthorizedError

# =====================================================
# PASSWORDS
# =====================================================
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# =====================================================
# TOKENS
# =====================================================
def create_access_token(
    subject: str,
    token_version: int,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Short-lived JWT. ``sub`` is the user id; ``token_version`` is bumped on logout."""
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = {
        "sub": subject,
        "token_version": token_version,
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, JWT_ACCESS_SECRET_KEY, algorithm=JWT_ALGORITHM)


def new_refresh_token() -> Tuple[str, datetime]:
    """Opaque refresh token value and its expiry. Only stored server side."""
    return (
        secrets.token_urlsafe(48),
        datetime.now(timezone.utc) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_access_token(token: str) -> dict:
    try:
        claims = jwt.decode(token, JWT_ACCESS_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token", ErrorCode.TOKEN_INVALID)

    if claims.get("type") != "access":
        raise UnauthorizedError("Invalid token type", ErrorCode.TOKEN_INVALID)
    return claims


def token_subject(claims: dict) -> uuid.UUID:
    try:
        return uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise UnauthorizedError("Invalid token subject", ErrorCode.TOKEN_INVALID)
