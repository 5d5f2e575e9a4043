# auth.py

"""Password hashing, JWT issuance and the optional bearer-token actor."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from config import get_settings

from .domain import Role
from .domain.errors import Unauthorized
from .models import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

ph = PasswordHasher()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass(frozen=True)
class Actor:
    """Identity extracted from a bearer token."""

    user_id: str
    role: Role


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return ``True`` if ``password`` matches ``password_hash``."""
    try:
        return ph.verify(password_hash, password)
    except VerifyMismatchError:
        return False
    except (VerificationError, InvalidHashError):
        logger.warning("password verification failed")
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Return a signed JWT carrying the user's id and role."""

    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": user.id, "role": user.role, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> Actor:
    """Validate ``token`` and return the actor it names."""

    try:
        payload = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
        return Actor(user_id=payload["sub"], role=Role(payload["role"]))
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        raise Unauthorized("Could not validate credentials") from exc


async def optional_actor(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[Actor]:
    """Return the bearer token's actor, or ``None`` for anonymous requests.

    A token that is present but invalid is rejected rather than ignored.
    """

    if not token:
        return None
    return decode_token(token)
