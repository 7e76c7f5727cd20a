from datetime import datetime, timedelta
from typing import Optional
from jose import jwt
from hardware_pos.core.config import settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Mint a bearer token in the identity provider's format.
    Used by the seed script and tests; production tokens come from the provider.
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    if "type" not in to_encode:
        to_encode["type"] = "access"

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
