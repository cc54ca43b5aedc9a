from jose import jwt, JWTError
from datetime import datetime, timedelta
from typing import Optional
from fastapi import HTTPException
from boutique.config import settings
import logging

logger = logging.getLogger(__name__)

ADMIN_COOKIE_NAME = "admin-session"


def _admin_secret() -> str:
    if not settings.ADMIN_JWT_SECRET:
        logger.error("ADMIN_JWT_SECRET is not set in environment variables")
        raise HTTPException(status_code=500, detail="Server configuration error")
    return settings.ADMIN_JWT_SECRET


def create_admin_token(email: str, expires_delta: Optional[timedelta] = None):
    expire = datetime.utcnow() + (
        expires_delta
        if expires_delta
        else timedelta(hours=settings.admin_session_hours)
    )

    to_encode = {"email": email, "role": "admin", "exp": expire}

    return jwt.encode(
        to_encode,
        _admin_secret(),
        algorithm=settings.admin_jwt_algorithm
    )


def decode_admin_token(token: str):
    try:
        return jwt.decode(
            token,
            _admin_secret(),
            algorithms=[settings.admin_jwt_algorithm],
        )
    except JWTError:
        return None
