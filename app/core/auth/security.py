# app/core/auth/security.py
"""
Password hashing and bearer tokens.

- Passwords: passlib CryptContext with pbkdf2_sha256
- Tokens: PyJWT, HS256 only, `exp` always set
"""

import time
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from app.config.settings import settings

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return _pwd_context.verify(plain_password, password_hash)
    except ValueError:
        return False


def create_access_token(data: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    payload = dict(data)
    payload["exp"] = int(time.time()) + 60 * (expires_minutes or settings.access_token_expire_minutes)
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.PyJWTError:
        return None
    return payload if isinstance(payload, dict) else None
