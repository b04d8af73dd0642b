"""Signed bearer tokens (JWT, HS256) carrying `{id, role}`."""
from __future__ import annotations

import jwt
from django.conf import settings
from django.utils import timezone

from .models import role_of


def issue_token(user, *, remember_me: bool = False) -> str:
    """Sign a token for `user`; 24 hours by default, 30 days with remember-me."""
    lifetime = settings.REMEMBER_ME_TOKEN_LIFETIME if remember_me else settings.ACCESS_TOKEN_LIFETIME
    now = timezone.now()
    payload = {
        "id": user.id,
        "role": role_of(user),
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify signature and expiry. Raises `jwt.InvalidTokenError` on failure."""
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if "id" not in payload:
        raise jwt.InvalidTokenError("Token has no subject.")
    return payload


def bearer_from_header(header: str | None) -> str | None:
    if not header:
        return None
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]
