"""Bearer token authentication for the REST API.

Resolves the acting user on every request and enforces the account
lifecycle: deactivated accounts are rejected even with a valid token.
"""
from __future__ import annotations

import logging

import jwt
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from api.exceptions import AccountDeactivated, Unauthenticated
from .tokens import bearer_from_header, decode_token

logger = logging.getLogger(__name__)

User = get_user_model()


def resolve_token_user(token: str):
    """Return the active user a token belongs to.

    Shared by the HTTP authentication class and the websocket middleware.
    """
    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token has expired.")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token")
    user = User.objects.select_related("profile").filter(pk=payload.get("id")).first()
    if user is None:
        raise Unauthenticated("User not found")
    if not user.is_active:
        logger.info("Rejected request from deactivated user %s", user.pk)
        raise AccountDeactivated()
    return user, payload


class BearerTokenAuthentication(BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        header = get_authorization_header(request).decode("latin-1")
        if not header:
            return None
        token = bearer_from_header(header)
        if token is None:
            raise Unauthenticated("Malformed authorization header.")
        return resolve_token_user(token)

    def authenticate_header(self, request):
        # Presence of this header makes DRF answer 401 instead of 403
        return self.keyword
