"""Websocket authentication from a `?token=<jwt>` query parameter.

Browsers cannot set an Authorization header on websocket handshakes, so
the bearer token travels in the query string instead.
"""
from __future__ import annotations

from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser
from rest_framework.exceptions import APIException

from .authentication import resolve_token_user


@database_sync_to_async
def _user_for_token(token: str | None):
    if not token:
        return AnonymousUser()
    try:
        user, _ = resolve_token_user(token)
    except APIException:
        return AnonymousUser()
    return user


class BearerTokenAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        params = parse_qs(scope.get("query_string", b"").decode("latin-1"))
        token = (params.get("token") or [None])[0]
        scope = dict(scope, user=await _user_for_token(token))
        return await super().__call__(scope, receive, send)
