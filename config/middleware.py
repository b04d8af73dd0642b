from __future__ import annotations

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework.exceptions import APIException

from accounts.authentication import resolve_token_user
from accounts.models import Role, role_of
from accounts.tokens import bearer_from_header
from system.flags import MAINTENANCE_MODE, flags_for, load_flags


class FeatureFlagsMiddleware(MiddlewareMixin):
    """Attach the current feature flag snapshot as `request.flags`."""

    def process_request(self, request):
        request.flags = load_flags()


class MaintenanceModeMiddleware(MiddlewareMixin):
    """Answer 503 for API calls while maintenance mode is on.

    Login and the public settings endpoint stay reachable so admins can
    sign in and switch the flag off. Admin bearer tokens pass through.
    """

    exempt_prefixes = ("/api/auth/login", "/api/settings")

    def process_request(self, request):
        if not request.path.startswith("/api/"):
            return None
        if request.path.startswith(self.exempt_prefixes):
            return None
        flags = flags_for(request)
        if not flags.enabled(MAINTENANCE_MODE):
            return None
        if self._is_admin(request):
            return None
        return JsonResponse(
            {"detail": "System is currently under maintenance.", "code": "maintenance"},
            status=503,
        )

    @staticmethod
    def _is_admin(request) -> bool:
        token = bearer_from_header(request.META.get("HTTP_AUTHORIZATION"))
        if not token:
            return False
        try:
            user, _ = resolve_token_user(token)
        except APIException:
            return False
        return role_of(user) == Role.ADMIN
