"""Error taxonomy for the REST API.

Kept free of `rest_framework.views` imports: the authentication class
loaded from DRF settings imports this module.
"""
from __future__ import annotations

from rest_framework import exceptions


class Unauthenticated(exceptions.AuthenticationFailed):
    default_detail = "Access denied"
    default_code = "unauthenticated"


class Forbidden(exceptions.PermissionDenied):
    default_detail = "Access denied"
    default_code = "forbidden"


class AccountDeactivated(Forbidden):
    default_detail = "Account Deactivated. Contact Support."
    default_code = "account_deactivated"


class NotEnrolled(Forbidden):
    default_detail = "Not enrolled"
    default_code = "not_enrolled"


class EnrollmentInactive(Forbidden):
    default_detail = "Enrollment inactive"
    default_code = "enrollment_inactive"


class AccessExpired(Forbidden):
    default_detail = "Course access has expired"
    default_code = "access_expired"


class Unauthorized(Forbidden):
    """Role or ownership mismatch."""

    default_detail = "Unauthorized"
    default_code = "unauthorized"


class FeatureDisabled(Forbidden):
    default_detail = "This feature is currently disabled."
    default_code = "feature_disabled"


class NotFound(exceptions.NotFound):
    default_code = "not_found"


class ValidationFailure(exceptions.ValidationError):
    default_code = "invalid"
