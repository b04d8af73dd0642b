"""Registration, login and email verification endpoints."""
from __future__ import annotations

import logging
import secrets

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.core.mail import send_mail
from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from accounts.models import Role, UserProfile, role_of
from accounts.tokens import issue_token
from system.flags import ENABLE_PUBLIC_REGISTRATION, REQUIRE_EMAIL_VERIFICATION, flags_for
from .exceptions import AccountDeactivated, FeatureDisabled, Unauthenticated, ValidationFailure
from .serializers import AdminUserSerializer, LoginSerializer, RegisterSerializer, UserSerializer, VerifyEmailSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def _send_verification_email(user, token: str) -> None:
    link = f"{settings.FRONTEND_URL}/#/verify?token={token}"
    send_mail(
        "Verify your email",
        f"Welcome! Confirm your email address to activate your account:\n\n{link}\n",
        settings.DEFAULT_FROM_EMAIL,
        [user.email],
    )


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([AnonRateThrottle])
def register(request):
    flags = flags_for(request)
    if not flags.enabled(ENABLE_PUBLIC_REGISTRATION):
        raise FeatureDisabled("Public registration is currently disabled.")
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    needs_verification = flags.enabled(REQUIRE_EMAIL_VERIFICATION) and not settings.SKIP_EMAIL_VERIFICATION
    with transaction.atomic():
        user = User.objects.create_user(username=data["email"], email=data["email"], password=data["password"])
        profile = user.profile
        profile.role = data["role"]
        profile.full_name = data["name"].strip()
        profile.is_verified = not needs_verification
        profile.verification_token = secrets.token_hex(32) if needs_verification else ""
        profile.save(update_fields=["role", "full_name", "is_verified", "verification_token"])

    if needs_verification:
        _send_verification_email(user, profile.verification_token)
        message = "Registration successful. Check your email to verify your account."
    else:
        message = "Registration successful. You can now log in."
    logger.info("Registered %s user %s", profile.role, user.pk)
    return Response({"message": message, "user": UserSerializer(user).data}, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([AnonRateThrottle])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    user = User.objects.filter(email__iexact=data["email"]).select_related("profile").first()
    if user is None or not user.check_password(data["password"]):
        raise ValidationFailure("Invalid credentials")
    if not user.is_active:
        raise AccountDeactivated()
    if (
        flags_for(request).enabled(REQUIRE_EMAIL_VERIFICATION)
        and not settings.SKIP_EMAIL_VERIFICATION
        and role_of(user) != Role.ADMIN
        and not user.profile.is_verified
    ):
        raise Unauthenticated("Please verify your email before logging in.")

    token = issue_token(user, remember_me=data["remember_me"])
    update_last_login(None, user)
    return Response({"token": token, "user": UserSerializer(user).data})


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([AnonRateThrottle])
def verify_email(request):
    serializer = VerifyEmailSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    profile = UserProfile.objects.filter(verification_token=serializer.validated_data["token"]).first()
    if profile is None:
        raise ValidationFailure("Invalid or expired verification token.")
    profile.is_verified = True
    profile.verification_token = ""
    profile.save(update_fields=["is_verified", "verification_token"])
    logger.info("Verified email for user %s", profile.user_id)
    return Response({"message": "Email verified. You can now log in."})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def me(request):
    return Response(AdminUserSerializer(request.user).data)
