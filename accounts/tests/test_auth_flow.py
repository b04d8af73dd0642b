from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from django.conf import settings
from django.core import mail
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import Role, UserProfile
from accounts.tokens import decode_token, issue_token
from conftest import client_for, make_user
from system.flags import REQUIRE_EMAIL_VERIFICATION, update_flags

PASSWORD = "A-long-passphrase-42"


def _register(client, **overrides):
    payload = {"name": "Ada Lovelace", "email": "ada@example.com", "password": PASSWORD}
    payload.update(overrides)
    return client.post("/api/auth/register", payload, format="json")


@pytest.mark.django_db
def test_register_verify_login():
    c = APIClient()
    r = _register(c)
    assert r.status_code == 201
    assert r.json()["user"]["role"] == Role.STUDENT
    assert len(mail.outbox) == 1

    # Unverified accounts cannot log in yet
    r = c.post("/api/auth/login", {"email": "ada@example.com", "password": PASSWORD}, format="json")
    assert r.status_code == 401

    token = UserProfile.objects.get(user__email="ada@example.com").verification_token
    assert token and token in mail.outbox[0].body
    r = c.post("/api/auth/verify", {"token": token}, format="json")
    assert r.status_code == 200

    r = c.post("/api/auth/login", {"email": "ADA@example.com", "password": PASSWORD}, format="json")
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["name"] == "Ada Lovelace"
    assert decode_token(body["token"])["role"] == Role.STUDENT


@pytest.mark.django_db
def test_register_without_verification_requirement():
    update_flags({REQUIRE_EMAIL_VERIFICATION: False})
    c = APIClient()
    assert _register(c, role="teacher").status_code == 201
    assert len(mail.outbox) == 0
    r = c.post("/api/auth/login", {"email": "ada@example.com", "password": PASSWORD}, format="json")
    assert r.status_code == 200
    assert r.json()["user"]["role"] == Role.TEACHER


@pytest.mark.django_db
def test_register_rejects_duplicates_and_admin_role():
    c = APIClient()
    assert _register(c).status_code == 201
    r = _register(c)
    assert r.status_code == 400
    assert "Email already exists" in r.json()["detail"]
    assert _register(c, email="boss@example.com", role="admin").status_code == 400


@pytest.mark.django_db
def test_verify_with_unknown_token_fails():
    r = APIClient().post("/api/auth/verify", {"token": "nope"}, format="json")
    assert r.status_code == 400


@pytest.mark.django_db
def test_login_with_wrong_password_is_400(student):
    r = APIClient().post("/api/auth/login", {"email": student.email, "password": "wrong"}, format="json")
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid credentials"


@pytest.mark.django_db
@pytest.mark.security
def test_deactivated_account_is_refused_everywhere(student):
    c = client_for(student)
    assert c.get("/api/auth/me").status_code == 200
    student.is_active = False
    student.save(update_fields=["is_active"])

    r = c.get("/api/auth/me")
    assert r.status_code == 403
    assert r.json() == {"detail": "Account Deactivated. Contact Support.", "code": "account_deactivated"}

    r = APIClient().post("/api/auth/login", {"email": student.email, "password": "pw-Secret-123"}, format="json")
    assert r.status_code == 403


@pytest.mark.django_db
def test_remember_me_extends_token_lifetime(student):
    r = APIClient().post(
        "/api/auth/login",
        {"email": student.email, "password": "pw-Secret-123", "remember_me": True},
        format="json",
    )
    assert r.status_code == 200
    payload = decode_token(r.json()["token"])
    lifetime = timedelta(seconds=payload["exp"] - payload["iat"])
    assert lifetime == settings.REMEMBER_ME_TOKEN_LIFETIME

    payload = decode_token(issue_token(student))
    assert timedelta(seconds=payload["exp"] - payload["iat"]) == settings.ACCESS_TOKEN_LIFETIME


@pytest.mark.django_db
@pytest.mark.security
def test_expired_and_forged_tokens_are_401(student):
    now = timezone.now()
    expired = jwt.encode(
        {"id": student.id, "role": "student", "iat": now - timedelta(days=2), "exp": now - timedelta(days=1)},
        settings.JWT_SECRET,
        algorithm="HS256",
    )
    forged = jwt.encode({"id": student.id, "role": "admin"}, "some-other-secret-of-sufficient-length", algorithm="HS256")
    for token, detail in ((expired, "Token has expired."), (forged, "Invalid token")):
        c = APIClient()
        c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        r = c.get("/api/auth/me")
        assert r.status_code == 401
        assert r.json()["detail"] == detail


@pytest.mark.django_db
def test_token_for_deleted_user_is_401():
    ghost = make_user("ghost")
    c = client_for(ghost)
    ghost.delete()
    r = c.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["detail"] == "User not found"


@pytest.mark.django_db
def test_profile_created_for_new_users():
    user = make_user("fresh")
    assert UserProfile.objects.filter(user=user, role=Role.STUDENT).exists()
