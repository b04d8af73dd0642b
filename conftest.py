import logging

import pytest
from django.contrib.auth.models import User
from django.core.cache import cache
from rest_framework.test import APIClient

from accounts.models import Role
from accounts.tokens import issue_token
from courses.models import Course


@pytest.fixture(autouse=True)
def silence_django_request_logger():
    """Reduce noise from expected 4xx in passing tests.

    Many tests intentionally exercise 401/403 paths to validate the gate
    and input handling. Django logs these at WARNING via 'django.request'.
    Lower that logger to ERROR during tests to avoid clutter.
    """
    logger = logging.getLogger("django.request")
    old = logger.level
    logger.setLevel(logging.ERROR)
    try:
        yield
    finally:
        logger.setLevel(old)


@pytest.fixture(autouse=True)
def clear_cache():
    # Feature flag snapshots live in the cache
    cache.clear()
    yield
    cache.clear()


def make_user(username: str, role: str = Role.STUDENT, *, verified: bool = True, name: str = "") -> User:
    user = User.objects.create_user(username=username, email=f"{username}@example.com", password="pw-Secret-123")
    user.profile.role = role
    user.profile.is_verified = verified
    user.profile.full_name = name or username.title()
    user.profile.save(update_fields=["role", "is_verified", "full_name"])
    return user


def client_for(user) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")
    return client


@pytest.fixture
def teacher(db):
    return make_user("teacher", Role.TEACHER)


@pytest.fixture
def student(db):
    return make_user("student", Role.STUDENT)


@pytest.fixture
def admin_user(db):
    return make_user("admin", Role.ADMIN)


@pytest.fixture
def course(teacher):
    return Course.objects.create(owner=teacher, title="Intro", description="", access_days=30)
