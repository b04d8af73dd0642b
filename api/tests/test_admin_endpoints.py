from __future__ import annotations

import pytest

from accounts.models import Role
from conftest import client_for, make_user
from courses import enrollment as lifecycle


@pytest.mark.django_db
def test_users_listing_is_paginated_filtered_and_searchable(admin_user):
    for i in range(25):
        make_user(f"learner{i:02d}")
    make_user("mentor", Role.TEACHER, name="Grace Hopper")
    c = client_for(admin_user)

    r = c.get("/api/admin/users")
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 27
    assert len(body["results"]) == 20

    r = c.get("/api/admin/users", {"role": "teacher"})
    assert [u["email"] for u in r.json()["results"]] == ["mentor@example.com"]

    r = c.get("/api/admin/users", {"search": "hopper"})
    assert r.json()["count"] == 1

    r = c.get("/api/admin/users", {"page_size": 500})
    assert len(r.json()["results"]) == 27


@pytest.mark.django_db
@pytest.mark.security
def test_admin_routes_refuse_non_admins(teacher, student):
    for user in (teacher, student):
        c = client_for(user)
        r = c.get("/api/admin/users")
        assert r.status_code == 403
        assert r.json()["detail"] == "Access denied: Requires Admin privileges"
        assert c.get("/api/admin/stats").status_code == 403


@pytest.mark.django_db
def test_toggle_status_round_trip(admin_user, student):
    c = client_for(admin_user)
    r = c.put(f"/api/admin/users/{student.id}/toggle-status")
    assert r.status_code == 200
    assert r.json() == {"id": student.id, "is_active": False}
    # The deactivated user's token stops working immediately
    assert client_for(student).get("/api/auth/me").status_code == 403

    r = c.put(f"/api/admin/users/{student.id}/toggle-status/")
    assert r.json()["is_active"] is True


@pytest.mark.django_db
def test_admin_cannot_deactivate_or_delete_self(admin_user):
    c = client_for(admin_user)
    assert c.put(f"/api/admin/users/{admin_user.id}/toggle-status").status_code == 403
    assert c.delete(f"/api/admin/users/{admin_user.id}").status_code == 403


@pytest.mark.django_db
def test_update_and_delete_user(admin_user, student):
    c = client_for(admin_user)
    r = c.put(f"/api/admin/users/{student.id}", {"name": "Renamed", "role": "teacher"}, format="json")
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    assert r.json()["role"] == "teacher"

    other = make_user("other")
    r = c.put(f"/api/admin/users/{student.id}", {"email": other.email}, format="json")
    assert r.status_code == 400

    assert c.delete(f"/api/admin/users/{student.id}").status_code == 204
    assert c.delete(f"/api/admin/users/{student.id}").status_code == 404


@pytest.mark.django_db
def test_stats(admin_user, teacher, student, course):
    lifecycle.enroll(student, course)
    r = client_for(admin_user).get("/api/admin/stats")
    assert r.status_code == 200
    body = r.json()
    assert body["users"] == {"total": 3, "students": 1, "teachers": 1, "admins": 1, "inactive": 0}
    assert body["courses"] == 1
    assert body["enrollments"] == {"total": 1, "active": 1}
