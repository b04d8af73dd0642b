from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.models import Role
from api.exceptions import AccessExpired, EnrollmentInactive, NotEnrolled
from conftest import client_for, make_user
from courses import enrollment as lifecycle
from courses.access import can_manage_course, resolve_course_access
from courses.models import Enrollment
from lessons.models import Lesson


@pytest.mark.django_db
def test_gate_refuses_missing_inactive_and_expired(student, course):
    with pytest.raises(NotEnrolled):
        resolve_course_access(student, course)

    enrollment, _ = lifecycle.enroll(student, course)
    lifecycle.set_active(enrollment, False)
    with pytest.raises(EnrollmentInactive):
        resolve_course_access(student, course)

    lifecycle.set_active(enrollment, True)
    with pytest.raises(AccessExpired):
        resolve_course_access(student, course, now=enrollment.expires_at + timedelta(seconds=1))

    access = resolve_course_access(student, course)
    assert access.manager is False
    assert access.enrollment.pk == enrollment.pk


@pytest.mark.django_db
def test_owner_and_admin_bypass_enrollment(teacher, admin_user, course):
    assert not Enrollment.objects.exists()
    far_future = timezone.now() + timedelta(days=10_000)
    for user in (teacher, admin_user):
        access = resolve_course_access(user, course, now=far_future)
        assert access.manager is True
        assert access.enrollment is None


@pytest.mark.django_db
def test_other_teacher_is_not_a_manager(course):
    stranger = make_user("stranger", Role.TEACHER)
    assert can_manage_course(stranger, course) is False
    with pytest.raises(NotEnrolled):
        resolve_course_access(stranger, course)


@pytest.mark.django_db
@pytest.mark.security
def test_course_detail_gate_messages(student, course):
    c = client_for(student)
    r = c.get(f"/api/courses/{course.id}")
    assert r.status_code == 403
    assert r.json() == {"detail": "Not enrolled", "code": "not_enrolled"}

    enrollment, _ = lifecycle.enroll(student, course)
    lifecycle.set_active(enrollment, False)
    r = c.get(f"/api/courses/{course.id}")
    assert r.status_code == 403
    assert r.json()["detail"] == "Enrollment inactive"


@pytest.mark.django_db
@pytest.mark.security
def test_expired_access_then_admin_extension(student, admin_user, course):
    # Enrolled on day 0 of a 30-day course; today is day 40
    day0 = timezone.now() - timedelta(days=40)
    enrollment, _ = lifecycle.enroll(student, course, now=day0)
    assert enrollment.expires_at == day0 + timedelta(days=30)

    c = client_for(student)
    r = c.get(f"/api/courses/{course.id}")
    assert r.status_code == 403
    assert r.json()["detail"] == "Course access has expired"

    # Extension adds to the stored expiry: day30 + 20 = day50
    r = client_for(admin_user).put(f"/api/admin/enrollments/{enrollment.id}/extend", {"days": 20}, format="json")
    assert r.status_code == 200
    enrollment.refresh_from_db()
    assert enrollment.expires_at == day0 + timedelta(days=50)

    r = c.get(f"/api/courses/{course.id}")
    assert r.status_code == 200


@pytest.mark.django_db
def test_course_detail_for_enrolled_student(student, course):
    Lesson.objects.create(course=course, title="Second", type="text", position=2)
    Lesson.objects.create(course=course, title="First", type="video", position=1)
    lifecycle.enroll(student, course)
    r = client_for(student).get(f"/api/courses/{course.id}/")
    assert r.status_code == 200
    body = r.json()
    assert [l["title"] for l in body["lessons"]] == ["First", "Second"]
    assert body["is_manager"] is False
    assert body["enrollment"]["is_active"] is True
    assert body["progress"]["percentage"] == 0


@pytest.mark.django_db
def test_assignment_allow_list_hides_lessons_from_other_students(student, teacher, course):
    other = make_user("other")
    Lesson.objects.create(course=course, title="Open", type="assignment")
    Lesson.objects.create(course=course, title="Private", type="assignment", target_students=[other.id])
    lifecycle.enroll(student, course)
    lifecycle.enroll(other, course)

    titles = [l["title"] for l in client_for(student).get(f"/api/courses/{course.id}").json()["lessons"]]
    assert titles == ["Open"]
    titles = [l["title"] for l in client_for(other).get(f"/api/courses/{course.id}").json()["lessons"]]
    assert sorted(titles) == ["Open", "Private"]
    # Managers see everything
    titles = [l["title"] for l in client_for(teacher).get(f"/api/courses/{course.id}").json()["lessons"]]
    assert sorted(titles) == ["Open", "Private"]


@pytest.mark.django_db
@pytest.mark.security
def test_anonymous_and_bad_tokens_are_401(course):
    from rest_framework.test import APIClient

    c = APIClient()
    assert c.get(f"/api/courses/{course.id}").status_code == 401
    c.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")
    r = c.get(f"/api/courses/{course.id}")
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token"


@pytest.mark.django_db
def test_catalog_is_public(course):
    from rest_framework.test import APIClient

    r = APIClient().get("/api/courses")
    assert r.status_code == 200
    assert [c["title"] for c in r.json()] == ["Intro"]


@pytest.mark.django_db
def test_course_creation_requires_instructor(student, teacher):
    payload = {"title": "New", "description": "D", "access_days": 90}
    assert client_for(student).post("/api/courses", payload, format="json").status_code == 403
    r = client_for(teacher).post("/api/courses", payload, format="json")
    assert r.status_code == 201
    assert r.json()["teacher"]["id"] == teacher.id
