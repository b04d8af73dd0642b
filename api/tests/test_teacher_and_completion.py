from __future__ import annotations

import pytest

from accounts.models import Role
from conftest import client_for, make_user
from courses import enrollment as lifecycle
from courses.models import Certificate, Course
from lessons.models import Lesson, Submission
from system.flags import ENABLE_CERTIFICATES, update_flags


@pytest.mark.django_db
def test_teacher_sees_only_own_courses_and_students(teacher, student, course):
    other_teacher = make_user("other", Role.TEACHER)
    other_course = Course.objects.create(owner=other_teacher, title="Other", description="")
    lifecycle.enroll(student, course)
    lifecycle.enroll(student, other_course)
    Lesson.objects.create(course=course, title="L", type="text")

    c = client_for(teacher)
    r = c.get("/api/teacher/my-courses")
    assert r.status_code == 200
    (row,) = r.json()
    assert row["id"] == course.id
    assert row["student_count"] == 1
    assert row["lesson_count"] == 1

    r = c.get("/api/teacher/students")
    assert [e["course"] for e in r.json()] == [course.id]

    assert client_for(student).get("/api/teacher/my-courses").status_code == 403


@pytest.mark.django_db
def test_admin_sees_every_course(admin_user, course, teacher):
    Course.objects.create(owner=teacher, title="Second", description="")
    r = client_for(admin_user).get("/api/teacher/my-courses")
    assert len(r.json()) == 2


def _complete_course(student, course):
    lesson = Lesson.objects.create(course=course, title="Only", type="text")
    Submission.objects.create(user=student, lesson=lesson, score=100)


@pytest.mark.django_db
def test_certificate_requires_completion_and_is_idempotent(student, course):
    lifecycle.enroll(student, course)
    c = client_for(student)
    Lesson.objects.create(course=course, title="Pending", type="video")
    r = c.post(f"/api/courses/{course.id}/certificate")
    assert r.status_code == 403

    Submission.objects.create(user=student, lesson=course.lessons.get(), score=100)
    r = c.post(f"/api/courses/{course.id}/certificate")
    assert r.status_code == 201
    code = r.json()["unique_id"]
    assert code.startswith("OC-")

    r = c.post(f"/api/courses/{course.id}/certificate")
    assert r.status_code == 200
    assert r.json()["unique_id"] == code
    assert Certificate.objects.count() == 1

    # Public verification
    from rest_framework.test import APIClient

    r = APIClient().get(f"/api/certificates/{code}")
    assert r.status_code == 200
    assert r.json()["course_title"] == course.title
    assert APIClient().get("/api/certificates/OC-MISSING").status_code == 404


@pytest.mark.django_db
def test_certificates_can_be_disabled(student, course):
    lifecycle.enroll(student, course)
    _complete_course(student, course)
    update_flags({ENABLE_CERTIFICATES: False})
    r = client_for(student).post(f"/api/courses/{course.id}/certificate")
    assert r.status_code == 403
    assert r.json()["code"] == "feature_disabled"


@pytest.mark.django_db
def test_feedback_once_after_completion(student, teacher, course):
    lifecycle.enroll(student, course)
    c = client_for(student)
    r = c.post(f"/api/courses/{course.id}/feedback", {"rating": 5, "comment": "Great"}, format="json")
    assert r.status_code == 403

    _complete_course(student, course)
    r = c.post(f"/api/courses/{course.id}/feedback", {"rating": 5, "comment": "Great"}, format="json")
    assert r.status_code == 201
    r = c.post(f"/api/courses/{course.id}/feedback", {"rating": 4}, format="json")
    assert r.status_code == 400
    assert c.post(f"/api/courses/{course.id}/feedback", {"rating": 9}, format="json").status_code == 400

    r = client_for(teacher).get(f"/api/courses/{course.id}/feedback")
    assert [f["rating"] for f in r.json()] == [5]


@pytest.mark.django_db
def test_schema_lists_course_routes():
    from rest_framework.test import APIClient

    r = APIClient().get("/api/schema/")
    assert r.status_code == 200
    assert b"/api/courses" in r.content
