from __future__ import annotations

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from activity.models import Notification
from conftest import client_for, make_user
from courses import enrollment as lifecycle
from discussions.models import DiscussionReply, DiscussionTopic
from lessons.models import AssignmentSubmission, Lesson, Submission
from lessons.utils import grade_assignment, submit_assignment


@pytest.mark.django_db
def test_enrollment_notifies_course_owner(teacher, student, course):
    lifecycle.enroll(student, course)
    n = Notification.objects.get(user=teacher)
    assert n.type == Notification.TYPE_ENROLLMENT
    assert n.course_id == course.id
    # Re-enrolling refreshes the row without a second notice
    lifecycle.enroll(student, course)
    assert Notification.objects.filter(user=teacher).count() == 1


@pytest.mark.django_db
def test_owner_self_enrollment_is_silent(teacher, course):
    lifecycle.enroll(teacher, course)
    assert not Notification.objects.exists()


@pytest.mark.django_db
def test_quiz_and_assignment_submissions_notify_owner(teacher, student, course):
    quiz = Lesson.objects.create(course=course, title="Q", type="quiz")
    essay = Lesson.objects.create(course=course, title="Essay", type="assignment")
    Submission.objects.create(user=student, lesson=quiz, score=100)
    submit_assignment(student, essay, SimpleUploadedFile("a.txt", b"v1"))
    submit_assignment(student, essay, SimpleUploadedFile("a.txt", b"v2"))
    assert Notification.objects.filter(user=teacher, type=Notification.TYPE_SUBMISSION).count() == 3


@pytest.mark.django_db
def test_grading_notifies_student(student, course):
    essay = Lesson.objects.create(course=course, title="Essay", type="assignment")
    submission = AssignmentSubmission.objects.create(user=student, lesson=essay, file=SimpleUploadedFile("a.txt", b"x"))
    grade_assignment(submission, 88, "Nice")
    n = Notification.objects.get(user=student)
    assert n.type == Notification.TYPE_SYSTEM
    assert "88" in n.message


@pytest.mark.django_db
def test_reply_notifies_topic_author_but_not_self(teacher, student, course):
    topic = DiscussionTopic.objects.create(course=course, user=student, title="Help", content="?")
    DiscussionReply.objects.create(topic=topic, user=student, content="bump")
    assert not Notification.objects.filter(user=student).exists()
    DiscussionReply.objects.create(topic=topic, user=teacher, content="Answer")
    assert Notification.objects.filter(user=student, type=Notification.TYPE_REPLY).count() == 1


@pytest.mark.django_db
def test_list_unread_and_mark_read(teacher, student, course):
    lifecycle.enroll(student, course)
    c = client_for(teacher)
    r = c.get("/api/notifications")
    assert r.status_code == 200
    (item,) = r.json()
    assert item["type"] == Notification.TYPE_ENROLLMENT

    r = c.put(f"/api/notifications/{item['id']}/read")
    assert r.status_code == 200
    assert c.get("/api/notifications").json() == []
    # Already read: still fine
    assert c.put(f"/api/notifications/{item['id']}/read").status_code == 200


@pytest.mark.django_db
def test_cannot_read_someone_elses_notification(teacher, student, course):
    lifecycle.enroll(student, course)
    n = Notification.objects.get(user=teacher)
    intruder = make_user("intruder")
    assert client_for(intruder).put(f"/api/notifications/{n.id}/read").status_code == 404
