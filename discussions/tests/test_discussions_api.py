from __future__ import annotations

from unittest import mock

import pytest

from conftest import client_for, make_user
from courses import enrollment as lifecycle
from discussions.models import DiscussionReply, DiscussionTopic


@pytest.mark.django_db
def test_enrolled_student_posts_topic_and_it_is_broadcast(student, course):
    lifecycle.enroll(student, course)
    c = client_for(student)
    with mock.patch("api.views.broadcast") as pushed:
        r = c.post(f"/api/courses/{course.id}/discussions", {"title": "Week 1", "content": "Questions?"}, format="json")
    assert r.status_code == 201
    body = r.json()
    assert body["author"]["id"] == student.id
    assert body["reply_count"] == 0
    pushed.assert_called_once()
    assert pushed.call_args.args[:2] == (course.id, "topic_created")

    r = c.get(f"/api/courses/{course.id}/discussions")
    assert r.status_code == 200
    assert [t["title"] for t in r.json()] == ["Week 1"]


@pytest.mark.django_db
def test_replies_and_thread_detail(student, teacher, course):
    lifecycle.enroll(student, course)
    topic = DiscussionTopic.objects.create(course=course, user=student, title="Help", content="Stuck")
    r = client_for(teacher).post(f"/api/discussions/{topic.id}/replies", {"content": "Try again"}, format="json")
    assert r.status_code == 201
    assert DiscussionReply.objects.filter(topic=topic).count() == 1

    r = client_for(student).get(f"/api/discussions/{topic.id}")
    assert r.status_code == 200
    body = r.json()
    assert body["reply_count"] == 1
    assert body["replies"][0]["content"] == "Try again"


@pytest.mark.django_db
@pytest.mark.security
def test_discussions_are_gated(student, course):
    topic = DiscussionTopic.objects.create(course=course, user=course.owner, title="Rules", content="Be nice")
    outsider = make_user("outsider")
    c = client_for(outsider)
    assert c.get(f"/api/courses/{course.id}/discussions").status_code == 403
    assert c.get(f"/api/discussions/{topic.id}").status_code == 403
    assert c.post(f"/api/discussions/{topic.id}/replies", {"content": "hi"}, format="json").status_code == 403

    enrollment, _ = lifecycle.enroll(student, course)
    lifecycle.set_active(enrollment, False)
    r = client_for(student).get(f"/api/discussions/{topic.id}")
    assert r.status_code == 403
    assert r.json()["detail"] == "Enrollment inactive"
