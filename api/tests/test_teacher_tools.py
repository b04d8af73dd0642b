from __future__ import annotations

import datetime as dt

import pytest
from django.utils import timezone

from accounts.models import Role
from activity.models import CalendarTask
from conftest import client_for, make_user
from courses.models import Course
from discussions.models import DiscussionReply, DiscussionTopic
from lessons.models import Lesson


@pytest.mark.django_db
def test_calendar_lists_due_lessons_and_own_tasks(teacher, course):
    due = timezone.now() + dt.timedelta(days=3)
    quiz = Lesson.objects.create(course=course, title="Midterm", type="quiz", due_date=due)
    Lesson.objects.create(course=course, title="Essay", type="assignment")  # no due date
    Lesson.objects.create(course=course, title="Notes", type="text", due_date=due)
    other_teacher = make_user("other", Role.TEACHER)
    other_course = Course.objects.create(owner=other_teacher, title="Other", description="")
    Lesson.objects.create(course=other_course, title="Theirs", type="quiz", due_date=due)
    CalendarTask.objects.create(user=teacher, title="Prepare slides", date=dt.date(2030, 1, 1))
    CalendarTask.objects.create(user=other_teacher, title="Not mine", date=dt.date(2030, 1, 1))

    r = client_for(teacher).get("/api/teacher/calendar")
    assert r.status_code == 200
    events = {e["id"]: e for e in r.json()}
    assert set(events) == {f"lesson-{quiz.id}", f"task-{CalendarTask.objects.get(user=teacher).id}"}
    assert events[f"lesson-{quiz.id}"]["title"] == "Intro: Midterm"
    assert events[f"lesson-{quiz.id}"]["type"] == "quiz"


@pytest.mark.django_db
def test_calendar_task_create_and_delete(teacher):
    c = client_for(teacher)
    r = c.post("/api/teacher/calendar/tasks", {"title": "Office hours", "date": "2030-02-03"}, format="json")
    assert r.status_code == 201, r.json()
    task_id = r.json()["id"]
    assert CalendarTask.objects.get(pk=task_id).user_id == teacher.id

    assert c.post("/api/teacher/calendar/tasks", {"title": "  ", "date": "2030-02-03"}, format="json").status_code == 400

    # The calendar hands out "task-<id>" ids; both forms delete
    r = c.delete(f"/api/teacher/calendar/tasks/task-{task_id}")
    assert r.status_code == 200
    assert not CalendarTask.objects.filter(pk=task_id).exists()
    assert c.delete(f"/api/teacher/calendar/tasks/{task_id}").status_code == 404


@pytest.mark.django_db
def test_cannot_delete_someone_elses_task(teacher):
    other_teacher = make_user("other", Role.TEACHER)
    task = CalendarTask.objects.create(user=other_teacher, title="Theirs", date=dt.date(2030, 1, 1))
    r = client_for(teacher).delete(f"/api/teacher/calendar/tasks/{task.id}")
    assert r.status_code == 404
    assert CalendarTask.objects.filter(pk=task.id).exists()


@pytest.mark.django_db
def test_calendar_is_instructor_only(student):
    c = client_for(student)
    assert c.get("/api/teacher/calendar").status_code == 403
    assert c.post("/api/teacher/calendar/tasks", {"title": "x", "date": "2030-01-01"}, format="json").status_code == 403


@pytest.mark.django_db
def test_candidates_lists_active_students(teacher, student):
    inactive = make_user("gone")
    inactive.is_active = False
    inactive.save(update_fields=["is_active"])
    make_user("colleague", Role.TEACHER)

    r = client_for(teacher).get("/api/teacher/candidates")
    assert r.status_code == 200
    assert [row["id"] for row in r.json()] == [student.id]
    assert client_for(student).get("/api/teacher/candidates").status_code == 403


@pytest.mark.django_db
def test_discussion_overview_filters_by_course_owner_and_search(teacher, student, course):
    mine = DiscussionTopic.objects.create(course=course, user=student, title="Homework help", content="?")
    DiscussionTopic.objects.create(course=course, user=student, title="Schedule", content="?")
    DiscussionReply.objects.create(topic=mine, user=teacher, content="Sure")
    other_course = Course.objects.create(owner=make_user("other", Role.TEACHER), title="Other", description="")
    DiscussionTopic.objects.create(course=other_course, user=student, title="Homework elsewhere", content="?")

    c = client_for(teacher)
    r = c.get("/api/teacher/discussions/all")
    assert r.status_code == 200
    assert {row["title"] for row in r.json()} == {"Homework help", "Schedule"}

    r = c.get("/api/teacher/discussions/all", {"search": "homework"})
    (row,) = r.json()
    assert row["id"] == mine.id
    assert row["course_title"] == "Intro"
    assert row["author"] == "Student"
    assert row["reply_count"] == 1
