"""Per-course gradebook: students x gradable lessons.

Columns are quiz and assignment lessons in position order. A quiz cell is
the student's best score across attempts; an assignment cell is the
recorded grade and is left out while the work is ungraded, so "not
graded" stays distinguishable from a grade of 0. Each reducer is a single
grouped query over the whole course.
"""
from __future__ import annotations

from collections.abc import Iterable

from django.db.models import Max

from accounts.models import display_name
from courses.access import require_manager
from courses.models import Course, Enrollment
from .models import GRADABLE_TYPES, AssignmentSubmission, Lesson, LessonType, Submission


def best_quiz_scores(lesson_ids: Iterable[int], user_ids: Iterable[int]) -> dict[tuple[int, int], int]:
    """Map (user_id, lesson_id) -> highest quiz score."""
    rows = (
        Submission.objects.filter(lesson_id__in=list(lesson_ids), user_id__in=list(user_ids))
        .values("user_id", "lesson_id")
        .annotate(best=Max("score"))
    )
    return {(r["user_id"], r["lesson_id"]): r["best"] for r in rows}


def recorded_assignment_grades(lesson_ids: Iterable[int], user_ids: Iterable[int]) -> dict[tuple[int, int], int]:
    """Map (user_id, lesson_id) -> grade, for graded submissions only."""
    rows = AssignmentSubmission.objects.filter(
        lesson_id__in=list(lesson_ids),
        user_id__in=list(user_ids),
        grade__isnull=False,
    ).values_list("user_id", "lesson_id", "grade")
    return {(user_id, lesson_id): grade for user_id, lesson_id, grade in rows}


def build_gradebook(user, course: Course) -> dict:
    require_manager(user, course)

    lessons = list(Lesson.objects.filter(course=course, type__in=GRADABLE_TYPES).order_by("position", "id"))
    enrollments = list(
        Enrollment.objects.filter(course=course).select_related("user__profile").order_by("enrolled_at", "id")
    )
    user_ids = [e.user_id for e in enrollments]
    quiz_ids = [l.id for l in lessons if l.type == LessonType.QUIZ]
    assignment_ids = [l.id for l in lessons if l.type == LessonType.ASSIGNMENT]
    quiz_scores = best_quiz_scores(quiz_ids, user_ids) if quiz_ids and user_ids else {}
    assignment_grades = recorded_assignment_grades(assignment_ids, user_ids) if assignment_ids and user_ids else {}

    rows = []
    for en in enrollments:
        grades: dict[int, int] = {}
        for lesson in lessons:
            key = (en.user_id, lesson.id)
            source = quiz_scores if lesson.type == LessonType.QUIZ else assignment_grades
            if key in source:
                grades[lesson.id] = source[key]
        rows.append(
            {
                "student_id": en.user_id,
                "student_name": display_name(en.user),
                "student_email": en.user.email,
                "enrollment_id": en.id,
                "is_active": en.is_active,
                "expires_at": en.expires_at,
                "teacher_notes": en.teacher_notes,
                "grades": grades,
            }
        )
    return {
        "columns": [{"id": l.id, "title": l.title, "type": l.type} for l in lessons],
        "rows": rows,
    }
