"""Course progress.

A lesson counts as completed as soon as the user has *any* Submission or
AssignmentSubmission for it, regardless of quiz score or grading state.
Only lessons visible to the user count: an assignment whose allow-list
excludes them is not part of their course.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from courses.models import Course, CourseFeedback, Enrollment
from .models import AssignmentSubmission, Lesson, Submission
from .utils import percent


@dataclass(frozen=True)
class Progress:
    total_lessons: int
    completed_lessons: int

    @property
    def percentage(self) -> int:
        # An empty course is never reported as complete
        return percent(self.completed_lessons, self.total_lessons)

    @property
    def is_complete(self) -> bool:
        return self.total_lessons > 0 and self.completed_lessons >= self.total_lessons


def completed_lesson_ids(user, lesson_ids: Iterable[int]) -> set[int]:
    """Distinct lessons among `lesson_ids` with at least one artifact from `user`."""
    ids = list(lesson_ids)
    if not ids:
        return set()
    done = set(Submission.objects.filter(user=user, lesson_id__in=ids).values_list("lesson_id", flat=True))
    done.update(AssignmentSubmission.objects.filter(user=user, lesson_id__in=ids).values_list("lesson_id", flat=True))
    return done


def visible_lesson_ids(user, lessons: Iterable[Lesson]) -> list[int]:
    return [lesson.id for lesson in lessons if lesson.is_visible_to(user)]


def compute_progress(user, course: Course) -> Progress:
    lessons = Lesson.objects.filter(course=course).only("id", "type", "target_students")
    lesson_ids = visible_lesson_ids(user, lessons)
    return Progress(
        total_lessons=len(lesson_ids),
        completed_lessons=len(completed_lesson_ids(user, lesson_ids)),
    )


def student_dashboard(user) -> list[dict]:
    """One progress row per enrollment of `user`, in a fixed number of queries."""
    enrollments = list(Enrollment.objects.filter(user=user).select_related("course").order_by("enrolled_at", "id"))
    course_ids = [e.course_id for e in enrollments]
    lessons_by_course: dict[int, list[int]] = defaultdict(list)
    lessons = Lesson.objects.filter(course_id__in=course_ids).only("id", "course", "type", "target_students")
    for lesson in lessons:
        if lesson.is_visible_to(user):
            lessons_by_course[lesson.course_id].append(lesson.id)
    all_lesson_ids = [lid for ids in lessons_by_course.values() for lid in ids]
    done = completed_lesson_ids(user, all_lesson_ids)
    rated = set(CourseFeedback.objects.filter(user=user, course_id__in=course_ids).values_list("course_id", flat=True))

    rows = []
    for en in enrollments:
        course = en.course
        lesson_ids = lessons_by_course.get(course.id, [])
        progress = Progress(total_lessons=len(lesson_ids), completed_lessons=len(done.intersection(lesson_ids)))
        rows.append(
            {
                "course_id": course.id,
                "title": course.title,
                "thumbnail_url": course.thumbnail_url,
                "total_lessons": progress.total_lessons,
                "completed_lessons": progress.completed_lessons,
                "progress_percentage": progress.percentage,
                "expires_at": en.expires_at,
                "is_active": en.is_active,
                # Prompt for feedback once, after completion
                "feedback_due": progress.is_complete and course.id not in rated,
            }
        )
    return rows
