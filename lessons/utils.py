from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.utils import timezone

from .models import AssignmentSubmission, Lesson, LessonType, Submission

logger = logging.getLogger(__name__)


def percent(part: int, whole: int) -> int:
    """Integer percentage rounded half-up; 0 when `whole` is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def grade_quiz(lesson: Lesson, answers: dict[Any, Any]) -> dict[str, Any]:
    """Grade a quiz lesson.

    - lesson: the Lesson instance (type must be 'quiz')
    - answers: mapping of question_id -> chosen option text

    Returns: { 'total': int, 'correct': int, 'score': int, 'per_question': {qid: bool} }
    """
    assert lesson.type == LessonType.QUIZ, "grade_quiz only supports quiz lessons"
    # JSON bodies deliver keys as strings
    chosen = {str(k): v for k, v in (answers or {}).items()}
    questions = list(lesson.questions.all())
    per_question: dict[int, bool] = {}
    correct = 0
    for q in questions:
        answer = chosen.get(str(q.id))
        ok = answer is not None and str(answer) == q.correct_answer
        per_question[q.id] = ok
        if ok:
            correct += 1
    total = len(questions)
    return {"total": total, "correct": correct, "score": percent(correct, total), "per_question": per_question}


def record_quiz_submission(user, lesson: Lesson, answers: dict[Any, Any]) -> tuple[Submission, dict[str, Any]]:
    result = grade_quiz(lesson, answers)
    submission = Submission.objects.create(user=user, lesson=lesson, score=result["score"])
    logger.info("Quiz %s submitted by user %s: %s%%", lesson.pk, user.pk, result["score"])
    return submission, result


def mark_complete(user, lesson: Lesson) -> tuple[Submission, bool]:
    """Record a non-graded completion once; repeated calls are no-ops."""
    assert not lesson.is_gradable, "mark_complete only supports non-graded lessons"
    existing = Submission.objects.filter(user=user, lesson=lesson).first()
    if existing is not None:
        return existing, False
    return Submission.objects.create(user=user, lesson=lesson, score=100), True


def submit_assignment(user, lesson: Lesson, upload) -> tuple[AssignmentSubmission, bool]:
    """Store (or replace) the user's file for an assignment lesson.

    A replacement clears any previous grade: it belonged to the old file.
    """
    assert lesson.type == LessonType.ASSIGNMENT, "submit_assignment only supports assignment lessons"
    with transaction.atomic():
        submission, created = AssignmentSubmission.objects.select_for_update().get_or_create(
            user=user,
            lesson=lesson,
            defaults={"file": upload},
        )
        if not created:
            submission.file = upload
            submission.submitted_at = timezone.now()
            submission.grade = None
            submission.graded_at = None
            submission.save(update_fields=["file", "submitted_at", "grade", "graded_at"])
    logger.info("Assignment %s %s by user %s", lesson.pk, "submitted" if created else "resubmitted", user.pk)
    return submission, created


def grade_assignment(submission: AssignmentSubmission, grade: int, feedback: str = "") -> AssignmentSubmission:
    submission.grade = grade
    submission.feedback = feedback or ""
    submission.graded_at = timezone.now()
    submission.save(update_fields=["grade", "feedback", "graded_at"])
    logger.info("Assignment submission %s graded %s", submission.pk, grade)
    return submission
