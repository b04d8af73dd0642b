from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from courses.models import Course


class LessonType(models.TextChoices):
    VIDEO = "video", "Video"
    PDF = "pdf", "PDF"
    TEXT = "text", "Text"
    QUIZ = "quiz", "Quiz"
    ASSIGNMENT = "assignment", "Assignment"


# Lesson types that produce a scored artifact
GRADABLE_TYPES = (LessonType.QUIZ, LessonType.ASSIGNMENT)


class Lesson(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="lessons")
    title = models.CharField(max_length=200)
    type = models.CharField(max_length=16, choices=LessonType.choices)
    # Video URL, uploaded document path, or the text body itself
    content_url = models.TextField(blank=True)
    position = models.IntegerField(default=0)
    due_date = models.DateTimeField(null=True, blank=True)
    # Allow-list of user ids for assignment lessons; null/empty = everyone.
    # Validated on write by the lesson serializer.
    target_students = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self) -> str:
        return f"{self.title} ({self.get_type_display()})"

    @property
    def is_gradable(self) -> bool:
        return self.type in GRADABLE_TYPES

    @property
    def audience(self) -> frozenset[int]:
        return frozenset(self.target_students or ())

    def is_visible_to(self, user) -> bool:
        """Assignment allow-lists restrict visibility; every other lesson is open."""
        if self.type != LessonType.ASSIGNMENT or not self.audience:
            return True
        return user.id in self.audience


class Question(models.Model):
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name="questions")
    order = models.PositiveSmallIntegerField(default=0)
    text = models.TextField()
    options = models.JSONField(default=list)
    correct_answer = models.CharField(max_length=500)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self) -> str:
        return f"Q{self.order}: {self.text[:40]}"


class Submission(models.Model):
    """A completion record: a quiz attempt, or a plain "done" marker (score 100).

    Many per (user, lesson); the gradebook reports the best quiz score.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="submissions")
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name="submissions")
    score = models.PositiveSmallIntegerField()
    completed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-completed_at"]
        indexes = [
            models.Index(fields=["lesson", "user"], name="submission_lesson_user_idx"),
        ]

    def __str__(self) -> str:
        return f"Submission {self.user_id}/{self.lesson_id}: {self.score}"


class AssignmentSubmission(models.Model):
    """The uploaded work for an assignment lesson; one per (user, lesson).

    `grade` stays null until a teacher grades it ("not graded" differs from 0).
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="assignment_submissions")
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name="assignment_submissions")
    file = models.FileField(upload_to="assignment_submissions/")
    grade = models.PositiveSmallIntegerField(null=True, blank=True)
    feedback = models.TextField(blank=True)
    submitted_at = models.DateTimeField(default=timezone.now)
    graded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "lesson"], name="unique_assignment_submission_per_user_lesson"),
        ]
        ordering = ["-submitted_at"]

    def __str__(self) -> str:
        return f"AssignmentSubmission {self.user_id}/{self.lesson_id}: {self.grade}"
