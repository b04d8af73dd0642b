from django.contrib import admin

from .models import AssignmentSubmission, Lesson, Question, Submission


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "type", "position", "due_date")
    list_filter = ("type", "course")
    search_fields = ("title", "course__title")


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("lesson", "order", "text", "correct_answer")
    list_filter = ("lesson",)
    search_fields = ("text",)


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ("lesson", "user", "score", "completed_at")
    list_filter = ("lesson",)
    search_fields = ("user__username", "user__email")


@admin.register(AssignmentSubmission)
class AssignmentSubmissionAdmin(admin.ModelAdmin):
    list_display = ("lesson", "user", "grade", "submitted_at", "graded_at")
    list_filter = ("lesson",)
    search_fields = ("user__username", "user__email")
