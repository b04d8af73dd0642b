from django.contrib import admin

from .models import Certificate, Course, CourseFeedback, Enrollment


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "access_days", "created_at")
    search_fields = ("title", "description", "owner__username", "owner__email")


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("course", "user", "is_active", "enrolled_at", "expires_at")
    list_filter = ("is_active",)
    search_fields = ("course__title", "user__username", "user__email")


@admin.register(CourseFeedback)
class CourseFeedbackAdmin(admin.ModelAdmin):
    list_display = ("course", "user", "rating", "created_at")
    list_filter = ("rating",)


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ("unique_id", "user", "course", "issued_at")
    search_fields = ("unique_id", "user__email", "course__title")
