from django.contrib import admin

from .models import CalendarTask, Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("user", "type", "message", "is_read", "created_at")
    list_filter = ("type", "is_read")
    search_fields = ("message", "user__email")


@admin.register(CalendarTask)
class CalendarTaskAdmin(admin.ModelAdmin):
    list_display = ("user", "title", "date")
    search_fields = ("title", "user__email")
