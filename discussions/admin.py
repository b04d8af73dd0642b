from django.contrib import admin

from .models import DiscussionReply, DiscussionTopic


@admin.register(DiscussionTopic)
class DiscussionTopicAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "user", "created_at")
    search_fields = ("title", "content", "course__title")


@admin.register(DiscussionReply)
class DiscussionReplyAdmin(admin.ModelAdmin):
    list_display = ("topic", "user", "created_at")
    search_fields = ("content",)
