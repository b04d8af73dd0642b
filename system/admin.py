from django.contrib import admin

from .flags import invalidate_flags
from .models import SystemSetting


@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "description")
    list_editable = ("value",)

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        # Edits made here bypass update_flags; drop the cached snapshot too
        invalidate_flags()

    def delete_model(self, request, obj):
        super().delete_model(request, obj)
        invalidate_flags()
