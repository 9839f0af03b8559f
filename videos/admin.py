from django.contrib import admin

from .models import VideoRecord


@admin.register(VideoRecord)
class VideoRecordAdmin(admin.ModelAdmin):
    list_display = ("id", "uid", "status", "filename", "updated_at")
    list_filter = ("status",)
    search_fields = ("id", "uid")
    readonly_fields = ("created_at", "updated_at")
