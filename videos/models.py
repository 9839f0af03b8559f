from django.db import models


class VideoRecord(models.Model):
    class Status(models.TextChoices):
        NEW = "new"
        PROCESSING = "processing"
        PROCESSED = "processed"
        FAILED = "failed"

    # Claims are refused while a record sits in one of these
    ACTIVE_STATUSES = (Status.PROCESSING, Status.PROCESSED)

    id = models.CharField(primary_key=True, max_length=255)      # video id, derived from the raw file name
    uid = models.CharField(max_length=255, blank=True, default="")  # owner id
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.NEW)
    filename = models.CharField(max_length=512, blank=True, default="")   # processed output name
    thumbnail = models.CharField(max_length=512, blank=True, default="")
    error = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.id} ({self.status})"
