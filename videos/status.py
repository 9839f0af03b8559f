import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from .models import VideoRecord

logger = logging.getLogger(__name__)


class StatusStore:
    """
    Reads and writes a video's processing status record.

    Records are keyed by video id. `set` merges: only the fields passed in
    are written, everything else on an existing record is left alone.
    """

    def get(self, video_id: str) -> VideoRecord | None:
        return VideoRecord.objects.filter(pk=video_id).first()

    def set(self, video_id: str, **fields) -> VideoRecord:
        record, _ = VideoRecord.objects.update_or_create(pk=video_id, defaults=fields)
        return record

    def claim(self, video_id: str, owner_id: str) -> bool:
        """
        Mark the video as processing unless another run already owns it.

        Returns True when this caller now holds the claim. The insert and the
        conditional update are both single statements, so two concurrent
        callers for the same id cannot both succeed.
        """
        try:
            with transaction.atomic():
                VideoRecord.objects.create(
                    id=video_id, uid=owner_id, status=VideoRecord.Status.PROCESSING
                )
            return True
        except IntegrityError:
            pass

        updated = (
            VideoRecord.objects.filter(pk=video_id)
            .exclude(status__in=VideoRecord.ACTIVE_STATUSES)
            .update(
                uid=owner_id,
                status=VideoRecord.Status.PROCESSING,
                error="",
                updated_at=timezone.now(),
            )
        )
        if not updated:
            logger.info("Video %s is already processing or processed", video_id)
        return updated == 1

    def mark_processed(self, video_id: str, filename: str, thumbnail: str) -> VideoRecord:
        return self.set(
            video_id,
            status=VideoRecord.Status.PROCESSED,
            filename=filename,
            thumbnail=thumbnail,
        )

    def mark_failed(self, video_id: str, error: str) -> VideoRecord:
        return self.set(video_id, status=VideoRecord.Status.FAILED, error=error[:4000])
