"""
Drives one video through the pipeline:

    claim -> download -> thumbnail (best-effort) -> probe + transcode
          -> publish -> mark processed -> clean staging

Only the transcode is allowed to fail the run quietly (Outcome.FAILED).
Thumbnail problems are logged and ignored. Anything else (download, publish,
status writes) is re-raised after the record is marked failed and staging is
emptied.
"""
import logging
from dataclasses import dataclass

from django.conf import settings

from .ffmpeg import EngineError, FFmpegEngine, TranscodeOptions
from .jobs import Outcome, VideoJob
from .s3 import ObjectStore
from .serializers import NotificationSerializer
from .staging import StagingArea
from .status import StatusStore
from .thumbnails import fit_thumbnail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    raw_bucket: str
    processed_bucket: str
    thumbnail_bucket: str
    thumbnail_offset_seconds: float = 3.0
    thumbnail_max_size: tuple[int, int] = (1280, 720)
    max_output_height: int = 720
    video_codec: str = "libx264"
    pixel_format: str = "yuv420p"
    preset: str = "veryfast"
    crf: int = 23

    @classmethod
    def from_settings(cls) -> "PipelineConfig":
        return cls(
            raw_bucket=settings.RAW_VIDEO_BUCKET,
            processed_bucket=settings.PROCESSED_VIDEO_BUCKET,
            thumbnail_bucket=settings.THUMBNAIL_BUCKET,
            thumbnail_offset_seconds=settings.THUMBNAIL_OFFSET_SECONDS,
            thumbnail_max_size=tuple(settings.THUMBNAIL_MAX_SIZE),
            max_output_height=settings.MAX_OUTPUT_HEIGHT,
            video_codec=settings.VIDEO_CODEC,
            pixel_format=settings.PIXEL_FORMAT,
            preset=settings.VIDEO_PRESET,
            crf=settings.VIDEO_CRF,
        )


class TranscodeOrchestrator:
    def __init__(self, *, storage, engine, status: StatusStore, staging: StagingArea, config: PipelineConfig):
        self.storage = storage
        self.engine = engine
        self.status = status
        self.staging = staging
        self.config = config

    def handle(self, notification) -> Outcome:
        """Validate a push notification and run the job it names."""
        ser = NotificationSerializer(data=notification)
        if not ser.is_valid():
            logger.warning("Rejected notification: %s", ser.errors)
            return Outcome.BAD_INPUT
        return self.run(ser.validated_data["name"])

    def run(self, file_name: str) -> Outcome:
        job = VideoJob.from_file_name(file_name)

        if not self.status.claim(job.video_id, job.owner_id):
            return Outcome.DUPLICATE

        raw = self.staging.raw_path(job.input_file_name)
        processed = self.staging.processed_path(job.output_file_name)
        thumbnail = self.staging.thumbnail_path(job.thumbnail_name)
        try:
            self.staging.setup()
            self.storage.download(self.config.raw_bucket, job.input_file_name, raw)

            self._make_thumbnail(job)

            try:
                self._transcode(raw, processed)
            except EngineError as e:
                logger.error("Processing failed for %s: %s", job.video_id, e)
                self.status.mark_failed(job.video_id, str(e))
                return Outcome.FAILED

            self.storage.upload(self.config.processed_bucket, processed, job.output_file_name)
            self.storage.make_public(self.config.processed_bucket, job.output_file_name)

            self.status.mark_processed(job.video_id, job.output_file_name, job.thumbnail_name)
            logger.info("Video %s processed as %s", job.video_id, job.output_file_name)
            return Outcome.COMPLETED
        except Exception as e:
            logger.exception("Unexpected failure while processing %s", job.video_id)
            self._record_failure(job, e)
            raise
        finally:
            self.staging.delete(raw, processed, thumbnail)

    def _make_thumbnail(self, job: VideoJob):
        raw = self.staging.raw_path(job.input_file_name)
        local = self.staging.thumbnail_path(job.thumbnail_name)
        try:
            self.engine.extract_frame(raw, self.config.thumbnail_offset_seconds, local)
            fit_thumbnail(local, self.config.thumbnail_max_size)
            self._publish_thumbnail(job.thumbnail_name, local)
        except Exception:
            logger.warning("Could not make thumbnail for %s", job.video_id, exc_info=True)
        finally:
            self.staging.delete(local)

    def _publish_thumbnail(self, name: str, local):
        bucket = self.config.thumbnail_bucket
        self.storage.upload(bucket, local, name)
        try:
            self.storage.make_public(bucket, name)
        except Exception:
            # a private thumbnail is unreachable, remove it
            try:
                self.storage.delete(bucket, name)
            except Exception:
                logger.warning("Could not remove unpublished thumbnail s3://%s/%s", bucket, name, exc_info=True)
            raise

    def _transcode(self, raw, processed):
        info = self.engine.probe(raw)
        height = info.get("height") or 0
        limit = self.config.max_output_height
        options = TranscodeOptions(
            codec=self.config.video_codec,
            pixel_format=self.config.pixel_format,
            max_height=limit if height > limit else None,
            preset=self.config.preset,
            crf=self.config.crf,
        )
        self.engine.transcode(raw, processed, options)

    def _record_failure(self, job: VideoJob, error: Exception):
        try:
            self.status.mark_failed(job.video_id, str(error) or type(error).__name__)
        except Exception:
            logger.exception("Failed to update error status for video %s", job.video_id)


def build_orchestrator() -> TranscodeOrchestrator:
    """
    Wire the production clients. Construction touches neither the network nor
    the filesystem: the S3 client is created on first use and the staging
    directories when a job is claimed.
    """
    return TranscodeOrchestrator(
        storage=ObjectStore(),
        engine=FFmpegEngine.from_settings(),
        status=StatusStore(),
        staging=StagingArea.from_settings(),
        config=PipelineConfig.from_settings(),
    )
