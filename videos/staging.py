import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from django.conf import settings

logger = logging.getLogger(__name__)


class StagingArea:
    """
    Local scratch directories that hand files between the object store and
    ffmpeg: raw downloads, processed outputs and thumbnails.
    """

    def __init__(self, raw_dir, processed_dir, thumbnail_dir):
        self.raw_dir = Path(raw_dir)
        self.processed_dir = Path(processed_dir)
        self.thumbnail_dir = Path(thumbnail_dir)

    @classmethod
    def from_settings(cls) -> "StagingArea":
        return cls(settings.RAW_VIDEO_DIR, settings.PROCESSED_VIDEO_DIR, settings.THUMBNAIL_DIR)

    def setup(self):
        for directory in (self.raw_dir, self.processed_dir, self.thumbnail_dir):
            if not directory.exists():
                directory.mkdir(parents=True, exist_ok=True)
                logger.info("Directory created at %s", directory)

    def raw_path(self, name: str) -> Path:
        return self.raw_dir / name

    def processed_path(self, name: str) -> Path:
        return self.processed_dir / name

    def thumbnail_path(self, name: str) -> Path:
        return self.thumbnail_dir / name

    def delete(self, *paths: Path):
        """Delete files in parallel. Missing files are skipped, failures are logged."""
        if len(paths) <= 1:
            for path in paths:
                _delete_file(path)
            return
        with ThreadPoolExecutor(max_workers=len(paths)) as pool:
            list(pool.map(_delete_file, paths))


def _delete_file(path: Path):
    path = Path(path)
    try:
        if not path.exists():
            logger.info("File not found at %s, skipping delete", path)
            return
        path.unlink(missing_ok=True)
    except OSError:
        # runs from finally blocks; must not mask the error being handled
        logger.warning("Failed to delete file at %s", path, exc_info=True)
        return
    logger.info("File deleted at %s", path)
