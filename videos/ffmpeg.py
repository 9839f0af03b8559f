import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from django.conf import settings

logger = logging.getLogger(__name__)


class EngineError(Exception):
    """ffmpeg/ffprobe could not complete the requested operation."""


@dataclass(frozen=True)
class TranscodeOptions:
    codec: str = "libx264"
    pixel_format: str = "yuv420p"
    max_height: int | None = None  # None keeps the source resolution
    preset: str = "veryfast"
    crf: int = 23
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"

    def video_filter(self) -> str:
        filters = []
        if self.max_height:
            # -2 keeps the aspect ratio and an even width, which libx264 requires
            filters.append(f"scale=-2:{self.max_height}")
        filters.append(f"format={self.pixel_format}")
        return ",".join(filters)


class FFmpegEngine:
    def __init__(self, ffmpeg: str = "ffmpeg", ffprobe: str = "ffprobe", timeout: float | None = None):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "FFmpegEngine":
        return cls(
            ffmpeg=settings.FFMPEG_BINARY,
            ffprobe=settings.FFPROBE_BINARY,
            timeout=settings.FFMPEG_TIMEOUT_SECONDS,
        )

    def _run(self, cmd: list[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                cmd,
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            err = e.stderr.decode("utf-8", errors="ignore") if e.stderr else str(e)
            raise EngineError(f"{cmd[0]} exited with {e.returncode}: {err[-2000:]}") from e
        except subprocess.TimeoutExpired as e:
            raise EngineError(f"{cmd[0]} timed out after {e.timeout}s") from e
        except FileNotFoundError as e:
            raise EngineError(f"{cmd[0]} not found") from e

    def probe(self, input_abs: Path) -> dict:
        """
        Return properties of the first video stream:
        {"height", "width", "codec", "duration"}. Missing values are 0/None.
        """
        cmd = [
            self.ffprobe,
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height,codec_name:format=duration",
            "-of", "json",
            str(input_abs),
        ]
        proc = self._run(cmd)
        try:
            data = json.loads(proc.stdout or b"{}")
        except ValueError as e:
            raise EngineError(f"Unreadable ffprobe output for {input_abs}") from e

        streams = data.get("streams") or [{}]
        stream = streams[0]
        duration = (data.get("format") or {}).get("duration")
        return {
            "height": int(stream.get("height") or 0),
            "width": int(stream.get("width") or 0),
            "codec": stream.get("codec_name"),
            "duration": float(duration) if duration else None,
        }

    def extract_frame(self, input_abs: Path, offset_seconds: float, out_abs: Path):
        """Write the single frame found `offset_seconds` into the source."""
        cmd = [
            self.ffmpeg,
            "-y",
            "-i", str(input_abs),
            "-ss", f"{offset_seconds:g}",
            "-frames:v", "1",
            str(out_abs),
        ]
        self._run(cmd)
        logger.info("Frame at %ss of %s written to %s", f"{offset_seconds:g}", input_abs, out_abs)

    def transcode(self, input_abs: Path, out_abs: Path, options: TranscodeOptions):
        cmd = [
            self.ffmpeg,
            "-y",
            "-i", str(input_abs),
            "-vf", options.video_filter(),
            "-c:v", options.codec,
            "-preset", options.preset,
            "-crf", str(options.crf),
            "-c:a", options.audio_codec,
            "-b:a", options.audio_bitrate,
            str(out_abs),
        ]
        self._run(cmd)
        logger.info("Transcoded %s to %s", input_abs, out_abs)
