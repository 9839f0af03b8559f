import base64
import json

import pytest
from PIL import Image

from videos.ffmpeg import EngineError
from videos.orchestrator import PipelineConfig, TranscodeOrchestrator
from videos.staging import StagingArea
from videos.status import StatusStore


def make_notification(name=None, *, encode=True, **payload):
    if name is not None:
        payload["name"] = name
    data = json.dumps(payload)
    if encode:
        data = base64.b64encode(data.encode("utf-8")).decode("ascii")
    return {"message": {"data": data, "messageId": "1"}, "subscription": "projects/p/subscriptions/s"}


class FakeObjectStore:
    """Records every call; `fail` maps (operation, bucket) to an exception to raise."""

    def __init__(self):
        self.calls = []
        self.fail = {}

    def _maybe_fail(self, op, bucket):
        exc = self.fail.get((op, bucket))
        if exc is not None:
            raise exc

    def download(self, bucket, key, local_path):
        self.calls.append(("download", bucket, key))
        self._maybe_fail("download", bucket)
        local_path.write_bytes(b"raw video bytes")

    def upload(self, bucket, local_path, key, content_type=None):
        self.calls.append(("upload", bucket, key))
        assert local_path.exists()
        self._maybe_fail("upload", bucket)

    def make_public(self, bucket, key):
        self.calls.append(("make_public", bucket, key))
        self._maybe_fail("make_public", bucket)

    def delete(self, bucket, key):
        self.calls.append(("delete", bucket, key))

    def ops(self, op):
        return [call for call in self.calls if call[0] == op]


class FakeEngine:
    def __init__(self, height=1080):
        self.height = height
        self.calls = []
        self.fail_probe = False
        self.fail_frame = False
        self.fail_transcode = False

    def probe(self, input_abs):
        self.calls.append(("probe", input_abs))
        if self.fail_probe:
            raise EngineError("ffprobe exited with 1: moov atom not found")
        return {"height": self.height, "width": self.height * 16 // 9, "codec": "h264", "duration": 12.0}

    def extract_frame(self, input_abs, offset_seconds, out_abs):
        self.calls.append(("extract_frame", input_abs, offset_seconds, out_abs))
        if self.fail_frame:
            raise EngineError("ffmpeg exited with 1: Output file is empty")
        Image.new("RGB", (1920, 1080), (10, 20, 30)).save(out_abs, format="PNG")

    def transcode(self, input_abs, out_abs, options):
        self.calls.append(("transcode", input_abs, out_abs, options))
        # a real failed run usually leaves a truncated output behind
        out_abs.write_bytes(b"partial")
        if self.fail_transcode:
            raise EngineError("ffmpeg exited with 1: Invalid data found when processing input")


@pytest.fixture
def staging(tmp_path):
    area = StagingArea(tmp_path / "raw-videos", tmp_path / "processed-videos", tmp_path / "thumbnails")
    area.setup()
    return area


@pytest.fixture
def storage():
    return FakeObjectStore()


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def pipeline_config():
    return PipelineConfig(
        raw_bucket="raw-videos",
        processed_bucket="processed-videos",
        thumbnail_bucket="video-thumbnails",
    )


@pytest.fixture
def orchestrator(storage, engine, staging, pipeline_config):
    return TranscodeOrchestrator(
        storage=storage,
        engine=engine,
        status=StatusStore(),
        staging=staging,
        config=pipeline_config,
    )


def staged_files(area):
    return [p for d in (area.raw_dir, area.processed_dir, area.thumbnail_dir) for p in d.iterdir()]
