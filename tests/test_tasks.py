import pytest

from videos.jobs import Outcome
from videos.models import VideoRecord
from videos.orchestrator import TranscodeOrchestrator, build_orchestrator
from videos.tasks import process_video

from tests.conftest import make_notification


@pytest.mark.django_db
def test_task_runs_notification_through_orchestrator(monkeypatch, orchestrator):
    monkeypatch.setattr("videos.tasks.build_orchestrator", lambda: orchestrator)

    assert process_video(make_notification("abc123-user1.mp4")) == Outcome.COMPLETED.value
    assert VideoRecord.objects.get(pk="abc123-user1").status == VideoRecord.Status.PROCESSED


def test_task_reports_bad_input(monkeypatch, orchestrator):
    monkeypatch.setattr("videos.tasks.build_orchestrator", lambda: orchestrator)

    assert process_video({"message": {}}) == Outcome.BAD_INPUT.value


def test_build_orchestrator_reads_settings_without_side_effects(settings, tmp_path):
    settings.RAW_VIDEO_DIR = tmp_path / "raw"
    settings.PROCESSED_VIDEO_DIR = tmp_path / "processed"
    settings.THUMBNAIL_DIR = tmp_path / "thumbs"
    settings.MAX_OUTPUT_HEIGHT = 480

    orch = build_orchestrator()

    assert isinstance(orch, TranscodeOrchestrator)
    assert orch.config.max_output_height == 480
    assert orch.config.raw_bucket == settings.RAW_VIDEO_BUCKET
    assert orch.staging.raw_dir == tmp_path / "raw"
    assert not (tmp_path / "raw").exists()
    assert orch.storage._client is None
