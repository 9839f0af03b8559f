from celery import shared_task

from .orchestrator import build_orchestrator


@shared_task(bind=True)
def process_video(self, notification: dict) -> str:
    """
    Broker-delivered counterpart of POST /process-video. Takes the same push
    envelope and returns the outcome value. Unexpected errors propagate so
    the task is recorded as failed.
    """
    return build_orchestrator().handle(notification).value
