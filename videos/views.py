from django.conf import settings
from rest_framework import status, views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .jobs import Outcome
from .models import VideoRecord
from .orchestrator import build_orchestrator
from .s3 import object_url
from .serializers import VideoRecordSerializer
from .status import StatusStore

OUTCOME_RESPONSES = {
    Outcome.COMPLETED: (status.HTTP_200_OK, "Processing finished successfully"),
    Outcome.BAD_INPUT: (status.HTTP_400_BAD_REQUEST, "Bad Request: missing or malformed notification."),
    Outcome.DUPLICATE: (status.HTTP_409_CONFLICT, "Video already processing or processed."),
    Outcome.FAILED: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Processing failed"),
}


class ProcessVideoView(views.APIView):
    """
    Push endpoint for "raw video uploaded" notifications. Runs the whole job
    inside the request and answers with the outcome, so the push subscription
    only redelivers on a 5xx.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        outcome = build_orchestrator().handle(request.data)
        code, detail = OUTCOME_RESPONSES[outcome]
        return Response({"outcome": outcome.value, "detail": detail}, status=code)


class VideoDetailView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, video_id):
        record = StatusStore().get(video_id)
        if record is None:
            return Response({"detail": "Not found"}, status=404)

        data = VideoRecordSerializer(record).data
        data["video_url"] = None
        data["thumbnail_url"] = None
        if record.status == VideoRecord.Status.PROCESSED:
            data["video_url"] = object_url(settings.PROCESSED_VIDEO_BUCKET, record.filename)
            if record.thumbnail:
                data["thumbnail_url"] = object_url(settings.THUMBNAIL_BUCKET, record.thumbnail)
        return Response(data)
