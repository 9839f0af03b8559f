from django.urls import path
from .views import ProcessVideoView, VideoDetailView

urlpatterns = [
    path("process-video", ProcessVideoView.as_view(), name="process_video"),
    path("videos/<str:video_id>/", VideoDetailView.as_view(), name="video_detail"),
]
