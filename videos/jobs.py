import enum
from dataclasses import dataclass

PROCESSED_PREFIX = "processed-"
THUMBNAIL_EXTENSION = ".png"


class Outcome(str, enum.Enum):
    COMPLETED = "completed"
    BAD_INPUT = "bad_input"
    DUPLICATE = "duplicate"
    FAILED = "failed"


def video_id_for(file_name: str) -> str:
    """'abc123-user1.mp4' -> 'abc123-user1' (everything before the first dot)."""
    return file_name.split(".", 1)[0]


def owner_id_for(video_id: str) -> str:
    """'abc123-user1' -> 'abc123'."""
    return video_id.split("-", 1)[0]


@dataclass(frozen=True)
class VideoJob:
    input_file_name: str
    video_id: str
    owner_id: str
    output_file_name: str
    thumbnail_name: str

    @classmethod
    def from_file_name(cls, file_name: str) -> "VideoJob":
        video_id = video_id_for(file_name)
        return cls(
            input_file_name=file_name,
            video_id=video_id,
            owner_id=owner_id_for(video_id),
            output_file_name=f"{PROCESSED_PREFIX}{file_name}",
            thumbnail_name=f"{video_id}{THUMBNAIL_EXTENSION}",
        )
