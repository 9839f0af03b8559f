import pytest

from videos.serializers import MAX_NAME_BYTES, NotificationSerializer

from tests.conftest import make_notification


def test_base64_message_is_decoded():
    ser = NotificationSerializer(data=make_notification("abc123-user1.mp4", bucket="raw-videos"))
    assert ser.is_valid(), ser.errors
    assert ser.validated_data["name"] == "abc123-user1.mp4"


def test_plain_json_message_is_accepted():
    ser = NotificationSerializer(data=make_notification("abc123-user1.mp4", encode=False))
    assert ser.is_valid(), ser.errors
    assert ser.validated_data["name"] == "abc123-user1.mp4"


@pytest.mark.parametrize(
    "notification",
    [
        None,
        [],
        {},
        {"message": {}},
        {"message": {"data": ""}},
        {"message": {"data": "%%%"}},
        {"message": {"data": "e25vdCBqc29u"}},  # base64 of "{not json"
        make_notification(),
        make_notification(""),
        make_notification(42),
        make_notification("uploads/abc.mp4"),
        make_notification(".mp4"),
    ],
)
def test_malformed_notifications_are_invalid(notification):
    assert not NotificationSerializer(data=notification).is_valid()


def test_json_array_payload_is_invalid():
    ser = NotificationSerializer(data={"message": {"data": "WyJhYmMubXA0Il0="}})  # ["abc.mp4"]
    assert not ser.is_valid()


def test_name_that_cannot_be_staged_is_invalid():
    ser = NotificationSerializer(data=make_notification("a" * 300 + ".mp4"))

    assert not ser.is_valid()


def test_name_length_is_counted_in_bytes():
    # 123 two-byte characters + ".mp4" is 250 bytes but only 127 characters
    assert not NotificationSerializer(data=make_notification("é" * 123 + ".mp4")).is_valid()


def test_longest_stageable_name_is_valid():
    name = "a" * (MAX_NAME_BYTES - 4) + ".mp4"

    ser = NotificationSerializer(data=make_notification(name))

    assert ser.is_valid(), ser.errors
    assert len(("processed-" + name).encode()) == 255
