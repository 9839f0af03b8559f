import base64
import binascii
import json

from rest_framework import serializers

from .jobs import PROCESSED_PREFIX, video_id_for
from .models import VideoRecord

# Staged files are named "processed-<name>" and must fit a 255-byte file name
MAX_NAME_BYTES = 255 - len(PROCESSED_PREFIX)


def decode_message_data(raw: str):
    """
    Pub/Sub push delivers `message.data` base64-encoded; plain JSON is
    accepted too (local tooling, direct posts). JSON objects always start with
    '{', which is not a base64 character, so the two never overlap.
    """
    text = raw.strip()
    if not text.startswith("{"):
        try:
            text = base64.b64decode(text, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise serializers.ValidationError("message.data is neither base64 nor JSON.")
    try:
        return json.loads(text)
    except ValueError:
        raise serializers.ValidationError("message.data does not contain valid JSON.")


class PubSubMessageSerializer(serializers.Serializer):
    data = serializers.CharField()
    messageId = serializers.CharField(required=False)
    attributes = serializers.DictField(child=serializers.CharField(), required=False)


class NotificationSerializer(serializers.Serializer):
    """
    Validates a push envelope: {"message": {"data": ...}, "subscription": ...}.
    validated_data["name"] holds the raw object's file name.
    """
    message = PubSubMessageSerializer()
    subscription = serializers.CharField(required=False)

    def validate(self, attrs):
        payload = decode_message_data(attrs["message"]["data"])
        if not isinstance(payload, dict):
            raise serializers.ValidationError("Invalid message payload received.")

        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise serializers.ValidationError("Bad Request: missing filename.")
        if "/" in name or "\\" in name:
            raise serializers.ValidationError(f"Object name must be a bare file name: {name!r}")
        if not video_id_for(name):
            raise serializers.ValidationError(f"Cannot derive a video id from {name!r}")
        if len(name.encode("utf-8")) > MAX_NAME_BYTES:
            raise serializers.ValidationError(f"Object name exceeds {MAX_NAME_BYTES} bytes.")

        attrs["name"] = name
        return attrs


class VideoRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = VideoRecord
        fields = [
            "id",
            "uid",
            "status",
            "filename",
            "thumbnail",
            "error",
            "created_at",
            "updated_at",
        ]
