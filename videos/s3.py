import logging
import mimetypes

import boto3
from botocore.config import Config as BotoConfig
from django.conf import settings

logger = logging.getLogger(__name__)


def get_s3_client():
    """
    SDK client for server-side upload/download.
    """
    session = boto3.session.Session(
        aws_access_key_id=settings.S3_ACCESS_KEY,
        aws_secret_access_key=settings.S3_SECRET_KEY,
        region_name=settings.S3_REGION,
    )
    return session.client(
        "s3",
        endpoint_url=settings.S3_ENDPOINT_URL,  # e.g. http://127.0.0.1:9000
        config=BotoConfig(
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        ),
    )


def content_type_for(name: str) -> str | None:
    mime, _ = mimetypes.guess_type(name)
    return mime


def object_url(bucket: str, key: str) -> str:
    """
    Direct object URL against the PUBLIC endpoint. Only meaningful for
    objects that were made public.
    """
    return f"{settings.S3_PUBLIC_ENDPOINT}/{bucket}/{key}"


class ObjectStore:
    """
    Bucket operations used by the pipeline. Errors are botocore's
    (ClientError, BotoCoreError) and are left to the caller.
    """

    def __init__(self, client=None, public_acl: str | None = None):
        self._client = client
        # canned ACL for make_public; empty means the bucket policy grants read
        self.public_acl = settings.S3_PUBLIC_ACL if public_acl is None else public_acl

    @property
    def client(self):
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    def download(self, bucket: str, key: str, local_path):
        self.client.download_file(bucket, key, str(local_path))
        logger.info("s3://%s/%s downloaded to %s", bucket, key, local_path)

    def upload(self, bucket: str, local_path, key: str, content_type: str | None = None):
        """
        Upload a single file with an optional Content-Type (guessed from the key
        when not given).
        """
        content_type = content_type or content_type_for(key)
        extra = {}
        if content_type:
            extra["ContentType"] = content_type
        self.client.upload_file(str(local_path), bucket, key, ExtraArgs=extra or None)
        logger.info("%s uploaded to s3://%s/%s", local_path, bucket, key)

    def make_public(self, bucket: str, key: str):
        """
        Expose an object for anonymous reads. MinIO and AWS buckets with
        BucketOwnerEnforced reject object ACLs, so by default this relies on a
        bucket policy and does nothing. Set S3_PUBLIC_ACL (e.g. "public-read")
        for stores that still honor ACLs.
        """
        if not self.public_acl:
            return
        self.client.put_object_acl(Bucket=bucket, Key=key, ACL=self.public_acl)

    def delete(self, bucket: str, key: str):
        self.client.delete_object(Bucket=bucket, Key=key)
        logger.info("s3://%s/%s deleted", bucket, key)
