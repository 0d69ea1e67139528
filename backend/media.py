"""
Media upload gateway.

Stores image blobs in an S3-compatible space (DigitalOcean Spaces by
default) and hands back the public URL. The configured upload preset is
used as the key prefix of every object; nothing about the blob itself is
checked before it is sent.
"""
import logging
import os
import uuid

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from errors import UploadError

log = logging.getLogger(__name__)


class MediaStore:

    def __init__(self, client, bucket, upload_preset="trees", public_base_url=None):
        self.client = client
        self.bucket = bucket
        self.upload_preset = upload_preset
        self.public_base_url = (public_base_url or "").rstrip("/")

    @classmethod
    def from_settings(cls, settings):
        endpoint = settings.media_endpoint_url or f"https://{settings.region}.digitaloceanspaces.com"
        session = boto3.session.Session()
        client = session.client(
            "s3",
            region_name=settings.region,
            endpoint_url=endpoint,
            aws_access_key_id=settings.access_key,
            aws_secret_access_key=settings.secret_key,
            config=Config(signature_version="s3v4"),
        )
        public_url = settings.media_public_url or \
            f"https://{settings.space_name}.{settings.region}.digitaloceanspaces.com"
        return cls(client, settings.space_name, settings.upload_preset, public_url)

    def store(self, blob, filename=None, content_type=None):
        """Upload ``blob`` (bytes or a file object) and return its public URL."""
        key = self._key(filename)
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": blob,
            "ACL": "public-read",
        }
        if content_type:
            params["ContentType"] = content_type
        try:
            self.client.put_object(**params)
        except (BotoCoreError, ClientError) as e:
            log.error("Upload of %s failed: %s", key, e)
            raise UploadError(str(e)) from e
        log.info("Uploaded %s to %s", key, self.bucket)
        return f"{self.public_base_url}/{key}"

    def _key(self, filename):
        ext = os.path.splitext(filename or "")[1].lower()
        name = f"{uuid.uuid4().hex}{ext}"
        return f"{self.upload_preset}/{name}" if self.upload_preset else name
