"""
S3ResourceStorage - resource storage on S3/MinIO.
"""

import logging
from mimetypes import guess_type
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from retrying import retry

from .models import Resource
from .resource_storage import content_sha1, public_path
from .s3_config import S3Config


def _is_transient(exception: Exception) -> bool:
    """Retry on S3 errors except missing objects."""
    if not isinstance(exception, ClientError):
        return False
    return exception.response.get('Error', {}).get('Code') not in ('404', 'NoSuchKey', 'NoSuchBucket')


class S3ResourceStorage:
    """
    Content-addressed resource storage on S3/MinIO.

    Objects are stored at '<prefix>/<sha1>'; the display filename and media
    type travel as object metadata.
    """

    def __init__(
        self,
        config: S3Config,
        public_base: str = '/_Resources/Persistent',
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize S3 storage.

        Args:
            config: S3 configuration
            public_base: URL path prefix resources are published under
            logger: Optional logger instance
        """
        self.config = config
        self.public_base = public_base
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def key_for(self, sha1: str) -> str:
        return f"{self.config.prefix}/{sha1}" if self.config.prefix else sha1

    def object_exists(self, key: str) -> bool:
        """Check if an object exists in S3."""
        try:
            self._client.head_object(Bucket=self.config.bucket, Key=key)
            return True
        except ClientError as e:
            if e.response['Error']['Code'] == '404':
                return False
            raise

    @retry(retry_on_exception=_is_transient, stop_max_attempt_number=3, wait_exponential_multiplier=500)
    def import_resource(self, data: bytes, filename: str, media_type: str) -> Resource:
        """Upload data unless an object with the same content already exists."""
        sha1 = content_sha1(data)
        key = self.key_for(sha1)
        if not self.object_exists(key):
            self.logger.debug(f"Uploading: {key}")
            self._client.put_object(
                Bucket=self.config.bucket,
                Key=key,
                Body=data,
                ContentType=media_type,
                Metadata={'filename': filename},
            )
        return Resource(sha1=sha1, filename=filename, media_type=media_type, size=len(data))

    def import_file(self, filepath: str, media_type: Optional[str] = None) -> Resource:
        """Upload a file from disk, guessing the media type from its name."""
        path = Path(filepath)
        media_type = media_type or guess_type(path.name)[0] or 'application/octet-stream'
        return self.import_resource(path.read_bytes(), path.name, media_type)

    @retry(retry_on_exception=_is_transient, stop_max_attempt_number=3, wait_exponential_multiplier=500)
    def get_content(self, resource: Resource) -> bytes:
        """Download the content of a resource."""
        response = self._client.get_object(Bucket=self.config.bucket, Key=self.key_for(resource.sha1))
        return response['Body'].read()

    def public_path_for(self, resource: Resource) -> str:
        return public_path(self.public_base, resource)
