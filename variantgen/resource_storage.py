"""
Resource storage - content-addressed binaries on the local filesystem.

Resources are stored under their SHA1. The public path of a resource is
'<public_path>/<sha1>/<filename>', so new content always gets a new path.
"""

import hashlib
import logging
import os
from dataclasses import dataclass
from mimetypes import guess_type
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from .models import Resource


def public_path(base: str, resource: Resource) -> str:
    """Build the public path of a resource below base."""
    return f"{base.rstrip('/')}/{resource.sha1}/{quote(resource.filename)}"


def content_sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


@dataclass
class LocalConfig:
    """
    Local filesystem storage settings.

    Attributes:
        root_path: Directory holding the resources
        public_path: URL path prefix resources are published under
    """
    root_path: str
    public_path: str = '/_Resources/Persistent'

    def validate(self) -> List[str]:
        errors = []
        if not self.root_path:
            errors.append("Storage root path is not set")
        elif os.path.exists(self.root_path) and not os.path.isdir(self.root_path):
            errors.append(f"Storage root is not a directory: {self.root_path}")
        return errors


class LocalResourceStorage:
    """
    Stores resource content below a root directory, sharded by SHA1 prefix.
    """

    def __init__(self, config: LocalConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.root = Path(config.root_path)

    def _path_for(self, sha1: str) -> Path:
        return self.root / sha1[0:2] / sha1[2:4] / sha1

    def import_resource(self, data: bytes, filename: str, media_type: str) -> Resource:
        """Store data and return the resource describing it."""
        sha1 = content_sha1(data)
        path = self._path_for(sha1)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            self.logger.debug(f"Stored resource {sha1} ({len(data)} bytes)")
        return Resource(sha1=sha1, filename=filename, media_type=media_type, size=len(data))

    def import_file(self, filepath: str, media_type: Optional[str] = None) -> Resource:
        """Store a file from disk, guessing the media type from its name."""
        path = Path(filepath)
        media_type = media_type or guess_type(path.name)[0] or 'application/octet-stream'
        return self.import_resource(path.read_bytes(), path.name, media_type)

    def get_content(self, resource: Resource) -> bytes:
        return self._path_for(resource.sha1).read_bytes()

    def public_path_for(self, resource: Resource) -> str:
        return public_path(self.config.public_path, resource)
