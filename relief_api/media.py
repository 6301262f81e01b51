"""
Media hosting abstraction for Cloudinary and in-memory testing.
"""

from __future__ import annotations

import base64
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/png"


class MediaUploadError(Exception):
    """The media host rejected or failed the upload."""


class MediaClient(Protocol):
    """Defines the operation the API needs from a media host."""

    def upload(self, data: bytes, content_type: Optional[str] = None) -> str:
        """Upload bytes and return the public URL."""
        ...

    def close(self) -> None:
        ...


def to_data_uri(data: bytes, content_type: Optional[str] = None) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{encoded}"


@dataclass
class InMemoryMediaClient:
    """Test double for media uploads."""

    base_url: str = "https://example.test/media"
    folder: str = "weblearn"
    uploads: dict = None

    def __post_init__(self):
        if self.uploads is None:
            self.uploads = {}

    def upload(self, data: bytes, content_type: Optional[str] = None) -> str:
        key = f"{self.folder}/{uuid.uuid4().hex}"
        self.uploads[key] = (data, content_type)
        return f"{self.base_url}/{key}"

    def close(self) -> None:
        pass


@dataclass
class CloudinaryMediaClient:
    """
    Uploads through the Cloudinary SDK. The payload is sent as a base64 data
    URI and Cloudinary detects the resource type.
    """

    cloud_name: str
    api_key: str
    api_secret: str
    folder: str = "weblearn"
    timeout: float = 30

    def __post_init__(self):
        cloudinary.config(
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )

    def upload(self, data: bytes, content_type: Optional[str] = None) -> str:
        try:
            result = cloudinary.uploader.upload(
                to_data_uri(data, content_type),
                resource_type="auto",
                folder=self.folder,
                timeout=self.timeout,
            )
        except cloudinary.exceptions.Error as exc:
            logger.warning("Cloudinary upload failed: %s", exc)
            raise MediaUploadError(str(exc)) from exc
        url = result.get("secure_url")
        if not url:
            raise MediaUploadError("Upload response did not include a URL")
        return url

    def close(self) -> None:
        pass
