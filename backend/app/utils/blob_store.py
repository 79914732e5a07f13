"""Blob storage for uploaded media, backed by Cloudinary"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from app.config import settings

logger = logging.getLogger(__name__)


class BlobStoreError(Exception):
    """Raised when the blob store rejects a request or cannot be reached"""


@dataclass(frozen=True)
class StoredBlob:
    """A payload persisted in the blob store"""

    url: str
    public_id: str
    resource_type: str


class CloudinaryBlobStore:
    """
    Upload and destroy media through the Cloudinary SDK

    Credentials are passed with every call instead of through the global
    ``cloudinary.config`` so several stores can coexist (tests, tenants).

    Args:
        cloud_name: Cloudinary cloud name
        api_key: API key
        api_secret: API secret
        folder: Folder new uploads are placed in
    """

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: Optional[str] = None):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder

    def _credentials(self) -> dict:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
        }

    def upload(self, path: str, resource_type: str = "auto", timeout: Optional[float] = None) -> StoredBlob:
        """
        Upload a local file

        Args:
            path: Location of the temporary file to upload
            resource_type: Cloudinary resource type ("auto" lets the service decide)
            timeout: Seconds to wait for the service

        Returns:
            StoredBlob with the public secure URL
        """
        options = dict(self._credentials(), resource_type=resource_type, timeout=timeout)
        if self.folder:
            options["folder"] = self.folder

        try:
            result = cloudinary.uploader.upload(path, **options)
        except (OSError, CloudinaryError) as e:
            raise BlobStoreError(f"upload of {Path(path).name} failed: {e}") from e

        if not result.get("secure_url") or not result.get("public_id"):
            raise BlobStoreError(f"upload of {Path(path).name} returned no URL")

        return StoredBlob(
            url=result["secure_url"],
            public_id=result["public_id"],
            resource_type=result.get("resource_type", resource_type),
        )

    def delete(self, blob: StoredBlob, timeout: Optional[float] = None) -> None:
        """Destroy a previously uploaded blob (already gone counts as done)"""
        try:
            result = cloudinary.uploader.destroy(
                blob.public_id,
                resource_type=blob.resource_type,
                timeout=timeout,
                **self._credentials(),
            )
        except CloudinaryError as e:
            raise BlobStoreError(f"delete of {blob.public_id} failed: {e}") from e

        outcome = result.get("result")
        if outcome == "not found":
            logger.info(f"Blob {blob.public_id} was already gone")
        elif outcome != "ok":
            raise BlobStoreError(f"delete of {blob.public_id} failed: {outcome}")


def get_blob_store() -> CloudinaryBlobStore:
    """Dependency returning a blob store configured from settings"""
    return CloudinaryBlobStore(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        folder=settings.cloudinary_folder,
    )
