"""
Receipt image storage backends.

Handlers only ever see ``ImageStorage.save()``: bytes in, public URL out.
Cloudinary is the production store; the local backend writes into
UPLOAD_FOLDER and is served by the ``uploads`` blueprint.
"""

import os
from abc import ABC, abstractmethod

import cloudinary
import cloudinary.uploader
from flask import url_for


class ImageStorageError(Exception):
    """Writing an image to the object store failed."""
    pass


class ImageStorage(ABC):

    @abstractmethod
    def save(self, data: bytes, key: str, content_type: str) -> str:
        """
        Store ``data`` under ``key`` and make it publicly readable.

        Returns:
            The public URL of the stored object

        Raises:
            ImageStorageError: If the write fails
        """
        pass


class CloudinaryImageStorage(ImageStorage):
    """Uploads to Cloudinary with the public ``upload`` delivery type."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "expenses"):
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        self.folder = folder
        self._configured = False

    def _configure(self):
        if not self._configured:
            cloudinary.config(secure=True, **self._credentials)
            self._configured = True

    @staticmethod
    def _resource_type(content_type: str) -> str:
        return "image" if (content_type or "").startswith("image/") else "raw"

    def save(self, data: bytes, key: str, content_type: str) -> str:
        self._configure()
        resource_type = self._resource_type(content_type)
        # Cloudinary appends the format itself for images
        public_id = os.path.splitext(key)[0] if resource_type == "image" else key
        try:
            result = cloudinary.uploader.upload(
                data,
                public_id=public_id,
                folder=self.folder,
                resource_type=resource_type,
                type="upload",
                overwrite=False,
            )
        except Exception as e:
            raise ImageStorageError(f"Failed to upload image: {e}") from e

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise ImageStorageError("No URL returned from Cloudinary")
        return url


class LocalImageStorage(ImageStorage):
    """Development store: files on disk, served at /uploads/<key>."""

    def __init__(self, folder: str):
        self.folder = folder

    def save(self, data: bytes, key: str, content_type: str) -> str:
        try:
            os.makedirs(self.folder, exist_ok=True)
            with open(os.path.join(self.folder, key), "wb") as fh:
                fh.write(data)
        except OSError as e:
            raise ImageStorageError(f"Failed to store image: {e}") from e
        return url_for("uploads.serve_upload", filename=key, _external=True)


def build_image_storage(config) -> ImageStorage:
    backend = (config.get("IMAGE_STORAGE") or "local").lower()
    if backend == "cloudinary":
        return CloudinaryImageStorage(
            cloud_name=config["CLOUDINARY_CLOUD_NAME"],
            api_key=config["CLOUDINARY_API_KEY"],
            api_secret=config["CLOUDINARY_API_SECRET"],
            folder=config.get("CLOUDINARY_FOLDER", "expenses"),
        )
    if backend == "local":
        return LocalImageStorage(config["UPLOAD_FOLDER"])
    raise ValueError(f"Unknown IMAGE_STORAGE backend: {backend!r}")
