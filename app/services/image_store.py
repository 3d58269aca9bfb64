# app/services/image_store.py
import io
import logging
from urllib.parse import urlparse

import cloudinary
import cloudinary.uploader

from app.config import Settings
from app.utils.exceptions import ImageUploadFailed

logger = logging.getLogger(__name__)


class CloudinaryImageStore:
    """Event posters hosted on Cloudinary under one folder."""

    def __init__(self, settings: Settings):
        self.folder = settings.CLOUDINARY_FOLDER
        self.configured = bool(
            settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_API_KEY and settings.CLOUDINARY_API_SECRET
        )
        if self.configured:
            cloudinary.config(
                cloud_name=settings.CLOUDINARY_CLOUD_NAME,
                api_key=settings.CLOUDINARY_API_KEY,
                api_secret=settings.CLOUDINARY_API_SECRET,
                secure=True,
            )

    def public_id(self, url: str) -> str:
        """Cloudinary id of an uploaded image: ``<folder>/<file name without extension>``."""
        file_name = urlparse(url).path.rsplit("/", 1)[-1]
        return f"{self.folder}/{file_name.split('.')[0]}"

    def upload(self, content: bytes, filename: str) -> str:
        if not self.configured:
            logger.error("Image upload attempted but Cloudinary credentials are not set")
            raise ImageUploadFailed()

        stream = io.BytesIO(content)
        stream.name = filename
        try:
            result = cloudinary.uploader.upload(stream, resource_type="image", folder=self.folder)
        except Exception as e:
            logger.error(f"Cloudinary upload failed for {filename}: {str(e)}")
            raise ImageUploadFailed() from e

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise ImageUploadFailed()
        logger.info(f"Image uploaded: {url}")
        return url

    def destroy(self, url: str) -> None:
        """Remove a previously uploaded image; a failure is logged and the caller carries on."""
        if not self.configured or not url:
            return
        try:
            cloudinary.uploader.destroy(self.public_id(url), resource_type="image")
            logger.info(f"Image removed: {url}")
        except Exception as e:
            logger.error(f"Failed to delete image from Cloudinary: {str(e)}")
