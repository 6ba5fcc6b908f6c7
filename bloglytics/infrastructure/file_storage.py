"""Local disk storage for uploaded blog images."""

import os
import uuid
from typing import Optional

import structlog

from bloglytics.config import get_settings
from bloglytics.core import clock
from bloglytics.core.exceptions import InvalidImageException

settings = get_settings()
logger = structlog.get_logger(__name__)

ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")
BLOG_IMAGE_FOLDER = "blogs"


class ImageStorage:
    """Writes images under UPLOAD_DIR and hands back their public path."""

    def __init__(self, root: Optional[str] = None, url_prefix: Optional[str] = None,
                 max_size: Optional[int] = None):
        self.root = root or settings.UPLOAD_DIR
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")
        self.max_size = max_size or settings.MAX_IMAGE_SIZE_BYTES

    def validate(self, filename: str, size: int) -> str:
        """Return the lower-cased extension, or raise InvalidImageException."""
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise InvalidImageException("Invalid file type. Only JPG, JPEG, PNG, and GIF are allowed.")
        if size > self.max_size:
            limit_mb = self.max_size // (1024 * 1024)
            raise InvalidImageException(f"File size exceeds {limit_mb}MB limit.")
        return ext

    def save(self, filename: str, content: bytes, user_id: int, folder: str = BLOG_IMAGE_FOLDER) -> Optional[str]:
        """Store an image and return its reference path, e.g. /uploads/blogs/<name>.

        Empty uploads are ignored and yield None.
        """
        if not content:
            return None

        ext = self.validate(filename, len(content))
        timestamp = clock.now().strftime("%Y%m%d%H%M%S")
        stored_name = f"{user_id}_{timestamp}_{uuid.uuid4().hex}{ext}"

        target_dir = os.path.join(self.root, folder)
        os.makedirs(target_dir, exist_ok=True)
        with open(os.path.join(target_dir, stored_name), "wb") as f:
            f.write(content)

        path = f"{self.url_prefix}/{folder}/{stored_name}"
        logger.info("Image stored", path=path, user_id=user_id, size=len(content))
        return path

    def _resolve(self, path: str) -> Optional[str]:
        if not path or not path.startswith(self.url_prefix + "/"):
            return None
        relative = path[len(self.url_prefix) + 1:]
        root = os.path.realpath(self.root)
        full_path = os.path.realpath(os.path.join(root, relative))
        # reference paths never point outside the upload root
        if os.path.commonpath([root, full_path]) != root:
            return None
        return full_path

    def delete(self, path: Optional[str]) -> bool:
        """Remove a stored image. Returns False when nothing was removed."""
        full_path = self._resolve(path) if path else None
        if full_path is None or not os.path.isfile(full_path):
            return False
        try:
            os.remove(full_path)
        except OSError as e:
            logger.warning("Image delete failed", path=path, error=str(e))
            return False
        logger.info("Image deleted", path=path)
        return True


def get_image_storage() -> ImageStorage:
    return ImageStorage()
