"""
Avatar object storage.
Objects live under AVATAR_STORAGE_DIR keyed by "<user_id>/<uuid>.<ext>" and
are served from AVATAR_PUBLIC_BASE_URL.
"""
from __future__ import annotations

import logging
import os
import uuid

from app.core.config import settings

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}


class AvatarStorage:
    def __init__(self, root_dir: str, public_base_url: str) -> None:
        self.root_dir = root_dir
        self.public_base_url = public_base_url.rstrip("/")

    def object_path(self, user_id: uuid.UUID, content_type: str, filename: str | None = None) -> str:
        """Build a fresh object key for a user's avatar."""
        ext = _EXTENSIONS.get(content_type)
        if ext is None and filename and "." in filename:
            ext = filename.rsplit(".", 1)[1].lower()
        return f"{user_id}/{uuid.uuid4().hex}.{ext or 'img'}"

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{path}"

    def path_from_url(self, url: str) -> str | None:
        """Object key for a URL this storage issued, else None."""
        prefix = f"{self.public_base_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def save(self, path: str, content: bytes) -> str:
        full_path = self._full_path(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as f:
            f.write(content)
        return self.public_url(path)

    def delete(self, path: str) -> bool:
        """Remove an object; returns False when it was already gone."""
        full_path = self._full_path(path)
        if not os.path.exists(full_path):
            logger.warning("Avatar object %s not found in storage", path)
            return False
        os.remove(full_path)
        return True

    def exists(self, path: str) -> bool:
        return os.path.exists(self._full_path(path))

    def _full_path(self, path: str) -> str:
        root = os.path.abspath(self.root_dir)
        full_path = os.path.abspath(os.path.join(root, path))
        if os.path.commonpath([root, full_path]) != root:
            raise ValueError(f"Object path escapes storage root: {path}")
        return full_path


avatar_storage = AvatarStorage(settings.AVATAR_STORAGE_DIR, settings.AVATAR_PUBLIC_BASE_URL)


def get_avatar_storage() -> AvatarStorage:
    """FastAPI dependency; override in tests."""
    return avatar_storage
