import logging
import os
import uuid

from django.core.files.storage import Storage, default_storage

logger = logging.getLogger(__name__)


class FileStorage:
    """Uploads files through a Django storage backend and addresses them by URL."""

    def __init__(self, storage: Storage | None = None):
        self.storage = storage or default_storage

    def upload(self, uploaded_file, folder: str) -> str:
        _, ext = os.path.splitext(getattr(uploaded_file, "name", "") or "")
        name = f"{folder.strip('/')}/{uuid.uuid4().hex}{ext.lower()}"
        saved_name = self.storage.save(name, uploaded_file)
        return self.storage.url(saved_name)

    def _name_from_url(self, url: str) -> str | None:
        base_url = self.storage.base_url or ""
        if base_url and url.startswith(base_url):
            return url[len(base_url):]
        return None

    def delete(self, url: str) -> None:
        if not url:
            return
        name = self._name_from_url(url)
        if name is None:
            logger.warning("Skipping delete of %s: not managed by this storage", url)
            return
        if self.storage.exists(name):
            self.storage.delete(name)
