"""Stockage des PDF sur un `Storage` Django."""

from __future__ import annotations

import logging
import posixpath

from asgiref.sync import sync_to_async
from django.core.files.base import ContentFile
from django.core.files.storage import Storage, default_storage

from peppol_billing.delivery.artifacts import BaseArtifactStore
from peppol_billing.errors import StorageError

logger = logging.getLogger(__name__)


class DjangoArtifactStore(BaseArtifactStore):
    """Stockage des PDF sous `location` dans un `Storage` Django.

    FR: `put` remplace un fichier existant au même chemin.
    EN: `put` replaces an existing file at the same path.
    """

    def __init__(self, storage: Storage | None = None, location: str = "") -> None:
        self.storage = storage or default_storage
        self.location = location

    def _name(self, path: str) -> str:
        return posixpath.join(self.location, path) if self.location else path

    def _put(self, path: str, data: bytes) -> None:
        name = self._name(path)
        try:
            if self.storage.exists(name):
                self.storage.delete(name)
            saved = self.storage.save(name, ContentFile(data))
        except OSError as exc:
            raise StorageError(f"Écriture du PDF impossible : {name}") from exc
        logger.debug("PDF stocké : %s", saved)

    def _get_url(self, path: str) -> str | None:
        name = self._name(path)
        if not self.storage.exists(name):
            return None
        return self.storage.url(name)

    def _delete(self, path: str) -> None:
        name = self._name(path)
        try:
            self.storage.delete(name)
        except OSError as exc:
            raise StorageError(f"Suppression du PDF impossible : {name}") from exc

    async def put(self, path: str, data: bytes) -> None:
        await sync_to_async(self._put)(path, data)

    async def get_url(self, path: str) -> str | None:
        return await sync_to_async(self._get_url)(path)

    async def delete(self, path: str) -> None:
        await sync_to_async(self._delete)(path)
