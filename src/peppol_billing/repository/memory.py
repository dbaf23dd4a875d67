"""Dépôt de documents en mémoire pour les tests et le développement.

FR: Conserve des copies profondes : un document modifié par l'appelant
    n'affecte le stockage qu'après `save`.
EN: Keeps deep copies: a document changed by the caller only affects the
    store after `save`.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from peppol_billing.errors import (
    ConcurrentModificationError,
    DocumentNotFoundError,
    StorageError,
)
from peppol_billing.models.document import BillingDocument
from peppol_billing.models.enums import DocumentKind, DocumentStatus
from peppol_billing.repository.base import BaseDocumentRepository


class MemoryDocumentRepository(BaseDocumentRepository):
    """Dépôt en mémoire, ordonné par insertion."""

    def __init__(self) -> None:
        self._documents: dict[str, BillingDocument] = {}
        self.fail_saves = False

    async def get(self, document_id: str) -> BillingDocument:
        stored = self._documents.get(document_id)
        if stored is None:
            raise DocumentNotFoundError(f"Document introuvable : {document_id}")
        return stored.model_copy(deep=True)

    async def save(self, document: BillingDocument) -> BillingDocument:
        if self.fail_saves:
            raise StorageError(f"Enregistrement impossible : {document.number} (simulation)")
        stored = self._documents.get(document.id)
        expected = stored.version if stored is not None else 0
        if document.version != expected:
            msg = (
                f"Le document {document.number} a été modifié entre-temps "
                f"(version {document.version}, attendue {expected})"
            )
            raise ConcurrentModificationError(msg)

        saved = document.model_copy(deep=True, update={"version": expected + 1})
        self._documents[document.id] = saved
        return saved.model_copy(deep=True)

    async def delete(self, document_id: str) -> None:
        if self._documents.pop(document_id, None) is None:
            raise DocumentNotFoundError(f"Document introuvable : {document_id}")

    async def list_numbers(
        self, owner_id: str | None, kind: DocumentKind
    ) -> list[str]:
        return [
            d.number
            for d in self._documents.values()
            if d.owner_id == owner_id and d.kind == kind
        ]

    async def list_overdue_candidates(self, today: date) -> list[BillingDocument]:
        return [
            d.model_copy(deep=True)
            for d in self._documents.values()
            if d.status == DocumentStatus.PENDING
            and d.due_date is not None
            and d.due_date < today
        ]

    async def bulk_mark_overdue(self, document_ids: Sequence[str]) -> list[str]:
        changed: list[str] = []
        for document_id in document_ids:
            stored = self._documents.get(document_id)
            if stored is None or stored.status != DocumentStatus.PENDING:
                continue
            self._documents[document_id] = stored.model_copy(
                update={"status": DocumentStatus.OVERDUE, "version": stored.version + 1}
            )
            changed.append(document_id)
        return changed
