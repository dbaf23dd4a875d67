"""Dépôt de documents sur l'ORM Django.

FR: Fonctions synchrones transactionnelles (utilisables telles quelles
    depuis une vue ou une tâche) et leur enveloppe asynchrone
    `DjangoDocumentRepository` via `asgiref.sync.sync_to_async`. Toute
    erreur de base de données est levée en `StorageError`.
EN: Transactional synchronous functions (usable as-is from a view or a
    task) and their async wrapper `DjangoDocumentRepository` through
    `asgiref.sync.sync_to_async`. Every database error is raised as
    `StorageError`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from asgiref.sync import sync_to_async
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from peppol_billing.contrib.django.models import BillingDocument, LineItem, Party
from peppol_billing.errors import (
    ConcurrentModificationError,
    DocumentNotFoundError,
    StorageError,
)
from peppol_billing.models.document import BillingDocument as PydanticDocument
from peppol_billing.models.enums import DocumentKind, DocumentStatus
from peppol_billing.repository.base import BaseDocumentRepository

logger = logging.getLogger(__name__)


def _documents():
    return BillingDocument.objects.select_related("party").prefetch_related("items")


def get_document(document_id: str) -> PydanticDocument:
    """Charge un document avec son partenaire et ses lignes."""
    try:
        return _documents().get(document_id=document_id).to_pydantic()
    except BillingDocument.DoesNotExist:
        msg = f"Document introuvable : {document_id}"
        raise DocumentNotFoundError(msg) from None


def save_document(document: PydanticDocument) -> PydanticDocument:
    """Insère ou met à jour un document et remplace toutes ses lignes.

    FR: Verrouille la ligne existante, vérifie la version, puis réécrit
        partenaire, document et lignes dans une seule transaction.
    EN: Locks the existing row, checks the version, then rewrites partner,
        document and lines in a single transaction.
    """
    try:
        with transaction.atomic():
            row = (
                BillingDocument.objects.select_for_update()
                .filter(document_id=document.id)
                .first()
            )
            expected = row.version if row is not None else 0
            if document.version != expected:
                msg = (
                    f"Le document {document.number} a été modifié entre-temps "
                    f"(version {document.version}, attendue {expected})"
                )
                raise ConcurrentModificationError(msg)

            party = Party.upsert_pydantic(document.party)
            if row is None:
                row = BillingDocument.from_pydantic(document, party)
            else:
                row.apply_pydantic(document, party)
            row.version = expected + 1
            row.save()

            row.items.all().delete()
            LineItem.objects.bulk_create(
                [
                    LineItem.from_pydantic(line, row, idx)
                    for idx, line in enumerate(document.items, start=1)
                ]
            )
    except DatabaseError as exc:
        logger.exception("Enregistrement du document %s impossible", document.number)
        raise StorageError(f"Enregistrement impossible : {document.number}") from exc

    return get_document(document.id)


def delete_document(document_id: str) -> None:
    """Supprime un document et ses lignes de façon atomique."""
    try:
        with transaction.atomic():
            deleted, _ = BillingDocument.objects.filter(document_id=document_id).delete()
    except DatabaseError as exc:
        raise StorageError(f"Suppression impossible : {document_id}") from exc
    if not deleted:
        raise DocumentNotFoundError(f"Document introuvable : {document_id}")


def list_numbers(owner_id: str | None, kind: DocumentKind) -> list[str]:
    """Numéros émis par un propriétaire pour un type, du plus ancien au plus récent."""
    return list(
        BillingDocument.objects.filter(owner_id=owner_id, kind=str(kind))
        .order_by("created_at", "pk")
        .values_list("number", flat=True)
    )


def list_overdue_candidates(today: date) -> list[PydanticDocument]:
    """Documents en attente dont l'échéance précède `today`."""
    rows = _documents().filter(status=DocumentStatus.PENDING, due_date__lt=today)
    return [row.to_pydantic() for row in rows]


def bulk_mark_overdue(document_ids: Sequence[str]) -> list[str]:
    """Passe en retard les documents encore en attente parmi `document_ids`.

    Returns:
        Les identifiants effectivement modifiés.
    """
    try:
        with transaction.atomic():
            changed = list(
                BillingDocument.objects.select_for_update()
                .filter(document_id__in=list(document_ids), status=DocumentStatus.PENDING)
                .values_list("document_id", flat=True)
            )
            BillingDocument.objects.filter(document_id__in=changed).update(
                status=DocumentStatus.OVERDUE,
                version=F("version") + 1,
                updated_at=timezone.now(),
            )
    except DatabaseError as exc:
        raise StorageError("Mise à jour des documents en retard impossible") from exc
    return changed


class DjangoDocumentRepository(BaseDocumentRepository):
    """Dépôt asynchrone adossé à l'ORM Django."""

    async def get(self, document_id: str) -> PydanticDocument:
        return await sync_to_async(get_document)(document_id)

    async def save(self, document: PydanticDocument) -> PydanticDocument:
        return await sync_to_async(save_document)(document)

    async def delete(self, document_id: str) -> None:
        await sync_to_async(delete_document)(document_id)

    async def list_numbers(
        self, owner_id: str | None, kind: DocumentKind
    ) -> list[str]:
        return await sync_to_async(list_numbers)(owner_id, kind)

    async def list_overdue_candidates(self, today: date) -> list[PydanticDocument]:
        return await sync_to_async(list_overdue_candidates)(today)

    async def bulk_mark_overdue(self, document_ids: Sequence[str]) -> list[str]:
        return await sync_to_async(bulk_mark_overdue)(document_ids)
