"""Interface abstraite du dépôt de documents.

FR: Persistance des documents et de leurs lignes. `save` applique le
    contrôle de concurrence optimiste : la version du document doit être
    celle du stockage, sinon `ConcurrentModificationError`. La mise à jour
    groupée « en retard » ne touche que les documents encore en attente.
EN: Persistence of documents and their lines. `save` applies optimistic
    concurrency: the document's version must match the stored one,
    otherwise `ConcurrentModificationError`. The bulk overdue update only
    touches documents still pending.
"""

from abc import ABCMeta, abstractmethod
from collections.abc import Sequence
from datetime import date

from peppol_billing.models.document import BillingDocument
from peppol_billing.models.enums import DocumentKind


class BaseDocumentRepository(metaclass=ABCMeta):
    """Classe de base abstraite pour les dépôts de documents."""

    @abstractmethod
    async def get(self, document_id: str) -> BillingDocument:
        """Charge un document avec partenaire et lignes.

        Raises:
            DocumentNotFoundError: Si le document n'existe pas.
        """
        ...

    @abstractmethod
    async def save(self, document: BillingDocument) -> BillingDocument:
        """Insère ou met à jour un document et remplace toutes ses lignes.

        Returns:
            Le document enregistré, `version` incrémentée.

        Raises:
            ConcurrentModificationError: Version périmée.
            StorageError: Échec d'écriture.
        """
        ...

    @abstractmethod
    async def delete(self, document_id: str) -> None:
        """Supprime un document et ses lignes de façon atomique.

        Raises:
            DocumentNotFoundError: Si le document n'existe pas.
        """
        ...

    @abstractmethod
    async def list_numbers(
        self, owner_id: str | None, kind: DocumentKind
    ) -> list[str]:
        """Numéros émis par un propriétaire pour un type, du plus ancien au plus récent."""
        ...

    @abstractmethod
    async def list_overdue_candidates(self, today: date) -> list[BillingDocument]:
        """Documents en attente dont l'échéance précède `today`."""
        ...

    @abstractmethod
    async def bulk_mark_overdue(self, document_ids: Sequence[str]) -> list[str]:
        """Passe en retard les documents encore en attente parmi `document_ids`.

        Returns:
            Les identifiants des documents effectivement modifiés (un
            document payé entre-temps est exclu).
        """
        ...
