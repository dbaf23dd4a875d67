"""Stockage des PDF rendus.

FR: Un seul chemin fixe par document, jamais versionné :
    `{id}/invoice.pdf` ou `{id}/credit-note.pdf`. Les écritures écrasent le
    fichier existant (upsert), une nouvelle tentative d'envoi ne crée donc
    pas de doublon.
EN: One fixed path per document, never versioned. Writes overwrite the
    existing file (upsert), so a retried send creates no duplicate.
"""

from abc import ABCMeta, abstractmethod

from peppol_billing.models.enums import DocumentKind

ARTIFACT_FILENAMES: dict[DocumentKind, str] = {
    DocumentKind.INVOICE: "invoice.pdf",
    DocumentKind.CREDIT_NOTE: "credit-note.pdf",
}


def artifact_path(document_id: str, kind: DocumentKind) -> str:
    """Chemin de stockage du PDF d'un document."""
    return f"{document_id}/{ARTIFACT_FILENAMES[kind]}"


class BaseArtifactStore(metaclass=ABCMeta):
    """Classe de base abstraite pour le stockage des PDF.

    FR: Toute erreur doit être levée sous forme de `StorageError`.
    EN: Every failure must be raised as `StorageError`.
    """

    @abstractmethod
    async def put(self, path: str, data: bytes) -> None:
        """Écrit (ou écrase) le fichier au chemin donné."""
        ...

    @abstractmethod
    async def get_url(self, path: str) -> str | None:
        """URL du fichier, ou None s'il n'existe pas."""
        ...

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Supprime le fichier s'il existe."""
        ...
