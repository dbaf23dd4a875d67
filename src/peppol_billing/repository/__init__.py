"""Persistance des documents de facturation."""

from peppol_billing.repository.base import BaseDocumentRepository
from peppol_billing.repository.memory import MemoryDocumentRepository

__all__ = [
    "BaseDocumentRepository",
    "MemoryDocumentRepository",
]
