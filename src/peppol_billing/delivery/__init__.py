"""Livraison hors réseau : stockage des PDF et envoi par email."""

from peppol_billing.delivery.artifacts import BaseArtifactStore, artifact_path
from peppol_billing.delivery.email import (
    MAX_ATTACHMENT_BYTES,
    BaseEmailGateway,
    EmailRequest,
    ReminderRequest,
)
from peppol_billing.delivery.memory import MemoryArtifactStore, MemoryEmailGateway

__all__ = [
    "BaseArtifactStore",
    "BaseEmailGateway",
    "EmailRequest",
    "MAX_ATTACHMENT_BYTES",
    "MemoryArtifactStore",
    "MemoryEmailGateway",
    "ReminderRequest",
    "artifact_path",
]
