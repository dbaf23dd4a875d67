"""Stockage et email en mémoire pour les tests et le développement."""

from __future__ import annotations

from peppol_billing.delivery.artifacts import BaseArtifactStore
from peppol_billing.delivery.email import (
    BaseEmailGateway,
    EmailRequest,
    ReminderRequest,
    ensure_recipient,
)
from peppol_billing.errors import EmailDeliveryError, StorageError


class MemoryArtifactStore(BaseArtifactStore):
    """Stockage des PDF dans un dictionnaire `chemin → octets`."""

    def __init__(self, base_url: str = "memory://") -> None:
        self.base_url = base_url
        self.files: dict[str, bytes] = {}
        self.fail_puts = False
        self.writes: int = 0

    async def put(self, path: str, data: bytes) -> None:
        if self.fail_puts:
            raise StorageError(f"Écriture impossible : {path} (simulation)")
        self.files[path] = data
        self.writes += 1

    async def get_url(self, path: str) -> str | None:
        if path not in self.files:
            return None
        return f"{self.base_url}{path}"

    async def delete(self, path: str) -> None:
        self.files.pop(path, None)


class MemoryEmailGateway(BaseEmailGateway):
    """Conserve les emails envoyés ; `fail_sends` simule une panne."""

    def __init__(self) -> None:
        self.sent: list[EmailRequest] = []
        self.reminders: list[ReminderRequest] = []
        self.fail_sends = False

    async def send(self, request: EmailRequest) -> None:
        ensure_recipient(request)
        if self.fail_sends:
            raise EmailDeliveryError("Serveur SMTP indisponible (simulation)")
        self.sent.append(request)

    async def send_reminder(self, request: ReminderRequest) -> None:
        ensure_recipient(request)
        if self.fail_sends:
            raise EmailDeliveryError("Serveur SMTP indisponible (simulation)")
        self.reminders.append(request)
