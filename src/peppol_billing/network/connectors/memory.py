"""Passerelle réseau en mémoire pour les tests et le développement.

FR: Stocke les entités légales, leurs identifiants et les documents
    soumis en mémoire. Permet de simuler une panne (`fail_submissions`,
    `fail_lookups`) ou un refus (`reject_submissions`) pour exercer le
    repli par email.
EN: Keeps legal entities, their identifiers and submitted documents in
    memory. Can simulate an outage (`fail_submissions`, `fail_lookups`) or
    a rejection (`reject_submissions`) to exercise the email fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from peppol_billing.network.base import BaseNetworkGateway
from peppol_billing.network.errors import (
    NetworkConnectionError,
    NetworkNotFoundError,
    NetworkRejectedError,
)
from peppol_billing.network.models import (
    LegalEntity,
    RoutingIdentifier,
    SubmissionPayload,
    SubmissionResponse,
)


@dataclass
class _StoredSubmission:
    """Document soumis conservé en mémoire."""

    submission_id: str
    payload: SubmissionPayload
    submitted_at: datetime


class MemoryNetworkGateway(BaseNetworkGateway):
    """Passerelle réseau en mémoire.

    FR: Implémente l'interface BaseNetworkGateway complète en stockant
        tout en mémoire.
    EN: Implements the full BaseNetworkGateway interface with in-memory
        storage.
    """

    def __init__(self, **kwargs: object) -> None:
        super().__init__(api_key="memory", environment="test")
        self.entities: dict[str, LegalEntity] = {}
        self.submissions: list[_StoredSubmission] = []
        self.fail_lookups = False
        self.fail_submissions = False
        self.reject_submissions = False
        self._counter: int = 0

    def _next_id(self, prefix: str) -> str:
        """Génère un identifiant séquentiel."""
        self._counter += 1
        return f"{prefix}-{self._counter:06d}"

    def _get_entity(self, registration_id: str) -> LegalEntity:
        """Récupère une entité ou lève NetworkNotFoundError."""
        entity = self.entities.get(registration_id)
        if entity is None:
            msg = f"Entité légale introuvable : {registration_id}"
            raise NetworkNotFoundError(msg)
        return entity

    def register(
        self, registration_id: str, identifiers: list[RoutingIdentifier] | None = None
    ) -> LegalEntity:
        """Inscrit directement une entité dans l'annuaire simulé."""
        entity = LegalEntity(
            id=registration_id,
            party_name=registration_id,
            peppol_identifiers=identifiers or [],
        )
        self.entities[registration_id] = entity
        return entity

    # --- Annuaire ---

    async def lookup_identifiers(self, registration_id: str) -> list[RoutingIdentifier]:
        """Retourne les identifiants de l'entité."""
        if self.fail_lookups:
            raise NetworkConnectionError("Annuaire indisponible (simulation)")
        return list(self._get_entity(registration_id).peppol_identifiers)

    # --- Soumission ---

    async def submit(self, payload: SubmissionPayload) -> SubmissionResponse:
        """Soumet un document (stockage en mémoire)."""
        if self.fail_submissions:
            raise NetworkConnectionError("Point d'accès indisponible (simulation)")
        if self.reject_submissions:
            return SubmissionResponse(
                ok=False, body={"errors": ["Document refusé (simulation)"]}
            )

        submission_id = self._next_id("SUB")
        now = datetime.now(UTC)
        self.submissions.append(
            _StoredSubmission(
                submission_id=submission_id, payload=payload, submitted_at=now
            )
        )
        return SubmissionResponse(
            ok=True,
            body={"guid": submission_id},
            submission_id=submission_id,
            submitted_at=now,
        )

    # --- Entités légales ---

    async def create_legal_entity(self, entity: LegalEntity) -> LegalEntity:
        """Crée une entité avec un identifiant séquentiel."""
        created = entity.model_copy(update={"id": self._next_id("LE")})
        self.entities[created.id] = created
        return created

    async def update_legal_entity(
        self, registration_id: str, entity: LegalEntity
    ) -> LegalEntity:
        """Remplace les données d'une entité existante."""
        current = self._get_entity(registration_id)
        updated = entity.model_copy(
            update={
                "id": registration_id,
                "peppol_identifiers": current.peppol_identifiers,
            }
        )
        self.entities[registration_id] = updated
        return updated

    async def add_identifier(
        self,
        registration_id: str,
        identifier: RoutingIdentifier,
        superscheme: str,
    ) -> RoutingIdentifier:
        """Ajoute un identifiant, refusé s'il est déjà attribué."""
        entity = self._get_entity(registration_id)
        for other in self.entities.values():
            if identifier in other.peppol_identifiers:
                msg = f"Identifiant déjà attribué : {identifier.scheme}:{identifier.id}"
                raise NetworkRejectedError(msg)
        entity.peppol_identifiers.append(identifier)
        return identifier
