"""Machine à états du cycle de vie des documents.

FR: brouillon → en attente → payé ; en attente → en retard (balayage
    automatique) ; en retard → payé. « payé » est terminal, aucun retour
    vers le brouillon, aucun retour de « en retard » vers « en attente ».
    Seul le passage brouillon → en attente (« envoyer ») déclenche la
    soumission et exige que le PDF soit stocké.
EN: draft → pending → paid; pending → overdue (automatic sweep);
    overdue → paid. "paid" is terminal, nothing returns to draft and
    overdue never returns to pending. Only draft → pending ("send")
    triggers submission and requires the stored PDF.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import NamedTuple

from pydantic import BaseModel, Field

from peppol_billing.errors import InvalidTransitionError, ValidationError
from peppol_billing.models.document import BillingDocument
from peppol_billing.models.enums import DocumentStatus, TransitionTrigger

# ---------------------------------------------------------------------------
# Graphe de transitions autorisées
# ---------------------------------------------------------------------------

TRANSITIONS: dict[DocumentStatus, list[DocumentStatus]] = {
    DocumentStatus.DRAFT: [DocumentStatus.PENDING],
    DocumentStatus.PENDING: [DocumentStatus.PAID, DocumentStatus.OVERDUE],
    DocumentStatus.OVERDUE: [DocumentStatus.PAID],
    # Terminal
    DocumentStatus.PAID: [],
}

# Action attendue pour chaque transition
TRIGGERS: dict[tuple[DocumentStatus, DocumentStatus], TransitionTrigger] = {
    (DocumentStatus.DRAFT, DocumentStatus.PENDING): TransitionTrigger.SEND,
    (DocumentStatus.PENDING, DocumentStatus.PAID): TransitionTrigger.MARK_PAID,
    (DocumentStatus.OVERDUE, DocumentStatus.PAID): TransitionTrigger.MARK_PAID,
    (DocumentStatus.PENDING, DocumentStatus.OVERDUE): TransitionTrigger.SWEEP,
}

# ---------------------------------------------------------------------------
# Métadonnées des statuts
# ---------------------------------------------------------------------------


class StatusInfo(NamedTuple):
    """Métadonnées d'un statut de cycle de vie."""

    editable: bool
    requires_artifact: bool


STATUS_METADATA: dict[DocumentStatus, StatusInfo] = {
    DocumentStatus.DRAFT: StatusInfo(editable=True, requires_artifact=False),
    DocumentStatus.PENDING: StatusInfo(editable=False, requires_artifact=True),
    DocumentStatus.PAID: StatusInfo(editable=False, requires_artifact=True),
    DocumentStatus.OVERDUE: StatusInfo(editable=False, requires_artifact=True),
}

# Statuts terminaux (aucune transition sortante)
TERMINAL_STATUSES: frozenset[DocumentStatus] = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)


class LifecycleEvent(BaseModel):
    """Événement de changement de statut."""

    timestamp: datetime = Field(..., description="Horodatage UTC / UTC timestamp")
    source: DocumentStatus = Field(..., description="Statut d'origine / From")
    status: DocumentStatus = Field(..., description="Nouveau statut / To")
    trigger: TransitionTrigger = Field(..., description="Action / Trigger")


class LifecycleManager:
    """Gestionnaire du cycle de vie d'un document.

    FR: Valide chaque transition contre le graphe et conserve un
        historique horodaté des événements.
    EN: Validates each transition against the graph and keeps a
        timestamped event history.
    """

    def __init__(
        self,
        document_reference: str,
        initial_status: DocumentStatus = DocumentStatus.DRAFT,
    ) -> None:
        self.document_reference = document_reference
        self.status = initial_status
        self.history: list[LifecycleEvent] = []

    def can_transition(self, target: DocumentStatus) -> bool:
        """Vérifie si la transition vers le statut cible est autorisée."""
        return target in TRANSITIONS.get(self.status, [])

    def transition(
        self,
        target: DocumentStatus,
        *,
        trigger: TransitionTrigger | None = None,
        has_artifact: bool = False,
        timestamp: datetime | None = None,
    ) -> LifecycleEvent:
        """Effectue la transition vers le statut cible.

        Args:
            target: Statut cible.
            trigger: Action à l'origine de la transition ; vérifiée si fournie.
            has_artifact: Le PDF du document est stocké.
            timestamp: Horodatage (UTC now par défaut).

        Returns:
            L'événement de cycle de vie créé.

        Raises:
            InvalidTransitionError: Transition hors graphe, action
                incohérente ou PDF manquant.
        """
        if not self.can_transition(target):
            allowed = [s.value for s in TRANSITIONS.get(self.status, [])]
            msg = (
                f"Transition non autorisée pour {self.document_reference} : "
                f"{self.status.value} → {target.value}. "
                f"Transitions possibles : {allowed}"
            )
            raise InvalidTransitionError(msg)

        expected = TRIGGERS[(self.status, target)]
        if trigger is not None and trigger != expected:
            msg = (
                f"La transition {self.status.value} → {target.value} "
                f"exige l'action {expected.value}, reçu {trigger.value}"
            )
            raise InvalidTransitionError(msg)

        if STATUS_METADATA[target].requires_artifact and not has_artifact:
            msg = (
                f"Le statut {target.value} exige un PDF stocké "
                f"({self.document_reference})"
            )
            raise InvalidTransitionError(msg)

        event = LifecycleEvent(
            timestamp=timestamp or datetime.now(UTC),
            source=self.status,
            status=target,
            trigger=expected,
        )
        self.status = target
        self.history.append(event)
        return event

    def is_terminal(self) -> bool:
        """Vérifie si le statut courant est terminal (aucune transition sortante)."""
        return self.status in TERMINAL_STATUSES


def advance(
    document: BillingDocument,
    target: DocumentStatus,
    trigger: TransitionTrigger,
) -> LifecycleEvent:
    """Applique une transition à un document (modifie `document.status`)."""
    manager = LifecycleManager(document.number, document.status)
    event = manager.transition(
        target, trigger=trigger, has_artifact=document.artifact_path is not None
    )
    document.status = manager.status
    return event


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_overdue(document: BillingDocument, today: date | datetime) -> bool:
    """Document en attente dont l'échéance précède aujourd'hui.

    FR: Comparaison sur la date seule, l'heure est ignorée.
    EN: Date-only comparison, the time of day is ignored.
    """
    return (
        document.status == DocumentStatus.PENDING
        and document.due_date is not None
        and document.due_date < _as_date(today)
    )


def sweep_overdue(
    documents: Iterable[BillingDocument], today: date | datetime
) -> list[BillingDocument]:
    """Passe en retard les documents en attente échus.

    FR: Retourne les documents effectivement modifiés. Idempotent : un
        second passage ne trouve plus de document en attente échu.
    EN: Returns the documents actually changed. Idempotent: a second run
        finds no more pending past-due documents.
    """
    changed: list[BillingDocument] = []
    for document in documents:
        if is_overdue(document, today):
            advance(document, DocumentStatus.OVERDUE, TransitionTrigger.SWEEP)
            changed.append(document)
    return changed


def ensure_editable(document: BillingDocument) -> None:
    """Lève `ValidationError` si le document n'est plus un brouillon."""
    if not STATUS_METADATA[document.status].editable:
        raise ValidationError(
            f"Le document {document.number} ({document.status.value}) "
            "n'est plus modifiable"
        )


def ensure_deletable(document: BillingDocument) -> None:
    """Lève `ValidationError` si le document n'est pas un brouillon."""
    if document.status != DocumentStatus.DRAFT:
        raise ValidationError(
            f"Seul un brouillon peut être supprimé ({document.number} est "
            f"{document.status.value})"
        )
