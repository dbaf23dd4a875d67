"""Service de gestion des documents de facturation.

FR: Point d'entrée de la couche de présentation : création et édition des
    brouillons, aperçu des totaux, envoi, paiement, suppression, balayage
    des échéances et relances. Chaque opération retourne `Ok` ou `Err`.
EN: Entry point for the presentation layer: draft creation and editing,
    totals preview, send, payment, deletion, overdue sweep and reminders.
    Every operation returns `Ok` or `Err`.
"""

import asyncio
import logging
import random
from collections.abc import Callable, Sequence
from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from peppol_billing.config import BillingContext
from peppol_billing.delivery.artifacts import BaseArtifactStore
from peppol_billing.delivery.email import BaseEmailGateway, ReminderRequest
from peppol_billing.errors import (
    BillingError,
    ConcurrentModificationError,
    RenderError,
    ValidationError,
)
from peppol_billing.lifecycle import (
    LifecycleManager,
    advance,
    ensure_deletable,
    ensure_editable,
    sweep_overdue,
)
from peppol_billing.models.document import BillingDocument, LineItem
from peppol_billing.models.enums import DocumentKind, DocumentStatus, TransitionTrigger
from peppol_billing.models.party import IssuerProfile, Party
from peppol_billing.network.base import BaseNetworkGateway
from peppol_billing.numbering import default_due_date, generate_number
from peppol_billing.repository.base import BaseDocumentRepository
from peppol_billing.services.orchestrator import (
    SubmissionOrchestrator,
    SubmissionOutcome,
    check_preconditions,
)
from peppol_billing.services.results import Err, Ok, Result
from peppol_billing.tax import TaxBreakdown, aggregate

logger = logging.getLogger(__name__)


class RenderData(BaseModel):
    """Données transmises au moteur de rendu PDF."""

    model_config = ConfigDict(frozen=True)

    document: BillingDocument
    issuer: IssuerProfile
    breakdown: TaxBreakdown
    currency: str
    locale: str


Renderer = Callable[[RenderData], bytes]


REQUIRED_DRAFT_FIELDS = frozenset({"number", "issue_date"})


class DraftChanges(BaseModel):
    """Modifications d'un brouillon ; les champs absents sont conservés.

    FR: `items` remplace toutes les lignes. `expected_version`, si fourni,
        doit correspondre à la version stockée. `number` ou `issue_date` à
        None sont ignorés.
    EN: `items` replaces every line. `expected_version`, when given, must
        match the stored version. A None `number` or `issue_date` is ignored.
    """

    number: str | None = Field(default=None, min_length=1)
    issue_date: date | None = None
    due_date: date | None = None
    notes: str | None = None
    party: Party | None = None
    items: list[LineItem] | None = None
    expected_version: int | None = None


class DocumentService:
    """Opérations métier sur les documents de facturation."""

    def __init__(
        self,
        repository: BaseDocumentRepository,
        gateway: BaseNetworkGateway,
        artifacts: BaseArtifactStore,
        email: BaseEmailGateway,
        renderer: Renderer,
        *,
        clock: Callable[[], date] = date.today,
        rng: random.Random | None = None,
    ) -> None:
        self.repository = repository
        self.artifacts = artifacts
        self.email = email
        self.renderer = renderer
        self.clock = clock
        self.rng = rng
        self.orchestrator = SubmissionOrchestrator(gateway, artifacts, email)
        self._in_flight: set[str] = set()

    # --- Brouillons ---

    async def create(
        self,
        context: BillingContext,
        *,
        party: Party,
        items: Sequence[LineItem] = (),
        kind: DocumentKind = DocumentKind.INVOICE,
        issue_date: date | None = None,
        due_date: date | None = None,
        notes: str | None = None,
        number: str | None = None,
        owner_id: str | None = None,
    ) -> Result[BillingDocument]:
        """Crée un brouillon numéroté, totaux calculés.

        FR: Sans numéro explicite, le numéro suit la politique de
            l'émetteur. Une facture sans échéance reçoit l'échéance par
            défaut (un mois) ; un avoir n'a pas d'échéance.
        EN: Without an explicit number, the issuer's policy assigns one.
            An invoice without a due date gets the one-month default; a
            credit note has none.
        """
        try:
            issued_on = issue_date or self.clock()
            if kind == DocumentKind.CREDIT_NOTE:
                if due_date is not None:
                    raise ValidationError(
                        "Un avoir n'a pas de date d'échéance", errors=["due_date"]
                    )
            elif due_date is None:
                due_date = default_due_date(issued_on)

            if number is None:
                existing = await self.repository.list_numbers(owner_id, kind)
                number = generate_number(
                    context.issuer.numbering, kind, existing, issued_on, self.rng
                )

            document = BillingDocument(
                kind=kind,
                number=number,
                issue_date=issued_on,
                due_date=due_date,
                notes=notes,
                owner_id=owner_id,
                party=party,
                items=list(items),
            )
            document.recompute_totals()
            saved = await self.repository.save(document)
        except BillingError as exc:
            return Err.from_error(exc)

        logger.info("Brouillon %s créé (%s)", saved.number, saved.kind)
        return Ok(saved)

    async def update_draft(
        self, document_id: str, changes: DraftChanges
    ) -> Result[BillingDocument]:
        """Modifie un brouillon et recalcule ses totaux."""
        try:
            document = await self.repository.get(document_id)
            ensure_editable(document)
            if (
                changes.expected_version is not None
                and changes.expected_version != document.version
            ):
                raise ConcurrentModificationError(
                    f"Le document {document.number} a été modifié entre-temps"
                )

            updates = changes.model_dump(
                exclude_unset=True, exclude={"expected_version", "party", "items"}
            )
            for name, value in updates.items():
                if value is None and name in REQUIRED_DRAFT_FIELDS:
                    continue
                setattr(document, name, value)
            if changes.party is not None:
                document.party = changes.party
            if changes.items is not None:
                document.items = list(changes.items)
            if document.is_credit_note:
                document.due_date = None

            document.recompute_totals()
            saved = await self.repository.save(document)
        except BillingError as exc:
            return Err.from_error(exc)
        return Ok(saved)

    @staticmethod
    def preview_totals(items: Sequence[LineItem]) -> Result[TaxBreakdown]:
        """Aperçu des tranches et totaux, avec le même moteur que l'envoi."""
        try:
            return Ok(aggregate(items))
        except BillingError as exc:
            return Err.from_error(exc)

    async def delete(self, document_id: str) -> Result[None]:
        try:
            document = await self.repository.get(document_id)
            ensure_deletable(document)
            await self.repository.delete(document_id)
        except BillingError as exc:
            return Err.from_error(exc)
        logger.info("Brouillon %s supprimé", document.number)
        return Ok(None)

    # --- Envoi ---

    async def _render(
        self, document: BillingDocument, context: BillingContext, breakdown: TaxBreakdown
    ) -> bytes:
        data = RenderData(
            document=document,
            issuer=context.issuer,
            breakdown=breakdown,
            currency=context.currency,
            locale=context.locale,
        )
        try:
            pdf_bytes = await asyncio.to_thread(self.renderer, data)
        except Exception as exc:
            raise RenderError(
                f"Rendu PDF impossible pour {document.number} : {exc}"
            ) from exc
        if not pdf_bytes:
            raise RenderError(f"Rendu PDF vide pour {document.number}")
        return pdf_bytes

    async def send(
        self, document_id: str, context: BillingContext
    ) -> Result[SubmissionOutcome]:
        """Rend, livre puis passe un brouillon en attente.

        FR: Le rendu précède toute livraison : un échec de rendu n'entraîne
            aucune soumission. Si l'enregistrement du statut échoue après
            livraison, le PDF est supprimé et le document reste en
            brouillon. Un second envoi simultané du même document est
            refusé.
        EN: Rendering precedes any delivery: a render failure means no
            submission. When the status save fails after delivery, the PDF
            is deleted and the document stays in draft. A second concurrent
            send of the same document is rejected.
        """
        if document_id in self._in_flight:
            return Err.from_error(
                ConcurrentModificationError(
                    f"Envoi déjà en cours pour le document {document_id}"
                )
            )
        self._in_flight.add(document_id)
        try:
            return await self._send(document_id, context)
        except BillingError as exc:
            return Err.from_error(exc)
        finally:
            self._in_flight.discard(document_id)

    async def _send(
        self, document_id: str, context: BillingContext
    ) -> Result[SubmissionOutcome]:
        document = await self.repository.get(document_id)
        manager = LifecycleManager(document.number, document.status)
        if not manager.can_transition(DocumentStatus.PENDING):
            raise ValidationError(
                f"Seul un brouillon peut être envoyé ({document.number} : "
                f"{document.status})",
                errors=["status"],
            )

        check_preconditions(document, context, None, require_artifact=False)
        breakdown = document.recompute_totals()
        pdf_bytes = await self._render(document, context, breakdown)
        outcome = await self.orchestrator.submit(document, context, pdf_bytes)

        document.artifact_path = outcome.artifact_path
        advance(document, DocumentStatus.PENDING, TransitionTrigger.SEND)
        try:
            await self.repository.save(document)
        except BillingError:
            logger.warning(
                "Statut de %s non enregistré, suppression du PDF %s",
                document.number,
                outcome.artifact_path,
            )
            await self.artifacts.delete(outcome.artifact_path)
            raise

        logger.info(
            "Document %s envoyé (réseau : %s, email : %s)",
            document.number,
            outcome.network_submitted,
            outcome.email_sent,
        )
        return Ok(outcome)

    # --- Paiement et échéances ---

    async def mark_paid(self, document_id: str) -> Result[BillingDocument]:
        try:
            document = await self.repository.get(document_id)
            advance(document, DocumentStatus.PAID, TransitionTrigger.MARK_PAID)
            saved = await self.repository.save(document)
        except BillingError as exc:
            return Err.from_error(exc)
        logger.info("Document %s payé", saved.number)
        return Ok(saved)

    async def sweep_overdue(self, today: date | None = None) -> Result[list[str]]:
        """Passe en retard les documents en attente échus.

        Returns:
            Les identifiants des documents effectivement passés en retard.
        """
        today = today or self.clock()
        try:
            candidates = await self.repository.list_overdue_candidates(today)
            changed = sweep_overdue(candidates, today)
            ids = await self.repository.bulk_mark_overdue(
                [document.id for document in changed]
            )
        except BillingError as exc:
            return Err.from_error(exc)
        if ids:
            logger.info("%d document(s) passé(s) en retard au %s", len(ids), today)
        return Ok(ids)

    async def remind_overdue(
        self, document_id: str, context: BillingContext
    ) -> Result[None]:
        """Envoie une relance pour un document en retard."""
        try:
            document = await self.repository.get(document_id)
            if document.status != DocumentStatus.OVERDUE or document.due_date is None:
                raise ValidationError(
                    f"Le document {document.number} n'est pas en retard",
                    errors=["status"],
                )
            await self.email.send_reminder(
                ReminderRequest(
                    recipient_name=document.party.name,
                    recipient_email=document.party.email,
                    document_number=document.number,
                    due_date=document.due_date,
                    amount=document.total,
                    currency=context.currency,
                    issuer_name=context.issuer.name,
                )
            )
        except BillingError as exc:
            return Err.from_error(exc)
        logger.info("Relance envoyée pour %s", document.number)
        return Ok(None)

    async def artifact_url(self, document_id: str) -> Result[str | None]:
        """URL du PDF stocké, `None` pour un brouillon."""
        try:
            document = await self.repository.get(document_id)
            if document.artifact_path is None:
                return Ok(None)
            return Ok(await self.artifacts.get_url(document.artifact_path))
        except BillingError as exc:
            return Err.from_error(exc)
