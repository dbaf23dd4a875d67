"""Orchestration de la soumission d'un document.

FR: Choisit la voie de livraison et réconcilie les résultats :
    - émetteur et partenaire inscrits → soumission réseau ; en cas de
      réussite, le PDF est stocké puis un email de confirmation est envoyé ;
    - échec réseau (refus ou erreur de l'annuaire / du point d'accès) →
      le PDF est stocké et l'email sert de repli : succès partiel ;
    - pas de voie réseau → PDF stocké puis email.
    Si aucune voie n'aboutit, le PDF est supprimé et l'envoi échoue.
EN: Picks the delivery path and reconciles outcomes: network submission
    when both parties are registered, email fallback on any network
    failure (partial success), email only otherwise. When no path
    succeeds, the PDF is removed and the send fails.
"""

import logging

from pydantic import BaseModel

from peppol_billing.config import BillingContext
from peppol_billing.delivery.artifacts import BaseArtifactStore, artifact_path
from peppol_billing.delivery.email import BaseEmailGateway, EmailRequest
from peppol_billing.errors import EmailDeliveryError, NetworkError, ValidationError
from peppol_billing.models.document import BillingDocument
from peppol_billing.network.base import BaseNetworkGateway
from peppol_billing.network.formatter import DocumentFormatter
from peppol_billing.network.routing import RoutingResolver

logger = logging.getLogger(__name__)


class SubmissionOutcome(BaseModel):
    """Résultat d'une soumission, retourné à l'appelant et non persisté."""

    network_submitted: bool = False
    email_sent: bool = False
    network_error: str | None = None
    email_error: str | None = None
    artifact_path: str | None = None
    submission_id: str | None = None

    @property
    def delivered(self) -> bool:
        """Au moins une voie a abouti / At least one path succeeded."""
        return self.network_submitted or self.email_sent

    @property
    def partial(self) -> bool:
        """Réseau en échec, rattrapé par l'email / Network failed, email recovered."""
        return self.network_error is not None and self.email_sent


def check_preconditions(
    document: BillingDocument | None,
    context: BillingContext | None,
    pdf_bytes: bytes | None,
    *,
    require_artifact: bool = True,
) -> None:
    """Vérifie les données requises avant tout appel externe.

    FR: `require_artifact=False` permet le contrôle avant le rendu du PDF.
    EN: `require_artifact=False` allows the check before the PDF is rendered.

    Raises:
        ValidationError: Liste des éléments manquants dans `errors`.
    """
    missing: list[str] = []
    if document is None:
        missing.append("document")
    else:
        if document.party is None:
            missing.append("party")
        if not document.items:
            missing.append("items")
    if context is None or context.issuer is None:
        missing.append("issuer")
    if require_artifact and not pdf_bytes:
        missing.append("artifact")
    if missing:
        raise ValidationError(
            f"Données manquantes pour l'envoi : {', '.join(missing)}", errors=missing
        )


class SubmissionOrchestrator:
    """Soumet un document au réseau ou par email et stocke son PDF."""

    def __init__(
        self,
        gateway: BaseNetworkGateway,
        artifacts: BaseArtifactStore,
        email: BaseEmailGateway,
        formatter: DocumentFormatter | None = None,
    ) -> None:
        self.gateway = gateway
        self.artifacts = artifacts
        self.email = email
        self.formatter = formatter

    def _formatter(self, context: BillingContext) -> DocumentFormatter:
        if self.formatter is not None:
            return self.formatter
        return DocumentFormatter(RoutingResolver(self.gateway, context.default_country))

    async def _submit_network(
        self,
        document: BillingDocument,
        context: BillingContext,
        outcome: SubmissionOutcome,
    ) -> None:
        try:
            payload = await self._formatter(context).format(document, context)
            response = await self.gateway.submit(payload)
        except NetworkError as exc:
            logger.warning(
                "Soumission réseau de %s impossible, repli email : %s",
                document.number,
                exc.message,
            )
            outcome.network_error = exc.message
            return
        except Exception as exc:
            logger.exception(
                "Erreur inattendue du point d'accès pour %s, repli email",
                document.number,
            )
            outcome.network_error = f"Erreur inattendue du point d'accès : {exc}"
            return

        if not response.ok:
            logger.warning(
                "Soumission réseau de %s refusée, repli email : %s",
                document.number,
                response.body,
            )
            outcome.network_error = f"Document refusé par le point d'accès : {response.body}"
            return

        outcome.network_submitted = True
        outcome.submission_id = response.submission_id
        logger.info("Document %s soumis au réseau (%s)", document.number, response.submission_id)

    async def submit(
        self,
        document: BillingDocument,
        context: BillingContext,
        pdf_bytes: bytes,
    ) -> SubmissionOutcome:
        """Livre le document et stocke son PDF.

        Args:
            document: Document en brouillon, totaux réconciliés.
            context: Émetteur, devise, langue et pays par défaut.
            pdf_bytes: PDF rendu.

        Returns:
            Le résultat détaillé, y compris en cas de succès partiel.

        Raises:
            ValidationError: Donnée manquante (aucun appel externe effectué).
            StorageError: Échec d'écriture du PDF.
            EmailDeliveryError: Aucune voie de livraison n'a abouti (PDF supprimé).
        """
        check_preconditions(document, context, pdf_bytes)
        # Lève ValidationError sur une ligne invalide avant tout appel externe
        document.tax_breakdown()

        outcome = SubmissionOutcome()
        issuer = context.issuer
        if issuer.is_registered and document.party.is_registered:
            await self._submit_network(document, context, outcome)

        path = artifact_path(document.id, document.kind)
        await self.artifacts.put(path, pdf_bytes)
        outcome.artifact_path = path
        url = await self.artifacts.get_url(path)

        request = EmailRequest(
            recipient_name=document.party.name,
            recipient_email=document.party.email,
            document_number=document.number,
            document_kind=document.kind,
            issuer_name=issuer.name,
            artifact_url=url,
            artifact_bytes=pdf_bytes,
            artifact_filename=path.rsplit("/", 1)[-1],
            terms_url=issuer.terms_url,
            cc_email=issuer.cc_email,
        )
        try:
            await self.email.send(request)
        except EmailDeliveryError as exc:
            logger.warning("Email de %s non envoyé : %s", document.number, exc.message)
            outcome.email_error = exc.message
        else:
            outcome.email_sent = True
            logger.info(
                "Document %s envoyé par email à %s",
                document.number,
                request.recipient_email,
            )

        if not outcome.delivered:
            await self.artifacts.delete(path)
            errors = [e for e in (outcome.network_error, outcome.email_error) if e]
            raise EmailDeliveryError(
                f"Le document {document.number} n'a pu être livré : {outcome.email_error}",
                errors=errors,
            )
        return outcome
