"""Tâches Celery pour la facturation PEPPOL.

FR: Envoi d'un document et balayage quotidien des échéances. L'envoi n'est
    jamais relancé automatiquement : une soumission réseau peut avoir
    abouti avant l'échec.
EN: Document send and daily due-date sweep. Sends are never retried
    automatically: a network submission may have gone through before the
    failure.
"""

import asyncio
import logging

from celery import shared_task

from peppol_billing.contrib.django.conf import (
    get_billing_context,
    get_gateway_instance,
    get_renderer,
    get_setting,
)
from peppol_billing.contrib.django.mail import DjangoEmailGateway
from peppol_billing.contrib.django.repository import DjangoDocumentRepository
from peppol_billing.contrib.django.storage import DjangoArtifactStore
from peppol_billing.services.documents import DocumentService
from peppol_billing.services.results import Err

logger = logging.getLogger(__name__)


def get_document_service() -> DocumentService:
    """Assemble le service de documents depuis la configuration Django."""
    return DocumentService(
        repository=DjangoDocumentRepository(),
        gateway=get_gateway_instance(),
        artifacts=DjangoArtifactStore(location=get_setting("STORAGE_LOCATION")),
        email=DjangoEmailGateway(),
        renderer=get_renderer(),
    )


@shared_task
def send_document(document_id: str) -> dict:
    """Envoie un document en brouillon.

    FR: Retourne le détail de la livraison, ou la nature et le message de
        l'erreur si l'envoi a échoué.
    EN: Returns the delivery details, or the error kind and message when
        the send failed.
    """
    service = get_document_service()
    result = asyncio.run(service.send(document_id, get_billing_context()))

    if isinstance(result, Err):
        logger.warning(
            "Envoi du document %s en échec (%s) : %s",
            document_id,
            result.kind,
            result.message,
        )
        return {"ok": False, "kind": str(result.kind), "message": result.message}

    outcome = result.value
    if outcome.partial:
        logger.warning(
            "Document %s livré par email après échec réseau : %s",
            document_id,
            outcome.network_error,
        )
    return {"ok": True, **outcome.model_dump()}


@shared_task
def sweep_overdue_documents() -> int:
    """Passe en retard les documents en attente échus.

    FR: À planifier une fois par jour (celery beat).
    EN: Meant to run once a day (celery beat).
    """
    service = get_document_service()
    try:
        result = asyncio.run(service.sweep_overdue())
    except Exception:
        logger.exception("Erreur lors du balayage des échéances")
        raise

    if isinstance(result, Err):
        logger.error("Balayage des échéances en échec : %s", result.message)
        return 0
    return len(result.value)
