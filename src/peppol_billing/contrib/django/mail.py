"""Envoi des documents et relances via `django.core.mail`."""

from __future__ import annotations

import logging
import smtplib

from asgiref.sync import sync_to_async
from django.core.mail import EmailMessage

from peppol_billing.delivery.email import (
    BaseEmailGateway,
    EmailRequest,
    ReminderRequest,
    ensure_recipient,
    render_document_email,
    render_reminder_email,
)
from peppol_billing.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class DjangoEmailGateway(BaseEmailGateway):
    """Passerelle email sur le backend configuré dans Django.

    FR: Le PDF est joint s'il ne dépasse pas la limite de taille, sinon le
        lien de téléchargement figure dans le corps du message.
    EN: The PDF is attached when under the size limit, otherwise the
        download link appears in the message body.
    """

    def __init__(self, from_email: str | None = None, connection=None) -> None:
        self.from_email = from_email
        self.connection = connection

    def _deliver(self, message: EmailMessage, reference: str) -> None:
        try:
            message.send(fail_silently=False)
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception("Envoi de l'email pour %s impossible", reference)
            raise EmailDeliveryError(
                f"Envoi de l'email impossible ({reference}) : {exc}"
            ) from exc

    def _send(self, request: EmailRequest) -> None:
        recipient = ensure_recipient(request)
        subject, body = render_document_email(request)
        message = EmailMessage(
            subject=subject,
            body=body,
            from_email=self.from_email,
            to=[recipient],
            cc=[request.cc_email] if request.cc_email else None,
            connection=self.connection,
        )
        if request.attach_artifact:
            message.attach(
                request.artifact_filename, request.artifact_bytes, "application/pdf"
            )
        self._deliver(message, request.document_number)

    def _send_reminder(self, request: ReminderRequest) -> None:
        recipient = ensure_recipient(request)
        subject, body = render_reminder_email(request)
        message = EmailMessage(
            subject=subject,
            body=body,
            from_email=self.from_email,
            to=[recipient],
            connection=self.connection,
        )
        self._deliver(message, request.document_number)

    async def send(self, request: EmailRequest) -> None:
        await sync_to_async(self._send)(request)

    async def send_reminder(self, request: ReminderRequest) -> None:
        await sync_to_async(self._send_reminder)(request)
