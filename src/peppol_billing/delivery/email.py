"""Envoi des documents et relances par email.

FR: Requêtes d'envoi (document, relance d'impayé), rendu du sujet et du
    corps, et interface abstraite des passerelles email. Un PDF de plus de
    3,5 Mo n'est pas joint : seul le lien est envoyé. L'adresse de
    comptabilité (`cc_email`) reçoit une copie.
EN: Send requests (document, overdue reminder), subject and body
    rendering, and the abstract email gateway interface. A PDF above
    3.5 MB is not attached: only the link is sent. The bookkeeping address
    (`cc_email`) gets a copy.
"""

from abc import ABCMeta, abstractmethod
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from peppol_billing.errors import EmailDeliveryError
from peppol_billing.models.enums import DocumentKind

MAX_ATTACHMENT_BYTES = int(3.5 * 1024 * 1024)
TERMS_FILENAME = "terms-and-conditions.pdf"

_KIND_LABELS = {
    DocumentKind.INVOICE: "Invoice",
    DocumentKind.CREDIT_NOTE: "Credit note",
}


class EmailRequest(BaseModel):
    """Envoi d'un document à son destinataire."""

    recipient_name: str
    recipient_email: str | None = None
    document_number: str
    document_kind: DocumentKind = DocumentKind.INVOICE
    issuer_name: str
    artifact_url: str | None = None
    artifact_bytes: bytes | None = Field(default=None, repr=False)
    artifact_filename: str = "invoice.pdf"
    terms_url: str | None = None
    cc_email: str | None = None

    @property
    def attach_artifact(self) -> bool:
        """Le PDF est joint (présent et sous la limite de taille)."""
        return (
            self.artifact_bytes is not None
            and len(self.artifact_bytes) <= MAX_ATTACHMENT_BYTES
        )

    @property
    def recipients(self) -> list[str]:
        return [e for e in (self.recipient_email, self.cc_email) if e]


class ReminderRequest(BaseModel):
    """Relance d'un document en retard de paiement."""

    recipient_name: str
    recipient_email: str | None = None
    document_number: str
    due_date: date
    amount: Decimal
    currency: str = "EUR"
    issuer_name: str


def ensure_recipient(request: EmailRequest | ReminderRequest) -> str:
    """Retourne l'email du destinataire ou lève `EmailDeliveryError`."""
    if not request.recipient_email:
        raise EmailDeliveryError(
            f"L'email du client est obligatoire ({request.document_number})"
        )
    return request.recipient_email


def render_document_email(request: EmailRequest) -> tuple[str, str]:
    """Sujet et corps texte de l'envoi d'un document."""
    label = _KIND_LABELS[request.document_kind]
    subject = f"{label} #{request.document_number}"
    lines = [
        f"Dear {request.recipient_name},",
        "",
        f"Your {label.lower()} #{request.document_number} is now available.",
    ]
    if request.attach_artifact:
        lines.append("Please find the attached PDF for your records.")
    elif request.artifact_url:
        lines.append(f"It is available for viewing at: {request.artifact_url}")
    if request.terms_url:
        lines.append(f"Our terms and conditions: {request.terms_url}")
    lines += [
        "",
        "If you have any questions, please don't hesitate to contact us.",
        "",
        "Best regards,",
        request.issuer_name,
    ]
    return subject, "\n".join(lines)


def render_reminder_email(request: ReminderRequest) -> tuple[str, str]:
    """Sujet et corps texte d'une relance d'impayé."""
    subject = f"Overdue Invoice Reminder - Invoice #{request.document_number}"
    body = "\n".join(
        [
            f"Dear {request.recipient_name},",
            "",
            f"This is a friendly reminder that invoice #{request.document_number} "
            f"was due on {request.due_date:%B %d, %Y}.",
            f"Outstanding amount: {request.amount:.2f} {request.currency}",
            "Please process this payment at your earliest convenience.",
            "If you have already made the payment, please disregard this reminder.",
            "",
            "Best regards,",
            request.issuer_name,
        ]
    )
    return subject, body


class BaseEmailGateway(metaclass=ABCMeta):
    """Classe de base abstraite pour les passerelles email.

    FR: Toute erreur d'envoi doit être levée sous forme
        d'`EmailDeliveryError`.
    EN: Every send failure must be raised as `EmailDeliveryError`.
    """

    @abstractmethod
    async def send(self, request: EmailRequest) -> None:
        """Envoie un document.

        Raises:
            EmailDeliveryError: Destinataire absent ou échec d'envoi.
        """
        ...

    @abstractmethod
    async def send_reminder(self, request: ReminderRequest) -> None:
        """Envoie une relance d'impayé.

        Raises:
            EmailDeliveryError: Destinataire absent ou échec d'envoi.
        """
        ...
