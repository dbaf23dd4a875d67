"""Modèles de données pour le réseau d'échange.

FR: Identifiants de routage, charge utile de soumission (neutre vis-à-vis
    du point d'accès), réponses et entités légales.
EN: Routing identifiers, access-point-neutral submission payload,
    responses and legal entities.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from peppol_billing.models.enums import DocumentKind, PaymentMeansCode
from peppol_billing.tax.classifier import TaxCategory

PEPPOL_SUPERSCHEME = "iso6523-actorid-upis"


class RoutingIdentifier(BaseModel):
    """Identifiant de routage `(scheme, id)` d'une partie inscrite.

    FR: Résolu à chaque tentative de soumission, jamais persisté.
    EN: Resolved on every submission attempt, never persisted.
    """

    scheme: str = Field(..., description="Schéma, ex. 'BE:VAT' / Scheme")
    id: str = Field(..., description="Valeur de l'identifiant / Identifier value")


# --- Charge utile de soumission ---


class PayloadAddress(BaseModel):
    """Adresse d'une partie."""

    street1: str = ""
    zip: str = ""
    city: str = ""
    country: str = ""


class PayloadParty(BaseModel):
    """Bloc partie : nom, adresse, TVA et identifiants publics."""

    company_name: str
    address: PayloadAddress
    vat_number: str | None = None
    public_identifiers: list[RoutingIdentifier] = Field(default_factory=list)


class LineTax(BaseModel):
    """TVA d'une ligne."""

    percentage: Decimal
    category: TaxCategory
    country: str


class PayloadLine(BaseModel):
    """Ligne de la charge utile (montant HT, signé pour les avoirs)."""

    description: str
    amount_excluding_vat: Decimal
    tax: LineTax


class TaxSubtotal(BaseModel):
    """Tranche de TVA telle que transmise au réseau."""

    percentage: Decimal
    category: TaxCategory
    country: str
    taxable_amount: Decimal
    tax_amount: Decimal


class PaymentMeans(BaseModel):
    """Moyen de paiement (virement sur l'IBAN de l'émetteur)."""

    account: str
    holder: str
    code: PaymentMeansCode = PaymentMeansCode.CREDIT_TRANSFER


class Routing(BaseModel):
    """Routage : emails du destinataire et identifiants électroniques."""

    emails: list[str] = Field(default_factory=list)
    e_identifiers: list[RoutingIdentifier] = Field(default_factory=list)


class SubmissionPayload(BaseModel):
    """Document prêt à être soumis au réseau d'échange.

    FR: Construit par `DocumentFormatter`. Le total TTC est toujours
        recalculé à partir de `tax_subtotals`. Pour un avoir, montants
        des lignes, tranches et total sont négatifs.
    EN: Built by `DocumentFormatter`. The grand total is always recomputed
        from `tax_subtotals`. For a credit note, line, group and total
        amounts are negative.
    """

    legal_entity_id: str | None = Field(
        default=None, description="Entité légale émettrice / Sender legal entity"
    )
    receiver_legal_entity_id: str | None = Field(
        default=None, description="Entité légale destinataire / Receiver"
    )
    document_type: DocumentKind
    number: str
    issue_date: date
    due_date: date | None = None
    currency: str
    tax_system: str = "tax_line_percentages"
    seller: PayloadParty
    buyer: PayloadParty
    lines: list[PayloadLine]
    tax_subtotals: list[TaxSubtotal]
    payment_means: list[PaymentMeans] = Field(default_factory=list)
    note: str | None = None
    routing: Routing
    amount_including_vat: Decimal


# --- Réponses du point d'accès ---


class SubmissionResponse(BaseModel):
    """Réponse à la soumission d'un document.

    FR: `ok` est faux pour toute réponse non réussie du point d'accès ;
        `body` conserve la réponse brute pour le diagnostic.
    EN: `ok` is false for any unsuccessful access-point response; `body`
        keeps the raw response for diagnostics.
    """

    ok: bool
    body: dict[str, Any] | str | None = None
    submission_id: str | None = None
    submitted_at: datetime | None = None


class LegalEntity(BaseModel):
    """Entité légale enregistrée sur le point d'accès."""

    id: str | None = None
    party_name: str
    line1: str = ""
    line2: str = ""
    zip: str = ""
    city: str = ""
    country: str = ""
    acts_as_sender: bool = False
    acts_as_receiver: bool = True
    tax_registered: bool = True
    public: bool = True
    advertisements: list[str] = Field(default_factory=lambda: ["invoice"])
    peppol_identifiers: list[RoutingIdentifier] = Field(default_factory=list)
