"""Construction de la charge utile de soumission réseau.

FR: Compose l'en-tête du document, les blocs vendeur et acheteur, une
    ligne par article, les tranches de TVA (agrégation + catégorie typée),
    le moyen de paiement, la note et les identifiants de routage. Le total
    TTC est toujours recalculé depuis les tranches produites ici, jamais
    repris du document. Pour un avoir, tous les montants sont négatifs et
    la note commence par « CREDIT NOTE ».
EN: Composes the document header, seller and buyer blocks, one line per
    item, the tax groups (aggregation + typed category), payment means,
    notes and routing identifiers. The grand total is always recomputed from the
    groups built here, never taken from the document. For a credit note
    every amount is negative and the note starts with "CREDIT NOTE".
"""

from decimal import Decimal

from peppol_billing.config import BillingContext
from peppol_billing.models.document import BillingDocument
from peppol_billing.models.party import Address
from peppol_billing.network.models import (
    LineTax,
    PayloadAddress,
    PayloadLine,
    PayloadParty,
    PaymentMeans,
    Routing,
    RoutingIdentifier,
    SubmissionPayload,
    TaxSubtotal,
)
from peppol_billing.network.routing import RoutingResolver, country_of
from peppol_billing.tax.aggregation import round_amount

CREDIT_NOTE_MARKER = "CREDIT NOTE"


def _signed(value: Decimal, negate: bool) -> Decimal:
    return -abs(value) if negate else value


def _street1(address: Address) -> str:
    return " ".join(p for p in (address.street, address.number) if p).strip()


def _payload_address(address: Address, country: str) -> PayloadAddress:
    return PayloadAddress(
        street1=_street1(address),
        zip=address.postal_code,
        city=address.city,
        country=country,
    )


def document_note(document: BillingDocument) -> str | None:
    """Note libre transmise, préfixée pour les avoirs."""
    notes = (document.notes or "").strip()
    if document.is_credit_note:
        return f"{CREDIT_NOTE_MARKER}: {notes}" if notes else CREDIT_NOTE_MARKER
    return notes or None


def build_payload(
    document: BillingDocument,
    context: BillingContext,
    identifiers: list[RoutingIdentifier],
) -> SubmissionPayload:
    """Construit la charge utile à partir d'identifiants déjà résolus.

    Args:
        document: Document avec partenaire et lignes.
        context: Émetteur, devise et pays par défaut.
        identifiers: Identifiants de routage du destinataire.

    Returns:
        La charge utile, total recalculé depuis ses propres tranches.

    Raises:
        ValidationError: Montant négatif ou taux illisible dans les lignes.
    """
    issuer = context.issuer
    party = document.party
    negate = document.is_credit_note
    country = country_of(party.address, context.default_country)

    lines = [
        PayloadLine(
            description=item.description,
            amount_excluding_vat=_signed(round_amount(item.amount), negate),
            tax=LineTax(
                percentage=item.vat_rate.percentage,
                category=item.vat_rate.category,
                country=country,
            ),
        )
        for item in document.items
    ]

    breakdown = document.tax_breakdown()
    subtotals = [
        TaxSubtotal(
            percentage=group.percentage,
            category=group.category,
            country=country,
            taxable_amount=_signed(group.subtotal, negate),
            tax_amount=_signed(group.tax_amount, negate),
        )
        for group in breakdown.groups
    ]
    total = sum(
        (s.taxable_amount + s.tax_amount for s in subtotals), Decimal("0.00")
    )

    payment_means: list[PaymentMeans] = []
    if issuer.bank_account and issuer.bank_account.iban:
        payment_means.append(
            PaymentMeans(account=issuer.bank_account.iban, holder=issuer.name)
        )

    return SubmissionPayload(
        legal_entity_id=issuer.network_registration_id,
        receiver_legal_entity_id=party.network_registration_id,
        document_type=document.kind,
        number=document.number,
        issue_date=document.issue_date,
        due_date=document.due_date,
        currency=context.currency,
        seller=PayloadParty(
            company_name=issuer.name,
            address=_payload_address(
                issuer.address, country_of(issuer.address, context.default_country)
            ),
            vat_number=issuer.vat_number,
        ),
        buyer=PayloadParty(
            company_name=party.name,
            address=_payload_address(party.address, country),
            vat_number=party.vat_number,
            public_identifiers=list(identifiers),
        ),
        lines=lines,
        tax_subtotals=subtotals,
        payment_means=payment_means,
        note=document_note(document),
        routing=Routing(
            emails=[party.email] if party.email else [],
            e_identifiers=list(identifiers),
        ),
        amount_including_vat=total,
    )


class DocumentFormatter:
    """Résout le routage puis construit la charge utile."""

    def __init__(self, resolver: RoutingResolver) -> None:
        self.resolver = resolver

    async def format(
        self, document: BillingDocument, context: BillingContext
    ) -> SubmissionPayload:
        identifiers = await self.resolver.resolve(document.party)
        return build_payload(document, context, identifiers)
