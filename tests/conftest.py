"""Fixtures partagées : émetteur, partenaire, lignes et contexte."""

from datetime import date
from decimal import Decimal

import pytest

from peppol_billing.config import BillingContext
from peppol_billing.models.document import BillingDocument, CatalogItem, LineItem
from peppol_billing.models.enums import DocumentKind, PartyType
from peppol_billing.models.party import Address, BankAccount, IssuerProfile, Party


def _make_item(amount: str, vat: str, title: str = "Prestation") -> LineItem:
    return LineItem(
        item=CatalogItem(title=title, unit_price=Decimal(amount), vat_rate_label=vat)
    )


@pytest.fixture
def make_item():
    """Fabrique de lignes de quantité 1 au montant et au taux donnés."""
    return _make_item


@pytest.fixture
def issuer() -> IssuerProfile:
    """Émetteur inscrit sur le réseau, avec IBAN."""
    return IssuerProfile(
        id="issuer-1",
        name="Atelier Lumière SRL",
        email="facturation@atelier-lumiere.be",
        address=Address(
            street="Rue de la Loi",
            number="16",
            postal_code="1000",
            city="Bruxelles",
            country_code="BE",
        ),
        vat_number="BE0987654321",
        bank_account=BankAccount(iban="BE68539007547034", bic="GKCCBEBB"),
        network_registration_id="LE-ISSUER",
        terms_url="https://atelier-lumiere.be/cgv.pdf",
        cc_email="compta@atelier-lumiere.be",
    )


@pytest.fixture
def party() -> Party:
    """Client professionnel inscrit sur le réseau."""
    return Party(
        id="party-1",
        name="Brasserie du Parc SA",
        type=PartyType.BUSINESS,
        address=Address(
            street="Avenue Louise",
            number="54",
            bus="3",
            postal_code="1050",
            city="Ixelles",
            country_code="BE",
        ),
        vat_number="BE0123456789",
        email="compta@brasserie-parc.be",
        network_registration_id="LE-PARTY",
    )


@pytest.fixture
def individual() -> Party:
    """Client particulier, hors réseau."""
    return Party(
        id="party-2",
        name="Jeanne Martin",
        type=PartyType.INDIVIDUAL,
        address=Address(street="Rue Haute", postal_code="1000", city="Bruxelles"),
        email="jeanne.martin@example.org",
    )


@pytest.fixture
def context(issuer: IssuerProfile) -> BillingContext:
    return BillingContext(issuer=issuer)


@pytest.fixture
def items() -> list[LineItem]:
    """Lignes à 21 % et 0 %."""
    return [_make_item("100", "21%", "Conseil"), _make_item("50", "0%", "Livraison")]


@pytest.fixture
def invoice(party: Party, items: list[LineItem]) -> BillingDocument:
    """Facture en brouillon, totaux calculés."""
    document = BillingDocument(
        id="doc-1",
        kind=DocumentKind.INVOICE,
        number="INV-000001",
        issue_date=date(2026, 9, 15),
        due_date=date(2026, 10, 15),
        notes="Merci pour votre confiance",
        party=party,
        items=items,
    )
    document.recompute_totals()
    return document


@pytest.fixture
def credit_note(party: Party, items: list[LineItem]) -> BillingDocument:
    """Avoir en brouillon, totaux calculés."""
    document = BillingDocument(
        id="doc-2",
        kind=DocumentKind.CREDIT_NOTE,
        number="CN-4821",
        issue_date=date(2026, 9, 20),
        notes="Remboursement partiel",
        party=party,
        items=items,
    )
    document.recompute_totals()
    return document
