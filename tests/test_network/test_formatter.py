"""Tests de la construction de la charge utile réseau."""

from decimal import Decimal

from peppol_billing.config import BillingContext
from peppol_billing.models.document import BillingDocument
from peppol_billing.models.enums import DocumentKind, PaymentMeansCode
from peppol_billing.network.connectors.memory import MemoryNetworkGateway
from peppol_billing.network.formatter import (
    CREDIT_NOTE_MARKER,
    DocumentFormatter,
    build_payload,
    document_note,
)
from peppol_billing.network.models import RoutingIdentifier
from peppol_billing.network.routing import RoutingResolver
from peppol_billing.tax.classifier import TaxCategory

BE_VAT = RoutingIdentifier(scheme="BE:VAT", id="BE0123456789")


class TestBuildPayload:
    """Tests de la charge utile d'une facture."""

    def test_header(self, invoice: BillingDocument, context: BillingContext) -> None:
        payload = build_payload(invoice, context, [BE_VAT])

        assert payload.document_type == DocumentKind.INVOICE
        assert payload.number == "INV-000001"
        assert payload.currency == "EUR"
        assert payload.tax_system == "tax_line_percentages"
        assert payload.legal_entity_id == "LE-ISSUER"
        assert payload.receiver_legal_entity_id == "LE-PARTY"
        assert payload.note == "Merci pour votre confiance"

    def test_lines_and_subtotals(
        self, invoice: BillingDocument, context: BillingContext
    ) -> None:
        payload = build_payload(invoice, context, [BE_VAT])

        assert [line.amount_excluding_vat for line in payload.lines] == [
            Decimal("100.00"),
            Decimal("50.00"),
        ]
        assert payload.lines[0].tax.category == TaxCategory.STANDARD
        assert payload.lines[0].tax.country == "BE"
        assert [s.tax_amount for s in payload.tax_subtotals] == [
            Decimal("21.00"),
            Decimal("0.00"),
        ]
        assert payload.tax_subtotals[1].category == TaxCategory.ZERO

    def test_total_recomputed_from_subtotals(
        self, invoice: BillingDocument, context: BillingContext
    ) -> None:
        """Un total stocké incohérent n'est pas transmis."""
        invoice.total = Decimal("999.99")
        payload = build_payload(invoice, context, [BE_VAT])
        assert payload.amount_including_vat == Decimal("171.00")

    def test_routing(self, invoice: BillingDocument, context: BillingContext) -> None:
        payload = build_payload(invoice, context, [BE_VAT])

        assert payload.routing.emails == ["compta@brasserie-parc.be"]
        assert payload.routing.e_identifiers == [BE_VAT]
        assert payload.buyer.public_identifiers == [BE_VAT]

    def test_parties(self, invoice: BillingDocument, context: BillingContext) -> None:
        payload = build_payload(invoice, context, [])

        assert payload.seller.company_name == "Atelier Lumière SRL"
        assert payload.seller.address.street1 == "Rue de la Loi 16"
        assert payload.buyer.company_name == "Brasserie du Parc SA"
        assert payload.buyer.address.zip == "1050"
        assert payload.buyer.address.country == "BE"

    def test_payment_means_from_issuer_iban(
        self, invoice: BillingDocument, context: BillingContext
    ) -> None:
        payload = build_payload(invoice, context, [])

        assert len(payload.payment_means) == 1
        means = payload.payment_means[0]
        assert means.account == "BE68539007547034"
        assert means.holder == "Atelier Lumière SRL"
        assert means.code == PaymentMeansCode.CREDIT_TRANSFER

    def test_no_payment_means_without_iban(
        self, invoice: BillingDocument, context: BillingContext
    ) -> None:
        issuer = context.issuer.model_copy(update={"bank_account": None})
        payload = build_payload(invoice, context.model_copy(update={"issuer": issuer}), [])
        assert payload.payment_means == []


class TestCreditNotePayload:
    """Tests des règles propres aux avoirs."""

    def test_amounts_negated(
        self, credit_note: BillingDocument, context: BillingContext
    ) -> None:
        payload = build_payload(credit_note, context, [BE_VAT])

        assert payload.document_type == DocumentKind.CREDIT_NOTE
        assert payload.lines[0].amount_excluding_vat == Decimal("-100.00")
        assert payload.tax_subtotals[0].taxable_amount == Decimal("-100.00")
        assert payload.tax_subtotals[0].tax_amount == Decimal("-21.00")
        assert payload.amount_including_vat == Decimal("-171.00")

    def test_note_prefixed(self, credit_note: BillingDocument) -> None:
        assert document_note(credit_note) == f"{CREDIT_NOTE_MARKER}: Remboursement partiel"

    def test_note_marker_without_notes(self, credit_note: BillingDocument) -> None:
        credit_note.notes = None
        assert document_note(credit_note) == CREDIT_NOTE_MARKER


class TestDocumentFormatter:
    async def test_resolves_then_builds(
        self,
        memory_gateway: MemoryNetworkGateway,
        invoice: BillingDocument,
        context: BillingContext,
    ) -> None:
        formatter = DocumentFormatter(RoutingResolver(memory_gateway))
        payload = await formatter.format(invoice, context)
        assert payload.routing.e_identifiers[0].scheme == "BE:EN"


class TestSubCentAmounts:
    """Montants à plus de deux décimales (prix stockés à 4 décimales)."""

    def test_lines_add_up_to_subtotals(
        self, invoice: BillingDocument, context: BillingContext, make_item
    ) -> None:
        invoice.items = [
            make_item("1.005", "21%"),
            make_item("1.005", "21%"),
            make_item("2.3349", "6%"),
        ]
        payload = build_payload(invoice, context, [BE_VAT])

        lines_total = sum(line.amount_excluding_vat for line in payload.lines)
        taxable_total = sum(s.taxable_amount for s in payload.tax_subtotals)
        assert lines_total == taxable_total == Decimal("4.35")
        assert payload.amount_including_vat == invoice.tax_breakdown().total
