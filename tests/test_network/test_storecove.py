"""Tests du connecteur Storecove (session HTTP simulée)."""

import base64
from unittest.mock import MagicMock

import pytest
import requests

from peppol_billing.config import BillingContext
from peppol_billing.models.document import BillingDocument
from peppol_billing.network.connectors.storecove import (
    DEFAULT_BASE_URL,
    StorecoveGateway,
    entity_to_wire,
    payload_to_wire,
)
from peppol_billing.network.errors import (
    NetworkAuthenticationError,
    NetworkConnectionError,
    NetworkNotFoundError,
    NetworkRejectedError,
)
from peppol_billing.network.formatter import build_payload
from peppol_billing.network.models import (
    PEPPOL_SUPERSCHEME,
    LegalEntity,
    RoutingIdentifier,
)

BE_VAT = RoutingIdentifier(scheme="BE:VAT", id="BE0123456789")


class TestPayloadToWire:
    """Tests de la traduction au format Storecove."""

    def test_invoice_document(
        self, invoice: BillingDocument, context: BillingContext
    ) -> None:
        wire = payload_to_wire(build_payload(invoice, context, [BE_VAT]))

        assert wire["legalEntityId"] == "LE-ISSUER"
        assert wire["receiverLegalEntityId"] == "LE-PARTY"
        assert wire["routing"] == {
            "emails": ["compta@brasserie-parc.be"],
            "eIdentifiers": [{"scheme": "BE:VAT", "id": "BE0123456789"}],
        }
        document = wire["document"]
        assert document["documentType"] == "invoice"
        body = document["invoice"]
        assert body["invoiceNumber"] == "INV-000001"
        assert body["issueDate"] == "2026-09-15"
        assert body["dueDate"] == "2026-10-15"
        assert body["amountIncludingVat"] == 171.0
        assert body["accountingCustomerParty"]["publicIdentifiers"] == [
            {"scheme": "BE:VAT", "id": "BE0123456789"}
        ]
        assert body["paymentMeansArray"][0]["code"] == "credit_transfer"

    def test_zero_category_is_zero_rated(
        self, invoice: BillingDocument, context: BillingContext
    ) -> None:
        body = payload_to_wire(build_payload(invoice, context, []))["document"]["invoice"]
        assert [line["tax"]["category"] for line in body["invoiceLines"]] == [
            "standard",
            "zero_rated",
        ]
        assert body["taxSubtotals"][1]["category"] == "zero_rated"

    def test_credit_note_sent_as_negative_invoice(
        self, credit_note: BillingDocument, context: BillingContext
    ) -> None:
        wire = payload_to_wire(build_payload(credit_note, context, []))
        body = wire["document"]["invoice"]

        assert wire["document"]["documentType"] == "invoice"
        assert body["amountIncludingVat"] == -171.0
        assert body["note"].startswith("CREDIT NOTE")
        assert "dueDate" not in body

    def test_entity_to_wire(self) -> None:
        wire = entity_to_wire(LegalEntity(id="42", party_name="ACME", country="BE"))
        assert "id" not in wire
        assert "peppol_identifiers" not in wire
        assert wire["county"] == ""
        assert wire["advertisements"] == ["invoice"]


class TestStorecoveGateway:
    """Tests des appels HTTP."""

    def test_headers_and_defaults(
        self, storecove: StorecoveGateway, http_session: MagicMock
    ) -> None:
        assert storecove.base_url == DEFAULT_BASE_URL
        assert http_session.headers["Authorization"] == "Bearer secret-key"
        assert storecove.timeout == 30.0

    async def test_submit_success(
        self,
        storecove: StorecoveGateway,
        http_session: MagicMock,
        response_factory,
        invoice: BillingDocument,
        context: BillingContext,
    ) -> None:
        http_session.request.return_value = response_factory(200, {"guid": "abc-123"})

        response = await storecove.submit(build_payload(invoice, context, []))

        assert response.ok
        assert response.submission_id == "abc-123"
        method, url = http_session.request.call_args.args
        assert method == "POST"
        assert url == f"{DEFAULT_BASE_URL}/document_submissions"
        assert http_session.request.call_args.kwargs["timeout"] == 30.0

    async def test_submit_refused_returns_not_ok(
        self,
        storecove: StorecoveGateway,
        http_session: MagicMock,
        response_factory,
        invoice: BillingDocument,
        context: BillingContext,
    ) -> None:
        http_session.request.return_value = response_factory(
            422, {"errors": ["invalid vat"]}
        )
        response = await storecove.submit(build_payload(invoice, context, []))
        assert not response.ok
        assert response.body == {"errors": ["invalid vat"]}

    async def test_submit_ubl_format(
        self,
        http_session: MagicMock,
        response_factory,
        invoice: BillingDocument,
        context: BillingContext,
    ) -> None:
        gateway = StorecoveGateway(
            api_key="k", session=http_session, submission_format="ubl"
        )
        http_session.request.return_value = response_factory(200, {"guid": "g"})

        await gateway.submit(build_payload(invoice, context, []))

        sent = http_session.request.call_args.kwargs["json"]
        raw = sent["document"]["rawDocumentData"]
        assert raw["parseStrategy"] == "ubl"
        assert base64.b64decode(raw["document"]).startswith(b"<?xml")

    @pytest.mark.parametrize("status", [401, 403])
    async def test_authentication_error(
        self,
        storecove: StorecoveGateway,
        http_session: MagicMock,
        response_factory,
        status: int,
    ) -> None:
        http_session.request.return_value = response_factory(status, {})
        with pytest.raises(NetworkAuthenticationError):
            await storecove.lookup_identifiers("123")

    async def test_not_found(
        self, storecove: StorecoveGateway, http_session: MagicMock, response_factory
    ) -> None:
        http_session.request.return_value = response_factory(404, {})
        with pytest.raises(NetworkNotFoundError):
            await storecove.lookup_identifiers("123")

    async def test_transport_error(
        self, storecove: StorecoveGateway, http_session: MagicMock
    ) -> None:
        http_session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(NetworkConnectionError, match="connexion"):
            await storecove.lookup_identifiers("123")

    async def test_lookup_identifiers(
        self, storecove: StorecoveGateway, http_session: MagicMock, response_factory
    ) -> None:
        http_session.request.return_value = response_factory(
            200,
            {
                "id": 123,
                "party_name": "Brasserie du Parc SA",
                "peppol_identifiers": [
                    {"scheme": "BE:EN", "identifier": "0123456789"},
                    {"scheme": "", "identifier": "ignored"},
                ],
            },
        )
        identifiers = await storecove.lookup_identifiers("123")
        assert identifiers == [RoutingIdentifier(scheme="BE:EN", id="0123456789")]

    async def test_lookup_non_json_body_rejected(
        self, storecove: StorecoveGateway, http_session: MagicMock, response_factory
    ) -> None:
        """Une page HTML de maintenance en 200 devient une erreur réseau."""
        http_session.request.return_value = response_factory(
            200, None, text="<html>maintenance</html>"
        )
        with pytest.raises(NetworkRejectedError, match="illisible"):
            await storecove.lookup_identifiers("123")

    @pytest.mark.parametrize(
        "body",
        [
            ["not", "an", "object"],
            {"id": 123, "peppol_identifiers": "BE:EN"},
        ],
    )
    async def test_lookup_unexpected_shape_rejected(
        self,
        storecove: StorecoveGateway,
        http_session: MagicMock,
        response_factory,
        body,
    ) -> None:
        http_session.request.return_value = response_factory(200, body)
        with pytest.raises(NetworkRejectedError):
            await storecove.lookup_identifiers("123")

    async def test_create_non_json_body_rejected(
        self, storecove: StorecoveGateway, http_session: MagicMock, response_factory
    ) -> None:
        http_session.request.return_value = response_factory(201, None, text="OK")
        with pytest.raises(NetworkRejectedError):
            await storecove.create_legal_entity(LegalEntity(party_name="ACME"))

    async def test_create_legal_entity(
        self, storecove: StorecoveGateway, http_session: MagicMock, response_factory
    ) -> None:
        http_session.request.return_value = response_factory(
            200, {"id": 77, "party_name": "ACME"}
        )
        created = await storecove.create_legal_entity(LegalEntity(party_name="ACME"))
        assert created.id == "77"

    async def test_add_identifier_rejected(
        self, storecove: StorecoveGateway, http_session: MagicMock, response_factory
    ) -> None:
        http_session.request.return_value = response_factory(
            422, None, text="already registered"
        )
        with pytest.raises(NetworkRejectedError) as exc_info:
            await storecove.add_identifier("77", BE_VAT, PEPPOL_SUPERSCHEME)
        assert exc_info.value.errors == ["already registered"]
        body = http_session.request.call_args.kwargs["json"]
        assert body == {
            "identifier": "BE0123456789",
            "scheme": "BE:VAT",
            "superscheme": "iso6523-actorid-upis",
        }
