"""Tests d'intégration pour la passerelle réseau en mémoire."""

import pytest

from peppol_billing.config import BillingContext
from peppol_billing.models.document import BillingDocument
from peppol_billing.network.connectors.memory import MemoryNetworkGateway
from peppol_billing.network.errors import (
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


class TestSubmit:
    """Tests de soumission."""

    async def test_submit_returns_ok(
        self,
        memory_gateway: MemoryNetworkGateway,
        invoice: BillingDocument,
        context: BillingContext,
    ) -> None:
        response = await memory_gateway.submit(build_payload(invoice, context, []))

        assert response.ok
        assert response.submission_id == "SUB-000001"
        assert response.submitted_at is not None
        assert len(memory_gateway.submissions) == 1

    async def test_submit_unique_ids(
        self,
        memory_gateway: MemoryNetworkGateway,
        invoice: BillingDocument,
        context: BillingContext,
    ) -> None:
        payload = build_payload(invoice, context, [])
        first = await memory_gateway.submit(payload)
        second = await memory_gateway.submit(payload)
        assert first.submission_id != second.submission_id

    async def test_rejected_submission(
        self,
        memory_gateway: MemoryNetworkGateway,
        invoice: BillingDocument,
        context: BillingContext,
    ) -> None:
        memory_gateway.reject_submissions = True
        response = await memory_gateway.submit(build_payload(invoice, context, []))
        assert not response.ok
        assert memory_gateway.submissions == []

    async def test_outage_raises(
        self,
        memory_gateway: MemoryNetworkGateway,
        invoice: BillingDocument,
        context: BillingContext,
    ) -> None:
        memory_gateway.fail_submissions = True
        with pytest.raises(NetworkConnectionError):
            await memory_gateway.submit(build_payload(invoice, context, []))


class TestDirectory:
    """Tests de l'annuaire et des entités légales."""

    async def test_lookup_unknown_entity(
        self, memory_gateway: MemoryNetworkGateway
    ) -> None:
        with pytest.raises(NetworkNotFoundError):
            await memory_gateway.lookup_identifiers("LE-UNKNOWN")

    async def test_create_then_add_identifier(
        self, memory_gateway: MemoryNetworkGateway
    ) -> None:
        entity = await memory_gateway.create_legal_entity(LegalEntity(party_name="ACME"))
        identifier = RoutingIdentifier(scheme="NL:VAT", id="NL001")

        await memory_gateway.add_identifier(entity.id, identifier, PEPPOL_SUPERSCHEME)

        assert await memory_gateway.lookup_identifiers(entity.id) == [identifier]

    async def test_duplicate_identifier_rejected(
        self, memory_gateway: MemoryNetworkGateway
    ) -> None:
        entity = await memory_gateway.create_legal_entity(LegalEntity(party_name="ACME"))
        taken = RoutingIdentifier(scheme="BE:VAT", id="BE0123456789")
        with pytest.raises(NetworkRejectedError, match="déjà attribué"):
            await memory_gateway.add_identifier(entity.id, taken, PEPPOL_SUPERSCHEME)

    async def test_update_keeps_identifiers(
        self, memory_gateway: MemoryNetworkGateway
    ) -> None:
        updated = await memory_gateway.update_legal_entity(
            "LE-PARTY", LegalEntity(party_name="Brasserie du Parc SA", city="Ixelles")
        )
        assert updated.city == "Ixelles"
        assert len(updated.peppol_identifiers) == 2
