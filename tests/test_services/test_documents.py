"""Tests du service de gestion des documents."""

import asyncio
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from peppol_billing.config import BillingContext
from peppol_billing.delivery.memory import MemoryArtifactStore, MemoryEmailGateway
from peppol_billing.errors import ErrorKind
from peppol_billing.models.document import LineItem
from peppol_billing.models.enums import DocumentKind, DocumentStatus
from peppol_billing.models.party import Party
from peppol_billing.network.connectors.memory import MemoryNetworkGateway
from peppol_billing.repository.memory import MemoryDocumentRepository
from peppol_billing.services.documents import DocumentService, DraftChanges, RenderData
from peppol_billing.services.results import Err, Ok

TODAY = date(2026, 9, 15)


@pytest.fixture
async def draft(service: DocumentService, context: BillingContext, party, items):
    """Facture en brouillon enregistrée."""
    result = await service.create(context, party=party, items=items)
    assert isinstance(result, Ok)
    return result.value


@pytest.fixture
async def sent(service: DocumentService, context: BillingContext, draft):
    """Facture envoyée (en attente)."""
    result = await service.send(draft.id, context)
    assert isinstance(result, Ok)
    return draft


class TestCreate:
    """Tests de la création des brouillons."""

    async def test_draft_with_totals(self, draft) -> None:
        assert draft.status == DocumentStatus.DRAFT
        assert draft.number == "INV-000001"
        assert draft.subtotal == Decimal("150.00")
        assert draft.tax_total == Decimal("21.00")
        assert draft.total == Decimal("171.00")
        assert draft.artifact_path is None
        assert draft.version == 1

    async def test_default_due_date(self, draft) -> None:
        assert draft.issue_date == TODAY
        assert draft.due_date == date(2026, 10, 15)

    async def test_incremental_numbers(
        self, service: DocumentService, context: BillingContext, party, items, draft
    ) -> None:
        result = await service.create(context, party=party, items=items)
        assert result.value.number == "INV-000002"

    async def test_credit_note(
        self, service: DocumentService, context: BillingContext, party, items
    ) -> None:
        result = await service.create(
            context, party=party, items=items, kind=DocumentKind.CREDIT_NOTE
        )
        assert result.value.number.startswith("CN-")
        assert result.value.due_date is None

    async def test_credit_note_due_date_rejected(
        self, service: DocumentService, context: BillingContext, party, items
    ) -> None:
        result = await service.create(
            context,
            party=party,
            items=items,
            kind=DocumentKind.CREDIT_NOTE,
            due_date=date(2026, 10, 1),
        )
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION
        assert result.errors == ["due_date"]

    async def test_negative_amount_rejected(
        self, service: DocumentService, context: BillingContext, party, make_item
    ) -> None:
        result = await service.create(context, party=party, items=[make_item("-1", "6%")])
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION


class TestUpdateDraft:
    """Tests de la modification des brouillons."""

    async def test_items_replaced_and_totals_recomputed(
        self, service: DocumentService, draft, make_item
    ) -> None:
        result = await service.update_draft(
            draft.id, DraftChanges(items=[make_item("200", "6%")], notes="Révisé")
        )

        updated = result.value
        assert len(updated.items) == 1
        assert updated.notes == "Révisé"
        assert updated.total == Decimal("212.00")
        assert updated.number == draft.number

    async def test_stale_version_rejected(
        self, service: DocumentService, draft
    ) -> None:
        result = await service.update_draft(
            draft.id, DraftChanges(notes="x", expected_version=draft.version - 1)
        )
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.STORAGE

    async def test_sent_document_not_editable(
        self, service: DocumentService, sent
    ) -> None:
        result = await service.update_draft(sent.id, DraftChanges(notes="x"))
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION

    async def test_none_for_required_fields_ignored(
        self, service: DocumentService, draft
    ) -> None:
        result = await service.update_draft(
            draft.id, DraftChanges(number=None, issue_date=None, notes="Révisé")
        )

        updated = result.value
        assert updated.number == draft.number
        assert updated.issue_date == draft.issue_date
        assert updated.notes == "Révisé"

    async def test_unknown_document(self, service: DocumentService) -> None:
        result = await service.update_draft("missing", DraftChanges(notes="x"))
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION


class TestPreviewTotals:
    def test_same_engine_as_persistence(self, items: list[LineItem]) -> None:
        result = DocumentService.preview_totals(items)
        assert result.value.total == Decimal("171.00")

    def test_invalid_line(self, make_item) -> None:
        result = DocumentService.preview_totals([make_item("-5", "21%")])
        assert isinstance(result, Err)


class TestSend:
    """Tests de l'envoi."""

    async def test_send_advances_to_pending(
        self,
        service: DocumentService,
        repository: MemoryDocumentRepository,
        context: BillingContext,
        rendered: list[RenderData],
        draft,
    ) -> None:
        result = await service.send(draft.id, context)

        assert isinstance(result, Ok)
        assert result.value.network_submitted
        stored = await repository.get(draft.id)
        assert stored.status == DocumentStatus.PENDING
        assert stored.artifact_path == f"{draft.id}/invoice.pdf"
        assert rendered[0].breakdown.total == Decimal("171.00")
        assert rendered[0].currency == "EUR"

    async def test_sent_document_cannot_be_resent(
        self,
        service: DocumentService,
        gateway: MemoryNetworkGateway,
        context: BillingContext,
        sent,
    ) -> None:
        result = await service.send(sent.id, context)
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION
        assert len(gateway.submissions) == 1

    async def test_render_failure(
        self,
        gateway: MemoryNetworkGateway,
        artifacts: MemoryArtifactStore,
        email: MemoryEmailGateway,
        repository: MemoryDocumentRepository,
        context: BillingContext,
        party: Party,
        items: list[LineItem],
    ) -> None:
        def broken(data: RenderData) -> bytes:
            raise RuntimeError("police introuvable")

        service = DocumentService(
            repository, gateway, artifacts, email, broken, clock=lambda: TODAY
        )
        draft = (await service.create(context, party=party, items=items)).value

        result = await service.send(draft.id, context)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.RENDER
        assert gateway.submissions == []
        assert artifacts.writes == 0
        assert (await repository.get(draft.id)).status == DocumentStatus.DRAFT

    async def test_missing_items_rejected_before_render(
        self,
        service: DocumentService,
        context: BillingContext,
        party: Party,
        gateway: MemoryNetworkGateway,
        rendered: list[RenderData],
    ) -> None:
        draft = (await service.create(context, party=party)).value

        result = await service.send(draft.id, context)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION
        assert result.errors == ["items"]
        assert rendered == []
        assert gateway.submissions == []

    async def test_total_delivery_failure_keeps_draft(
        self,
        service: DocumentService,
        gateway: MemoryNetworkGateway,
        artifacts: MemoryArtifactStore,
        email: MemoryEmailGateway,
        repository: MemoryDocumentRepository,
        context: BillingContext,
        draft,
    ) -> None:
        gateway.fail_submissions = True
        email.fail_sends = True

        result = await service.send(draft.id, context)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.EMAIL
        stored = await repository.get(draft.id)
        assert stored.status == DocumentStatus.DRAFT
        assert stored.artifact_path is None
        assert artifacts.files == {}

    async def test_status_save_failure_removes_artifact(
        self,
        service: DocumentService,
        artifacts: MemoryArtifactStore,
        repository: MemoryDocumentRepository,
        context: BillingContext,
        draft,
    ) -> None:
        repository.fail_saves = True

        result = await service.send(draft.id, context)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.STORAGE
        assert artifacts.files == {}
        repository.fail_saves = False
        assert (await repository.get(draft.id)).status == DocumentStatus.DRAFT

    async def test_concurrent_send_rejected(
        self,
        service: DocumentService,
        gateway: MemoryNetworkGateway,
        context: BillingContext,
        draft,
    ) -> None:
        first, second = await asyncio.gather(
            service.send(draft.id, context), service.send(draft.id, context)
        )

        assert isinstance(first, Ok)
        assert isinstance(second, Err)
        assert second.kind == ErrorKind.STORAGE
        assert len(gateway.submissions) == 1


class TestMarkPaidAndDelete:
    async def test_mark_paid(self, service: DocumentService, sent) -> None:
        result = await service.mark_paid(sent.id)
        assert result.value.status == DocumentStatus.PAID

    async def test_paid_is_terminal(self, service: DocumentService, sent) -> None:
        await service.mark_paid(sent.id)
        result = await service.mark_paid(sent.id)
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION

    async def test_draft_cannot_be_paid(self, service: DocumentService, draft) -> None:
        result = await service.mark_paid(draft.id)
        assert isinstance(result, Err)

    async def test_delete_draft(
        self, service: DocumentService, repository: MemoryDocumentRepository, draft
    ) -> None:
        assert isinstance(await service.delete(draft.id), Ok)
        assert isinstance(await service.artifact_url(draft.id), Err)

    async def test_sent_document_not_deletable(
        self, service: DocumentService, sent
    ) -> None:
        result = await service.delete(sent.id)
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION


class TestOverdue:
    """Tests du balayage des échéances et des relances."""

    @pytest.fixture
    async def pending_pair(
        self, service: DocumentService, context: BillingContext, party, items
    ):
        """Deux factures en attente : échue hier, échéance demain."""
        documents = []
        for due in (TODAY - timedelta(days=1), TODAY + timedelta(days=1)):
            created = await service.create(
                context,
                party=party,
                items=items,
                issue_date=TODAY - timedelta(days=30),
                due_date=due,
            )
            await service.send(created.value.id, context)
            documents.append(created.value)
        return documents

    async def test_sweep(
        self,
        service: DocumentService,
        repository: MemoryDocumentRepository,
        pending_pair,
    ) -> None:
        late, upcoming = pending_pair

        result = await service.sweep_overdue(TODAY)

        assert result.value == [late.id]
        assert (await repository.get(late.id)).status == DocumentStatus.OVERDUE
        assert (await repository.get(upcoming.id)).status == DocumentStatus.PENDING

    async def test_sweep_idempotent(
        self, service: DocumentService, pending_pair
    ) -> None:
        await service.sweep_overdue(TODAY)
        result = await service.sweep_overdue(TODAY)
        assert result.value == []

    async def test_sweep_skips_document_paid_meanwhile(
        self,
        service: DocumentService,
        repository: MemoryDocumentRepository,
        pending_pair,
    ) -> None:
        """Un document payé entre la lecture et la mise à jour n'est pas compté."""
        late, _ = pending_pair
        candidates = await repository.list_overdue_candidates(TODAY)
        await service.mark_paid(late.id)
        repository.list_overdue_candidates = AsyncMock(return_value=candidates)

        result = await service.sweep_overdue(TODAY)

        assert result.value == []
        assert (await repository.get(late.id)).status == DocumentStatus.PAID

    async def test_overdue_can_be_paid(
        self, service: DocumentService, pending_pair
    ) -> None:
        late, _ = pending_pair
        await service.sweep_overdue(TODAY)
        result = await service.mark_paid(late.id)
        assert result.value.status == DocumentStatus.PAID

    async def test_remind_overdue(
        self,
        service: DocumentService,
        email: MemoryEmailGateway,
        context: BillingContext,
        pending_pair,
    ) -> None:
        late, _ = pending_pair
        await service.sweep_overdue(TODAY)

        result = await service.remind_overdue(late.id, context)

        assert isinstance(result, Ok)
        reminder = email.reminders[0]
        assert reminder.document_number == late.number
        assert reminder.amount == Decimal("171.00")
        assert reminder.due_date == TODAY - timedelta(days=1)

    async def test_remind_pending_rejected(
        self, service: DocumentService, context: BillingContext, pending_pair
    ) -> None:
        _, upcoming = pending_pair
        result = await service.remind_overdue(upcoming.id, context)
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.VALIDATION


class TestArtifactUrl:
    async def test_draft_has_no_artifact(self, service: DocumentService, draft) -> None:
        assert (await service.artifact_url(draft.id)).value is None

    async def test_sent_document_url(self, service: DocumentService, sent) -> None:
        result = await service.artifact_url(sent.id)
        assert result.value == f"memory://{sent.id}/invoice.pdf"
