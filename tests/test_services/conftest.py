"""Fixtures partagées pour les tests des services."""

import random
from datetime import date

import pytest

from peppol_billing.delivery.memory import MemoryArtifactStore, MemoryEmailGateway
from peppol_billing.network.connectors.memory import MemoryNetworkGateway
from peppol_billing.network.models import RoutingIdentifier
from peppol_billing.repository.memory import MemoryDocumentRepository
from peppol_billing.services.documents import DocumentService, RenderData
from peppol_billing.services.orchestrator import SubmissionOrchestrator

PDF = b"%PDF-1.7 test"


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF


@pytest.fixture
def gateway() -> MemoryNetworkGateway:
    gateway = MemoryNetworkGateway()
    gateway.register("LE-PARTY", [RoutingIdentifier(scheme="BE:VAT", id="BE0123456789")])
    return gateway


@pytest.fixture
def artifacts() -> MemoryArtifactStore:
    return MemoryArtifactStore()


@pytest.fixture
def email() -> MemoryEmailGateway:
    return MemoryEmailGateway()


@pytest.fixture
def repository() -> MemoryDocumentRepository:
    return MemoryDocumentRepository()


@pytest.fixture
def rendered() -> list[RenderData]:
    """Données reçues par le moteur de rendu."""
    return []


@pytest.fixture
def renderer(rendered: list[RenderData]):
    def render(data: RenderData) -> bytes:
        rendered.append(data)
        return PDF

    return render


@pytest.fixture
def orchestrator(gateway, artifacts, email) -> SubmissionOrchestrator:
    return SubmissionOrchestrator(gateway, artifacts, email)


@pytest.fixture
def service(gateway, artifacts, email, repository, renderer) -> DocumentService:
    return DocumentService(
        repository,
        gateway,
        artifacts,
        email,
        renderer,
        clock=lambda: date(2026, 9, 15),
        rng=random.Random(3),
    )
