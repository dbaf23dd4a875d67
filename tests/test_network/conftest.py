"""Fixtures partagées pour les tests réseau."""

from unittest.mock import MagicMock

import pytest

from peppol_billing.network.connectors.memory import MemoryNetworkGateway
from peppol_billing.network.connectors.storecove import StorecoveGateway
from peppol_billing.network.models import RoutingIdentifier


@pytest.fixture
def memory_gateway() -> MemoryNetworkGateway:
    """Annuaire simulé : le client a un identifiant d'entreprise belge."""
    gateway = MemoryNetworkGateway()
    gateway.register("LE-ISSUER", [RoutingIdentifier(scheme="BE:VAT", id="BE0987654321")])
    gateway.register(
        "LE-PARTY",
        [
            RoutingIdentifier(scheme="BE:EN", id="0123456789"),
            RoutingIdentifier(scheme="BE:VAT", id="BE0123456789"),
        ],
    )
    return gateway


def make_response(status_code: int = 200, json_data=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def http_session() -> MagicMock:
    """Session `requests` simulée."""
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def storecove(http_session: MagicMock) -> StorecoveGateway:
    return StorecoveGateway(api_key="secret-key", session=http_session)
