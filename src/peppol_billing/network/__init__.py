"""Échange de documents sur le réseau PEPPOL.

FR: Interface abstraite des points d'accès, résolution du routage,
    construction de la charge utile, sérialisation UBL et inscription.
EN: Abstract access-point interface, routing resolution, payload
    construction, UBL serialization and registration.
"""

from peppol_billing.network.base import BaseNetworkGateway
from peppol_billing.network.errors import (
    NetworkAuthenticationError,
    NetworkConnectionError,
    NetworkNotFoundError,
    NetworkRejectedError,
)
from peppol_billing.network.formatter import DocumentFormatter, build_payload
from peppol_billing.network.models import (
    LegalEntity,
    RoutingIdentifier,
    SubmissionPayload,
    SubmissionResponse,
)
from peppol_billing.network.registration import NetworkRegistrar, RegistrationResult
from peppol_billing.network.routing import RoutingResolver
from peppol_billing.network.ubl import UBLSerializer

__all__ = [
    "BaseNetworkGateway",
    "DocumentFormatter",
    "LegalEntity",
    "NetworkAuthenticationError",
    "NetworkConnectionError",
    "NetworkNotFoundError",
    "NetworkRegistrar",
    "NetworkRejectedError",
    "RegistrationResult",
    "RoutingIdentifier",
    "RoutingResolver",
    "SubmissionPayload",
    "SubmissionResponse",
    "UBLSerializer",
    "build_payload",
]
