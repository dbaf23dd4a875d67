"""Modèles de données Pydantic pour la facturation."""

from peppol_billing.models.document import BillingDocument, CatalogItem, LineItem
from peppol_billing.models.enums import (
    DocumentKind,
    DocumentStatus,
    NumberingMode,
    PartyType,
    PaymentMeansCode,
    TransitionTrigger,
)
from peppol_billing.models.party import (
    Address,
    BankAccount,
    IssuerProfile,
    NumberingPolicy,
    Party,
)

__all__ = [
    "Address",
    "BankAccount",
    "BillingDocument",
    "CatalogItem",
    "DocumentKind",
    "DocumentStatus",
    "IssuerProfile",
    "LineItem",
    "NumberingMode",
    "NumberingPolicy",
    "Party",
    "PartyType",
    "PaymentMeansCode",
    "TransitionTrigger",
]
