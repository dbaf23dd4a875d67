"""Contexte de facturation explicite.

FR: Remplace l'état global (session, devise) : l'émetteur, la devise de
    règlement, la langue et le pays par défaut sont passés à chaque appel
    d'orchestration.
EN: Replaces ambient global state: issuer, settlement currency, locale and
    default country are passed into every orchestration call.
"""

from pydantic import BaseModel, Field

from peppol_billing.models.party import IssuerProfile

DEFAULT_CURRENCY = "EUR"
DEFAULT_COUNTRY = "BE"


class BillingContext(BaseModel):
    """Configuration d'un appel de facturation."""

    issuer: IssuerProfile = Field(..., description="Émetteur / Issuer profile")
    currency: str = Field(
        default=DEFAULT_CURRENCY,
        min_length=3,
        max_length=3,
        description="Devise de règlement ISO 4217 / Settlement currency",
    )
    locale: str = Field(default="en", description="Langue des emails / Email locale")
    default_country: str = Field(
        default=DEFAULT_COUNTRY,
        min_length=2,
        max_length=2,
        description=(
            "Pays de repli des adresses sans code pays / "
            "Fallback country for addresses without a country code"
        ),
    )
