"""Résolution des identifiants de routage d'un partenaire.

FR: Si le partenaire est inscrit (`network_registration_id`), l'annuaire
    du point d'accès est consulté et le premier identifiant retenu. Sinon,
    ou si l'annuaire ne renvoie rien, une entreprise avec numéro de TVA
    reçoit un identifiant de repli `<pays>:VAT`. À défaut, aucun
    identifiant : le document partira par email.
EN: A registered partner's identifiers are looked up in the access-point
    directory and the first one is used. Otherwise, or when the directory
    returns nothing, a business with a VAT number gets a `<country>:VAT`
    fallback identifier. Failing both, no identifier: email delivery.
"""

import logging

from peppol_billing.config import DEFAULT_COUNTRY
from peppol_billing.models.enums import PartyType
from peppol_billing.models.party import Address, Party
from peppol_billing.network.base import BaseNetworkGateway
from peppol_billing.network.models import RoutingIdentifier

logger = logging.getLogger(__name__)


def country_of(address: Address, default_country: str = DEFAULT_COUNTRY) -> str:
    """Code pays de l'adresse, ou le pays par défaut s'il est absent."""
    return (address.country_code or default_country).upper()


def vat_scheme(country: str) -> str:
    """Schéma PEPPOL d'un numéro de TVA, ex. `BE:VAT`."""
    return f"{country}:VAT"


def fallback_identifier(
    party: Party, default_country: str = DEFAULT_COUNTRY
) -> RoutingIdentifier | None:
    """Identifiant `<pays>:VAT` d'une entreprise, ou None."""
    vat_number = (party.vat_number or "").strip()
    if party.type != PartyType.BUSINESS or not vat_number:
        return None
    country = country_of(party.address, default_country)
    return RoutingIdentifier(scheme=vat_scheme(country), id=vat_number)


class RoutingResolver:
    """Résout les identifiants de routage à chaque tentative de soumission.

    FR: Les erreurs de l'annuaire (`NetworkError`) ne sont pas interceptées
        ici : elles font échouer la voie réseau et l'orchestrateur bascule
        sur l'email.
    EN: Directory errors (`NetworkError`) are not caught here: they fail
        the network path and the orchestrator falls back to email.
    """

    def __init__(
        self,
        gateway: BaseNetworkGateway,
        default_country: str = DEFAULT_COUNTRY,
    ) -> None:
        self.gateway = gateway
        self.default_country = default_country

    async def resolve(self, party: Party) -> list[RoutingIdentifier]:
        """Retourne au plus un identifiant de routage pour le partenaire."""
        if party.network_registration_id:
            identifiers = await self.gateway.lookup_identifiers(
                party.network_registration_id
            )
            if identifiers:
                logger.debug(
                    "Identifiant annuaire retenu pour %s : %s",
                    party.name,
                    identifiers[0].scheme,
                )
                return [identifiers[0]]
            logger.info(
                "Aucun identifiant dans l'annuaire pour %s (%s)",
                party.name,
                party.network_registration_id,
            )

        fallback = fallback_identifier(party, self.default_country)
        if fallback is not None:
            logger.info("Identifiant de repli %s pour %s", fallback.scheme, party.name)
            return [fallback]
        return []
