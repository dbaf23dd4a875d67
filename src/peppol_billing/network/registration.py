"""Inscription des parties sur le réseau d'échange.

FR: Crée (ou met à jour si déjà inscrite) l'entité légale d'un partenaire
    ou de l'émetteur sur le point d'accès, puis lui ajoute un identifiant
    `<pays>:VAT` (superscheme `iso6523-actorid-upis`) si le numéro de TVA
    et le pays sont connus. L'émetteur envoie et reçoit ; un partenaire
    ne fait que recevoir, et seules les entreprises sont inscrites.
    L'échec de l'ajout d'identifiant n'annule pas l'inscription : il est
    signalé dans le résultat.
EN: Creates (or updates when already registered) the legal entity of a
    trading partner or of the issuer on the access point, then adds a
    `<country>:VAT` identifier when VAT number and country are known. The
    issuer sends and receives; a partner only receives, and only
    businesses are registered. A failed identifier does not undo the
    registration: it is reported in the result.
"""

import logging

from pydantic import BaseModel

from peppol_billing.errors import NetworkError, ValidationError
from peppol_billing.models.enums import PartyType
from peppol_billing.models.party import Address, IssuerProfile, Party
from peppol_billing.network.base import BaseNetworkGateway
from peppol_billing.network.models import (
    PEPPOL_SUPERSCHEME,
    LegalEntity,
    RoutingIdentifier,
)
from peppol_billing.network.routing import vat_scheme

logger = logging.getLogger(__name__)


class RegistrationResult(BaseModel):
    """Résultat d'une inscription."""

    registration_id: str
    created: bool
    identifier: RoutingIdentifier | None = None
    identifier_error: str | None = None


def legal_entity_for(
    name: str, address: Address, *, acts_as_sender: bool
) -> LegalEntity:
    """Entité légale à partir d'un nom et d'une adresse."""
    return LegalEntity(
        party_name=name,
        line1=" ".join(p for p in (address.street, address.number) if p),
        line2=address.bus or "",
        zip=address.postal_code,
        city=address.city,
        country=address.country_code or "",
        acts_as_sender=acts_as_sender,
        acts_as_receiver=True,
    )


class NetworkRegistrar:
    """Inscrit l'émetteur et ses partenaires sur le point d'accès."""

    def __init__(self, gateway: BaseNetworkGateway) -> None:
        self.gateway = gateway

    async def register(self, subject: Party | IssuerProfile) -> RegistrationResult:
        """Crée ou met à jour l'entité légale, puis ajoute l'identifiant TVA.

        Args:
            subject: Partenaire (entreprise) ou profil émetteur.

        Returns:
            L'identifiant d'entité à enregistrer sur `subject` et le sort
            de l'identifiant PEPPOL.

        Raises:
            ValidationError: Partenaire particulier.
            NetworkError: Échec de création ou de mise à jour de l'entité.
        """
        is_issuer = isinstance(subject, IssuerProfile)
        if not is_issuer and subject.type != PartyType.BUSINESS:
            raise ValidationError(
                f"Seules les entreprises peuvent être inscrites ({subject.name})"
            )

        entity = legal_entity_for(
            subject.name, subject.address, acts_as_sender=is_issuer
        )
        if subject.network_registration_id:
            saved = await self.gateway.update_legal_entity(
                subject.network_registration_id, entity
            )
            created = False
        else:
            saved = await self.gateway.create_legal_entity(entity)
            created = True

        registration_id = saved.id or subject.network_registration_id
        if not registration_id:
            raise NetworkError(f"Aucun identifiant d'entité reçu pour {subject.name}")
        logger.info(
            "Entité légale %s %s pour %s",
            registration_id,
            "créée" if created else "mise à jour",
            subject.name,
        )

        result = RegistrationResult(registration_id=registration_id, created=created)
        vat_number = (subject.vat_number or "").strip()
        country = subject.address.country_code
        if not vat_number or not country:
            return result

        identifier = RoutingIdentifier(scheme=vat_scheme(country.upper()), id=vat_number)
        try:
            result.identifier = await self.gateway.add_identifier(
                registration_id, identifier, PEPPOL_SUPERSCHEME
            )
        except NetworkError as exc:
            logger.warning(
                "Identifiant PEPPOL %s refusé pour %s : %s",
                identifier.scheme,
                registration_id,
                exc.message,
            )
            result.identifier_error = exc.message
        return result
