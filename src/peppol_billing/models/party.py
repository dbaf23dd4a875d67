"""Modèles pour les partenaires commerciaux, l'émetteur et les adresses.

FR: Représentation du destinataire d'un document (client) et du profil de
    l'émetteur (coordonnées, IBAN, politique de numérotation, inscription
    au réseau d'échange).
EN: Representation of a document's trading partner and of the issuer
    profile (contact data, IBAN, numbering policy, exchange-network
    registration).
"""

from pydantic import BaseModel, Field

from peppol_billing.models.enums import NumberingMode, PartyType


class Address(BaseModel):
    """Adresse postale.

    FR: Le code pays sert aussi à construire l'identifiant de routage
        de repli (`<pays>:VAT`).
    EN: The country code is also used to build the fallback routing
        identifier (`<country>:VAT`).
    """

    street: str = Field(default="", description="Rue / Street")
    number: str | None = Field(default=None, description="Numéro / House number")
    bus: str | None = Field(default=None, description="Boîte / Box number")
    postal_code: str = Field(default="", description="Code postal / Postal code")
    city: str = Field(default="", description="Ville / City")
    country_code: str | None = Field(
        default=None,
        min_length=2,
        max_length=2,
        description="Code pays ISO 3166-1 alpha-2 / Country code",
    )

    @property
    def street_line(self) -> str:
        """Rue, numéro et boîte sur une ligne / Street, number and box."""
        parts = [self.street]
        if self.number:
            parts.append(self.number)
        if self.bus:
            parts.append(f"bus {self.bus}")
        return " ".join(p for p in parts if p)


class Party(BaseModel):
    """Partenaire commercial destinataire d'un document.

    FR: La présence de `network_registration_id` signifie que le
        partenaire est inscrit sur le réseau d'échange.
    EN: A `network_registration_id` means the partner is enrolled on the
        exchange network.
    """

    id: str | None = Field(default=None, description="Identifiant / Identifier")
    name: str = Field(..., min_length=1, description="Nom / Name")
    type: PartyType = Field(
        default=PartyType.BUSINESS,
        description="Entreprise ou particulier / Business or individual",
    )
    address: Address = Field(default_factory=Address, description="Adresse / Address")
    vat_number: str | None = Field(
        default=None,
        description="Numéro de TVA / VAT identification number",
    )
    email: str | None = Field(default=None, description="Adresse email / Email")
    phone: str | None = Field(default=None, description="Téléphone / Phone")
    network_registration_id: str | None = Field(
        default=None,
        description=(
            "Identifiant d'entité légale sur le point d'accès / "
            "Legal entity id on the access point"
        ),
    )

    @property
    def is_registered(self) -> bool:
        """Inscrit sur le réseau d'échange / Enrolled on the exchange network."""
        return bool(self.network_registration_id)


class BankAccount(BaseModel):
    """Coordonnées bancaires.

    FR: IBAN et BIC du bénéficiaire pour les virements.
    EN: Beneficiary IBAN and BIC for credit transfers.
    """

    iban: str = Field(..., min_length=1, description="IBAN du bénéficiaire / IBAN")
    bic: str | None = Field(default=None, description="BIC/SWIFT / BIC")


class NumberingPolicy(BaseModel):
    """Politique de numérotation de l'émetteur.

    FR: Les factures suivent `mode` (incrémental ou par date). Les avoirs
        gardent par défaut le suffixe aléatoire historique `CN-####` ;
        `credit_note_mode` permet d'opter explicitement pour un schéma
        séquentiel avec `credit_note_prefix`.
    EN: Invoices follow `mode`. Credit notes keep the legacy random
        `CN-####` suffix by default; `credit_note_mode` is an explicit
        opt-in to a sequential scheme using `credit_note_prefix`.
    """

    prefix: str = Field(default="INV", min_length=1, description="Préfixe / Prefix")
    mode: NumberingMode = Field(
        default=NumberingMode.INCREMENTAL,
        description="Mode des factures / Invoice numbering mode",
    )
    credit_note_prefix: str = Field(
        default="CN",
        min_length=1,
        description="Préfixe des avoirs / Credit note prefix",
    )
    credit_note_mode: NumberingMode = Field(
        default=NumberingMode.RANDOM,
        description="Mode des avoirs / Credit note numbering mode",
    )


class IssuerProfile(BaseModel):
    """Profil de l'entreprise émettrice.

    FR: Coordonnées imprimées sur les documents, IBAN des moyens de
        paiement, inscription réseau, conditions générales et adresse en
        copie (comptabilité) des emails.
    EN: Contact data printed on documents, IBAN for payment means,
        network registration, terms and conditions URL and the CC
        address (bookkeeping) for emails.
    """

    id: str | None = Field(default=None, description="Identifiant / Identifier")
    name: str = Field(..., min_length=1, description="Raison sociale / Company name")
    email: str | None = Field(default=None, description="Adresse email / Email")
    phone: str | None = Field(default=None, description="Téléphone / Phone")
    address: Address = Field(default_factory=Address, description="Adresse / Address")
    vat_number: str | None = Field(
        default=None, description="Numéro de TVA / VAT number"
    )
    bank_account: BankAccount | None = Field(
        default=None, description="Compte bancaire / Bank account"
    )
    network_registration_id: str | None = Field(
        default=None,
        description="Entité légale sur le point d'accès / Access point legal entity",
    )
    numbering: NumberingPolicy = Field(
        default_factory=NumberingPolicy,
        description="Politique de numérotation / Numbering policy",
    )
    terms_url: str | None = Field(
        default=None,
        description="URL des conditions générales / Terms and conditions URL",
    )
    cc_email: str | None = Field(
        default=None,
        description="Copie des emails (comptabilité) / Bookkeeping CC address",
    )

    @property
    def is_registered(self) -> bool:
        """Inscrit sur le réseau d'échange / Enrolled on the exchange network."""
        return bool(self.network_registration_id)
