"""Énumérations pour la facturation et l'échange PEPPOL.

FR: Statuts, types de document et modes de numérotation partagés par
    tous les composants (persistés sous forme de chaînes).
EN: Statuses, document types and numbering modes shared by every
    component (persisted as strings).
"""

from enum import StrEnum


class DocumentKind(StrEnum):
    """Type de document de facturation.

    FR: La valeur est l'étiquette transmise au réseau d'échange.
    EN: The value is the tag sent to the exchange network.
    """

    INVOICE = "invoice"
    """Facture / Invoice"""

    CREDIT_NOTE = "creditnote"
    """Avoir / Credit note"""


class DocumentStatus(StrEnum):
    """Statut du cycle de vie d'un document.

    FR: brouillon → en attente → payé, avec passage automatique
        en retard pour les documents en attente échus.
    EN: draft → pending → paid, with the automatic pending → overdue sweep.
    """

    DRAFT = "draft"
    """Brouillon, seul état modifiable / Draft, the only editable state"""

    PENDING = "pending"
    """Envoyé, en attente de paiement / Sent, awaiting payment"""

    PAID = "paid"
    """Payé (terminal) / Paid (terminal)"""

    OVERDUE = "overdue"
    """Échu et impayé / Past due and unpaid"""


class PartyType(StrEnum):
    """Type de partenaire commercial."""

    BUSINESS = "business"
    """Entreprise (assujettie) / Business"""

    INDIVIDUAL = "individual"
    """Particulier / Private individual"""


class NumberingMode(StrEnum):
    """Mode de numérotation des documents."""

    INCREMENTAL = "incremental"
    """PREFIXE-000001, PREFIXE-000002, ..."""

    DATE_BASED = "date_based"
    """PREFIXE-AAAAMMJJ/1, PREFIXE-AAAAMMJJ/2, ..."""

    RANDOM = "random"
    """Suffixe aléatoire à 4 chiffres (avoirs historiques) / Legacy credit notes"""


class TransitionTrigger(StrEnum):
    """Action à l'origine d'un changement de statut."""

    SEND = "send"
    MARK_PAID = "mark_paid"
    SWEEP = "sweep"


class PaymentMeansCode(StrEnum):
    """Code moyen de paiement attendu par le point d'accès."""

    CREDIT_TRANSFER = "credit_transfer"
    """Virement bancaire / Credit transfer"""
