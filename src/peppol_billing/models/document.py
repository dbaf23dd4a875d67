"""Modèles principaux des documents de facturation.

FR: Facture et avoir partagent la même forme (`BillingDocument`, distingués
    par `kind`). Les lignes référencent un article du catalogue ; leur taux
    de TVA est analysé une fois en valeur typée à la construction. Les
    totaux du document sont toujours recalculés à partir des tranches de
    TVA, jamais repris d'une valeur fournie par l'appelant.
EN: Invoices and credit notes share one shape (`BillingDocument`, tagged by
    `kind`). Lines reference a catalog item; their VAT rate is parsed once
    into a typed value on construction. Document totals are always
    recomputed from the tax groups, never taken from a caller value.
"""

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from peppol_billing.models.enums import DocumentKind, DocumentStatus
from peppol_billing.models.party import Party
from peppol_billing.tax.aggregation import TaxBreakdown, aggregate
from peppol_billing.tax.rates import VatRate, parse_vat_rate


class CatalogItem(BaseModel):
    """Article du catalogue (produit ou service)."""

    id: str | None = Field(default=None, description="Identifiant / Identifier")
    title: str = Field(..., min_length=1, description="Désignation / Title")
    unit_price: Decimal = Field(..., description="Prix unitaire HT / Unit price")
    vat_rate_label: str = Field(
        ...,
        description="Libellé du taux, ex. '21%', 'Exempt' / Rate label",
    )


class LineItem(BaseModel):
    """Ligne d'un document.

    FR: `amount` = quantité × prix unitaire. Sans `vat_rate` explicite, le
        taux est celui de l'article ; un libellé est analysé en taux typé.
    EN: `amount` = quantity × unit price. Without an explicit `vat_rate`
        the item's rate is used; a label string is parsed into a typed rate.
    """

    item: CatalogItem = Field(..., description="Article / Catalog item")
    quantity: Decimal = Field(default=Decimal("1"), description="Quantité / Quantity")
    vat_rate: VatRate = Field(..., description="Taux de TVA typé / Typed VAT rate")

    @model_validator(mode="before")
    @classmethod
    def _default_vat_rate(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("vat_rate") is None:
            item = data.get("item")
            if isinstance(item, dict):
                label = item.get("vat_rate_label")
            else:
                label = getattr(item, "vat_rate_label", None)
            if label is not None:
                data = {**data, "vat_rate": label}
        return data

    @field_validator("vat_rate", mode="before")
    @classmethod
    def _parse_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_vat_rate(value)
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def amount(self) -> Decimal:
        """Montant HT de la ligne / Line amount excluding tax."""
        return self.quantity * self.item.unit_price

    @property
    def vat_rate_label(self) -> str:
        return self.vat_rate.label

    @property
    def description(self) -> str:
        return self.item.title


class BillingDocument(BaseModel):
    """Facture ou avoir.

    FR: Créé en brouillon ; modifiable uniquement en brouillon (hors
        `status`) ; supprimable uniquement en brouillon. `version` est
        incrémentée par le dépôt à chaque enregistrement et sert au
        contrôle de concurrence optimiste. `artifact_path` n'est renseigné
        qu'une fois le PDF stocké lors de l'envoi.
    EN: Created in draft; editable only in draft (except `status`);
        deletable only in draft. `version` is bumped by the repository on
        every save for optimistic concurrency. `artifact_path` is set only
        once the PDF is stored on send.
    """

    # --- Identification ---
    id: str = Field(
        default_factory=lambda: uuid4().hex,
        description="Identifiant / Identifier",
    )
    kind: DocumentKind = Field(
        default=DocumentKind.INVOICE,
        description="Facture ou avoir / Invoice or credit note",
    )
    number: str = Field(..., min_length=1, description="Numéro / Document number")
    issue_date: date = Field(..., description="Date d'émission / Issue date")
    due_date: date | None = Field(
        default=None,
        description="Date d'échéance (factures) / Due date (invoices only)",
    )
    status: DocumentStatus = Field(
        default=DocumentStatus.DRAFT, description="Statut / Status"
    )
    notes: str | None = Field(default=None, description="Note libre / Free text notes")
    owner_id: str | None = Field(
        default=None, description="Utilisateur propriétaire / Owning user"
    )

    # --- Partenaire et lignes ---
    party: Party = Field(..., description="Destinataire / Trading partner")
    items: list[LineItem] = Field(default_factory=list, description="Lignes / Lines")

    # --- Totaux (recalculés) ---
    subtotal: Decimal = Field(default=Decimal("0.00"), description="Total HT")
    tax_total: Decimal = Field(default=Decimal("0.00"), description="Total TVA")
    total: Decimal = Field(default=Decimal("0.00"), description="Total TTC")

    # --- Persistance ---
    artifact_path: str | None = Field(
        default=None, description="Chemin du PDF stocké / Stored PDF path"
    )
    version: int = Field(default=0, ge=0, description="Version / Concurrency token")

    @property
    def is_credit_note(self) -> bool:
        return self.kind == DocumentKind.CREDIT_NOTE

    @property
    def is_editable(self) -> bool:
        """Seul le brouillon est modifiable / Only drafts are editable."""
        return self.status == DocumentStatus.DRAFT

    def tax_breakdown(self) -> TaxBreakdown:
        """Tranches de TVA des lignes courantes / Tax groups of current lines."""
        return aggregate(self.items)

    def recompute_totals(self) -> TaxBreakdown:
        """Recalcule `subtotal`, `tax_total` et `total` depuis les tranches.

        Returns:
            Le détail des tranches ayant servi au calcul.
        """
        breakdown = self.tax_breakdown()
        self.subtotal = breakdown.subtotal
        self.tax_total = breakdown.tax_total
        self.total = breakdown.total
        return breakdown
