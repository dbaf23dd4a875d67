"""Agrégation des lignes en tranches de TVA.

FR: Regroupe les lignes par libellé de taux (égalité de chaîne : `"21%"` et
    `"21"` forment deux tranches). Chaque ligne est arrondie au centime
    avant regroupement ; la taxe est arrondie par tranche, puis le total
    est calculé à partir des tranches arrondies. La même règle sert à
    l'aperçu des totaux, à l'enregistrement et à la soumission réseau.
EN: Groups lines by rate label (string equality). Each line is rounded to
    the cent before grouping, tax is rounded per group, then the total is
    computed from the rounded groups. The same rule is used for the preview,
    persistence and network submission.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, computed_field

from peppol_billing.errors import ValidationError
from peppol_billing.tax.classifier import TaxCategory
from peppol_billing.tax.rates import ExemptRate, StandardRate, ZeroRate

if TYPE_CHECKING:
    from peppol_billing.models.document import LineItem

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")


def round_amount(value: Decimal) -> Decimal:
    """Arrondit un montant au centime (arrondi commercial)."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class TaxGroup(BaseModel):
    """Tranche de TVA dérivée, une par libellé de taux distinct."""

    rate_label: str = Field(..., description="Libellé du taux / Rate label")
    category: TaxCategory = Field(..., description="Catégorie / Category")
    percentage: Decimal = Field(..., description="Taux en % / Rate in %")
    subtotal: Decimal = Field(..., description="Base HT arrondie / Rounded taxable")
    tax_amount: Decimal = Field(..., description="TVA arrondie / Rounded tax")


class TaxBreakdown(BaseModel):
    """Résultat de l'agrégation : tranches et totaux du document."""

    groups: list[TaxGroup] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def subtotal(self) -> Decimal:
        """Total HT / Total excluding tax."""
        return sum((g.subtotal for g in self.groups), Decimal("0.00"))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def tax_total(self) -> Decimal:
        """Total TVA / Total tax."""
        return sum((g.tax_amount for g in self.groups), Decimal("0.00"))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> Decimal:
        """Total TTC / Grand total."""
        return self.subtotal + self.tax_total


def compute_group(
    rate: StandardRate | ZeroRate | ExemptRate, amounts: Iterable[Decimal]
) -> TaxGroup:
    """Calcule une tranche à partir des montants HT (arrondis) de ses lignes."""
    subtotal = round_amount(sum(amounts, Decimal("0")))
    if isinstance(rate, StandardRate):
        tax_amount = round_amount(subtotal * rate.percentage / HUNDRED)
    else:
        tax_amount = Decimal("0.00")
    return TaxGroup(
        rate_label=rate.label,
        category=rate.category,
        percentage=rate.percentage,
        subtotal=subtotal,
        tax_amount=tax_amount,
    )


def aggregate(items: Iterable[LineItem]) -> TaxBreakdown:
    """Regroupe les lignes par libellé de taux et calcule les totaux.

    FR: Les tranches sont retournées dans l'ordre de première apparition.
        Un montant négatif lève `ValidationError` (pas de coercition).
    EN: Groups are returned in order of first appearance. A negative
        amount raises `ValidationError` (no coercion).

    Args:
        items: Lignes exposant `amount` et `vat_rate` (taux typé).

    Returns:
        Les tranches arrondies et les totaux qui en découlent.
    """
    rates: dict[str, StandardRate | ZeroRate | ExemptRate] = {}
    amounts: dict[str, list[Decimal]] = {}

    for index, item in enumerate(items, start=1):
        if item.amount < 0:
            raise ValidationError(
                f"Montant négatif sur la ligne {index} : {item.amount}",
                errors=[f"items[{index - 1}].amount"],
            )
        label = item.vat_rate.label
        if label not in rates:
            rates[label] = item.vat_rate
            amounts[label] = []
        amounts[label].append(round_amount(item.amount))

    groups = [compute_group(rates[label], amounts[label]) for label in rates]
    return TaxBreakdown(groups=groups)
