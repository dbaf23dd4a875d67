"""Taux de TVA typés.

FR: Le libellé saisi (`"21%"`, `"0"`, `"Exempt"`) est analysé une seule fois
    à la frontière de saisie en une union discriminée
    `StandardRate | ZeroRate | ExemptRate`. L'agrégation, la classification
    et la mise en forme travaillent ensuite sur la valeur typée.
EN: The entered label is parsed once at the data-entry boundary into a
    discriminated union; aggregation, classification and formatting then
    operate on the typed value instead of the raw string.
"""

from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from peppol_billing.errors import ValidationError
from peppol_billing.tax.classifier import (
    TaxCategory,
    classify_tax_category,
    extract_percentage,
)


class StandardRate(BaseModel):
    """Taux normal ou réduit, avec pourcentage strictement positif."""

    kind: Literal["standard"] = "standard"
    percentage: Decimal = Field(..., gt=0, description="Taux en % / Rate in %")
    label: str = Field(..., description="Libellé d'origine / Original label")

    @property
    def category(self) -> TaxCategory:
        return TaxCategory.STANDARD


class ZeroRate(BaseModel):
    """Taux zéro : ligne taxable à 0 %."""

    kind: Literal["zero"] = "zero"
    label: str = Field(default="0%", description="Libellé d'origine / Original label")

    @property
    def percentage(self) -> Decimal:
        return Decimal("0")

    @property
    def category(self) -> TaxCategory:
        return TaxCategory.ZERO


class ExemptRate(BaseModel):
    """Opération exonérée : aucune taxe calculée."""

    kind: Literal["exempt"] = "exempt"
    label: str = Field(
        default="Exempt", description="Libellé d'origine / Original label"
    )

    @property
    def percentage(self) -> Decimal:
        return Decimal("0")

    @property
    def category(self) -> TaxCategory:
        return TaxCategory.EXEMPT


VatRate = Annotated[
    StandardRate | ZeroRate | ExemptRate,
    Field(discriminator="kind"),
]
"""Union discriminée des taux / Discriminated union of rates."""


def parse_vat_rate(label: str) -> StandardRate | ZeroRate | ExemptRate:
    """Analyse un libellé de taux en valeur typée.

    FR: La catégorie suit `classify_tax_category`. Un libellé standard doit
        contenir un pourcentage positif, sinon `ValidationError` : un taux
        illisible n'est jamais ramené silencieusement à zéro.
    EN: The category follows `classify_tax_category`. A standard label must
        carry a positive percentage, otherwise `ValidationError`: an
        unreadable rate is never silently coerced to zero.

    Args:
        label: Libellé saisi, ex. `"21%"`, `"0"`, `"Exempt"`.

    Raises:
        ValidationError: Libellé vide, négatif ou sans pourcentage.
    """
    if not label or not label.strip():
        raise ValidationError("Le taux de TVA est obligatoire")

    percentage = extract_percentage(label)
    if percentage is not None and percentage < 0:
        raise ValidationError(
            f"Taux de TVA négatif : {label!r}", errors=[f"vat_rate={label}"]
        )

    category = classify_tax_category(label)
    if category == TaxCategory.EXEMPT:
        return ExemptRate(label=label)
    if category == TaxCategory.ZERO:
        return ZeroRate(label=label)
    if percentage is None:
        raise ValidationError(
            f"Taux de TVA illisible : {label!r}", errors=[f"vat_rate={label}"]
        )
    return StandardRate(percentage=percentage, label=label)
