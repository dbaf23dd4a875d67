"""Calcul de la TVA : taux typés, classification et agrégation par tranche."""

from peppol_billing.tax.aggregation import TaxBreakdown, TaxGroup, aggregate
from peppol_billing.tax.classifier import TaxCategory, classify_tax_category
from peppol_billing.tax.rates import (
    ExemptRate,
    StandardRate,
    VatRate,
    ZeroRate,
    parse_vat_rate,
)

__all__ = [
    "ExemptRate",
    "StandardRate",
    "TaxBreakdown",
    "TaxCategory",
    "TaxGroup",
    "VatRate",
    "ZeroRate",
    "aggregate",
    "classify_tax_category",
    "parse_vat_rate",
]
