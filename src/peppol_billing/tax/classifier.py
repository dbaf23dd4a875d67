"""Classification des libellés de taux de TVA.

FR: Fonction pure libellé → catégorie (standard, zéro, exonéré). La
    catégorie est transmise telle quelle au réseau d'échange, dont les
    validateurs rejettent un document mal catégorisé : l'ordre de
    priorité des règles ne doit pas changer.
EN: Pure label → category function. The category is sent as-is to the
    exchange network, whose validators reject a miscategorized document:
    the rule precedence must not change.
"""

import re
from decimal import Decimal, InvalidOperation
from enum import StrEnum

_NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)?")


class TaxCategory(StrEnum):
    """Catégorie de TVA exigée par les schémas de facture électronique."""

    STANDARD = "standard"
    """Taux normal ou réduit / Standard or reduced rate"""

    ZERO = "zero"
    """Taux zéro / Zero rated"""

    EXEMPT = "exempt"
    """Exonéré / Exempt"""


# Libellés non numériques reconnus
EXEMPT_SENTINEL = "exempt"
ZERO_SENTINELS: frozenset[str] = frozenset({"zero", "0%"})


def extract_percentage(label: str) -> Decimal | None:
    """Extrait le pourcentage numérique d'un libellé (`"21%"` → 21).

    FR: Ignore les caractères non numériques autour du nombre ; la virgule
        décimale est acceptée. Retourne None si le libellé ne contient
        aucun nombre.
    EN: Ignores non-numeric characters around the number; a decimal comma
        is accepted. Returns None when the label holds no number.
    """
    match = _NUMBER_RE.search(label)
    if match is None:
        return None
    try:
        return Decimal(match.group().replace(",", "."))
    except InvalidOperation:
        return None


def classify_tax_category(label: str) -> TaxCategory:
    """Détermine la catégorie de TVA d'un libellé.

    Priorité / precedence:
        1. valeur numérique == 0 → ZERO
        2. valeur numérique > 0 → STANDARD
        3. libellé contenant « exempt » (casse ignorée) → EXEMPT
        4. libellé « zero » (casse ignorée) ou « 0% » → ZERO
        5. sinon → STANDARD
    """
    percentage = extract_percentage(label)
    if percentage is not None:
        if percentage == 0:
            return TaxCategory.ZERO
        if percentage > 0:
            return TaxCategory.STANDARD

    normalized = label.strip().lower()
    if EXEMPT_SENTINEL in normalized:
        return TaxCategory.EXEMPT
    if normalized in ZERO_SENTINELS:
        return TaxCategory.ZERO
    return TaxCategory.STANDARD
