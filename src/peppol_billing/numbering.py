"""Génération des numéros de documents.

FR: Deux politiques pour les factures :
    - incrémentale : `PREFIXE-000001`, séquence = suffixe numérique du
      dernier numéro émis + 1, sinon 1 ;
    - par date : `PREFIXE-AAAAMMJJ/k`, k = 1 + plus grand incrément déjà
      émis pour ce préfixe de date.
    Les avoirs gardent par défaut le suffixe aléatoire historique `CN-####`
    (sans collision avec les numéros existants) sauf choix explicite d'un
    schéma séquentiel dans la politique de l'émetteur.
EN: Two invoice policies (incremental, date-based). Credit notes keep the
    legacy random `CN-####` suffix by default (avoiding existing numbers)
    unless the issuer explicitly opts in to a sequential scheme.
"""

import calendar
import logging
import random
from collections.abc import Sequence
from datetime import date

from peppol_billing.errors import ValidationError
from peppol_billing.models.enums import DocumentKind, NumberingMode
from peppol_billing.models.party import NumberingPolicy

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 6
RANDOM_MIN = 1000
RANDOM_MAX = 9999


def next_incremental(prefix: str, latest_number: str | None) -> str:
    """Numéro suivant en mode incrémental.

    Args:
        prefix: Préfixe de l'émetteur, ex. `"INV"`.
        latest_number: Dernier numéro émis, ou None pour le premier.

    Returns:
        `"{prefix}-{séquence sur 6 chiffres}"`.
    """
    sequence = 1
    if latest_number:
        suffix = latest_number.rsplit("-", 1)[-1]
        if suffix.isdigit():
            sequence = int(suffix) + 1
    return f"{prefix}-{sequence:0{SEQUENCE_WIDTH}d}"


def next_date_based(prefix: str, existing: Sequence[str], on: date) -> str:
    """Numéro suivant en mode par date (`PREFIXE-AAAAMMJJ/k`)."""
    date_prefix = f"{prefix}-{on:%Y%m%d}"
    increment = 1
    for number in existing:
        if not number.startswith(date_prefix):
            continue
        _, sep, tail = number.partition("/")
        if sep and tail.isdigit():
            increment = max(increment, int(tail) + 1)
    return f"{date_prefix}/{increment}"


def random_number(
    prefix: str, existing: Sequence[str], rng: random.Random | None = None
) -> str:
    """Numéro aléatoire à 4 chiffres, distinct des numéros existants.

    Raises:
        ValidationError: Tous les numéros du préfixe sont déjà pris.
    """
    rng = rng or random.Random()
    taken = set(existing)
    free = RANDOM_MAX - RANDOM_MIN + 1 - sum(
        1 for n in taken if n.startswith(f"{prefix}-")
    )
    if free <= 0:
        raise ValidationError(
            f"Plus aucun numéro disponible pour le préfixe {prefix}"
        )
    while True:
        candidate = f"{prefix}-{rng.randint(RANDOM_MIN, RANDOM_MAX)}"
        if candidate not in taken:
            return candidate


def generate_number(
    policy: NumberingPolicy,
    kind: DocumentKind,
    existing: Sequence[str],
    on: date,
    rng: random.Random | None = None,
) -> str:
    """Attribue le numéro d'un nouveau document.

    FR: `existing` contient les numéros déjà émis par l'émetteur pour ce
        type de document, du plus ancien au plus récent.
    EN: `existing` holds the numbers already issued by the issuer for this
        document kind, oldest first.
    """
    if kind == DocumentKind.CREDIT_NOTE:
        mode, prefix = policy.credit_note_mode, policy.credit_note_prefix
    else:
        mode, prefix = policy.mode, policy.prefix

    if mode == NumberingMode.DATE_BASED:
        number = next_date_based(prefix, existing, on)
    elif mode == NumberingMode.RANDOM:
        number = random_number(prefix, existing, rng)
    else:
        number = next_incremental(prefix, existing[-1] if existing else None)

    logger.debug("Numéro %s attribué (%s, mode %s)", number, kind, mode)
    return number


def default_due_date(issue_date: date, months: int = 1) -> date:
    """Échéance par défaut : même jour, `months` mois plus tard.

    FR: Le jour est ramené au dernier jour du mois cible si nécessaire
        (31 janvier → 28/29 février).
    EN: The day is clamped to the target month's last day when needed.
    """
    month_index = issue_date.month - 1 + months
    year = issue_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(issue_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
