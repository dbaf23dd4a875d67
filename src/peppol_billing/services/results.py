"""Résultats typés des services.

FR: Les opérations de service retournent `Ok(valeur)` ou
    `Err(nature, message)` au lieu de lever : la couche de présentation
    distingue les échecs par `kind` sans analyser le message.
EN: Service operations return `Ok(value)` or `Err(kind, message)` instead
    of raising: the presentation layer tells failures apart by `kind`.
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from peppol_billing.errors import BillingError, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Succès portant la valeur produite."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Échec portant la nature et le message de l'erreur."""

    kind: ErrorKind
    message: str
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_error(cls, exc: BillingError) -> "Err":
        return cls(kind=exc.kind, message=exc.message, errors=list(exc.errors))


Result = Ok[T] | Err
