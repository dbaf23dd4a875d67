"""Hiérarchie d'exceptions de la facturation.

FR: Chaque exception porte un message lisible et une nature (`ErrorKind`)
    distinguable par la machine : validation, réseau, rendu, stockage, email.
EN: Every exception carries a human-readable message and a
    machine-distinguishable kind: validation, network, render, storage, email.
"""

from enum import StrEnum
from typing import ClassVar


class ErrorKind(StrEnum):
    """Nature d'une erreur remontée à l'appelant.

    FR: Permet à la couche de présentation de distinguer les échecs
        sans analyser le message.
    EN: Lets the presentation layer tell failures apart without parsing
        the message.
    """

    VALIDATION = "validation"
    NETWORK = "network"
    RENDER = "render"
    STORAGE = "storage"
    EMAIL = "email"


class BillingError(Exception):
    """Erreur de base pour toutes les opérations de facturation.

    FR: Classe parente de toutes les exceptions du paquet.
    EN: Base class for all package exceptions.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors: list[str] = errors or []


class ValidationError(BillingError):
    """Données manquantes ou invalides.

    FR: Levée avant tout appel externe ; rien n'est enregistré.
    EN: Raised before any external call; nothing is committed.
    """

    kind = ErrorKind.VALIDATION


class InvalidTransitionError(ValidationError):
    """Transition de statut non autorisée par la machine à états."""


class DocumentNotFoundError(ValidationError):
    """Document introuvable dans le dépôt."""


class NetworkError(BillingError):
    """Échec de l'annuaire ou de la passerelle du réseau d'échange.

    FR: Jamais fatale pour l'envoi : déclenche le repli par email.
    EN: Never fatal to a send: triggers the email fallback.
    """

    kind = ErrorKind.NETWORK


class RenderError(BillingError):
    """Échec du rendu PDF (fatal, le statut n'avance pas)."""

    kind = ErrorKind.RENDER


class StorageError(BillingError):
    """Échec d'écriture de l'artefact ou de persistance du document."""

    kind = ErrorKind.STORAGE


class ConcurrentModificationError(StorageError):
    """Le document a été modifié entre la lecture et l'écriture.

    FR: Levée par les dépôts quand la version attendue ne correspond plus.
    EN: Raised by repositories when the expected version no longer matches.
    """


class EmailDeliveryError(BillingError):
    """Échec d'envoi de l'email."""

    kind = ErrorKind.EMAIL
