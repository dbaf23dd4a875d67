"""Interface abstraite pour les passerelles du réseau d'échange.

FR: Définit l'interface commune des points d'accès PEPPOL (Storecove,
    etc.) : consultation de l'annuaire, soumission de documents et gestion
    des entités légales et de leurs identifiants.
EN: Defines the common interface of PEPPOL access points: directory
    lookup, document submission and legal entity / identifier management.
"""

from abc import ABCMeta, abstractmethod

from peppol_billing.network.models import (
    LegalEntity,
    RoutingIdentifier,
    SubmissionPayload,
    SubmissionResponse,
)


class BaseNetworkGateway(metaclass=ABCMeta):
    """Classe de base abstraite pour les passerelles réseau.

    FR: Les connecteurs concrets héritent de cette classe. Toute erreur
        levée doit dériver de `NetworkError`.
    EN: Concrete connectors inherit from this class. Every raised error
        must derive from `NetworkError`.
    """

    def __init__(
        self,
        api_key: str,
        environment: str = "sandbox",
        base_url: str | None = None,
    ) -> None:
        self.api_key = api_key
        self.environment = environment
        self.base_url = base_url

    # --- Annuaire ---

    @abstractmethod
    async def lookup_identifiers(self, registration_id: str) -> list[RoutingIdentifier]:
        """Récupère les identifiants de routage d'une entité légale.

        Args:
            registration_id: Identifiant de l'entité légale côté point d'accès.

        Returns:
            Les identifiants publiés, éventuellement vide.

        Raises:
            NetworkNotFoundError: Si l'entité n'existe pas.
            NetworkAuthenticationError: Si l'authentification échoue.
            NetworkConnectionError: Si la connexion réseau échoue.
        """
        ...

    # --- Soumission ---

    @abstractmethod
    async def submit(self, payload: SubmissionPayload) -> SubmissionResponse:
        """Soumet un document au réseau.

        Args:
            payload: Charge utile construite par `DocumentFormatter`.

        Returns:
            Réponse avec `ok` faux si le point d'accès refuse le document.

        Raises:
            NetworkAuthenticationError: Si l'authentification échoue.
            NetworkConnectionError: Si la connexion réseau échoue.
        """
        ...

    # --- Entités légales ---

    @abstractmethod
    async def create_legal_entity(self, entity: LegalEntity) -> LegalEntity:
        """Crée une entité légale et retourne sa version enregistrée (avec `id`)."""
        ...

    @abstractmethod
    async def update_legal_entity(
        self, registration_id: str, entity: LegalEntity
    ) -> LegalEntity:
        """Met à jour une entité légale existante.

        Raises:
            NetworkNotFoundError: Si l'entité n'existe pas.
        """
        ...

    @abstractmethod
    async def add_identifier(
        self,
        registration_id: str,
        identifier: RoutingIdentifier,
        superscheme: str,
    ) -> RoutingIdentifier:
        """Ajoute un identifiant PEPPOL à une entité légale.

        Raises:
            NetworkNotFoundError: Si l'entité n'existe pas.
            NetworkRejectedError: Si l'identifiant est refusé.
        """
        ...
