"""Exceptions des passerelles du réseau d'échange.

FR: Erreurs typées d'authentification, de ressource introuvable, de
    connexion et de rejet, levées par les connecteurs. Toutes dérivent de
    `NetworkError` : l'orchestrateur les intercepte pour basculer sur
    l'envoi par email.
EN: Typed authentication, not-found, connection and rejection errors
    raised by connectors. All derive from `NetworkError`: the orchestrator
    catches them to fall back to email delivery.
"""

from peppol_billing.errors import NetworkError


class NetworkAuthenticationError(NetworkError):
    """Échec d'authentification auprès du point d'accès.

    FR: Clé API invalide, révoquée ou droits insuffisants.
    EN: Invalid or revoked API key, or insufficient permissions.
    """


class NetworkNotFoundError(NetworkError):
    """Entité légale ou ressource introuvable sur le point d'accès."""


class NetworkConnectionError(NetworkError):
    """Erreur de connexion réseau vers le point d'accès.

    FR: Timeout, DNS, TLS ou autre erreur de transport.
    EN: Timeout, DNS, TLS or other transport error.
    """


class NetworkRejectedError(NetworkError):
    """Document ou entité refusé par le point d'accès.

    FR: Les détails renvoyés par le point d'accès sont dans `errors`.
    EN: Details returned by the access point are in `errors`.
    """
