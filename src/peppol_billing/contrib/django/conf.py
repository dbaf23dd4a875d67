"""Configuration de la facturation via settings Django.

FR: Helper pour accéder aux paramètres PEPPOL_BILLING définis dans
    settings.py. Fournit des valeurs par défaut, un instanciateur dynamique
    du connecteur réseau et du moteur de rendu, et construit le contexte
    de facturation à partir de l'émetteur configuré.
EN: Helper for accessing PEPPOL_BILLING settings defined in settings.py.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.utils.module_loading import import_string

from peppol_billing.config import DEFAULT_COUNTRY, DEFAULT_CURRENCY, BillingContext
from peppol_billing.models.party import IssuerProfile
from peppol_billing.network.base import BaseNetworkGateway
from peppol_billing.services.documents import Renderer

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, object] = {
    "GATEWAY_CLASS": None,
    "GATEWAY_API_KEY": "",
    "GATEWAY_ENVIRONMENT": "sandbox",
    "GATEWAY_BASE_URL": None,
    "GATEWAY_OPTIONS": {},
    "RENDERER": None,
    "ISSUER": None,
    "DEFAULT_CURRENCY": DEFAULT_CURRENCY,
    "DEFAULT_COUNTRY": DEFAULT_COUNTRY,
    "LOCALE": "en",
    "STORAGE_LOCATION": "peppol_billing/",
}


def get_setting(name: str) -> object:
    """Retourne la valeur d'un paramètre PEPPOL_BILLING.

    FR: Cherche dans settings.PEPPOL_BILLING[name], puis dans les défauts.
    EN: Looks up settings.PEPPOL_BILLING[name], then falls back to defaults.
    """
    if name not in DEFAULTS:
        msg = f"Paramètre PEPPOL_BILLING inconnu : {name}"
        raise KeyError(msg)
    user_settings = getattr(settings, "PEPPOL_BILLING", {})
    return user_settings.get(name, DEFAULTS[name])


def get_gateway_instance() -> BaseNetworkGateway:
    """Instancie dynamiquement le connecteur réseau configuré.

    FR: Utilise GATEWAY_CLASS, GATEWAY_API_KEY, GATEWAY_ENVIRONMENT,
        GATEWAY_BASE_URL et les options supplémentaires GATEWAY_OPTIONS.
    EN: Uses GATEWAY_CLASS, GATEWAY_API_KEY, GATEWAY_ENVIRONMENT,
        GATEWAY_BASE_URL and the extra GATEWAY_OPTIONS.

    Raises:
        ValueError: Si GATEWAY_CLASS n'est pas configuré.
    """
    gateway_class_path = get_setting("GATEWAY_CLASS")
    if not gateway_class_path:
        msg = (
            "PEPPOL_BILLING['GATEWAY_CLASS'] n'est pas configuré. "
            "Spécifiez le chemin complet de la classe du connecteur."
        )
        raise ValueError(msg)

    gateway_class = import_string(gateway_class_path)
    logger.debug("Connecteur réseau : %s", gateway_class_path)
    return gateway_class(
        api_key=get_setting("GATEWAY_API_KEY"),
        environment=get_setting("GATEWAY_ENVIRONMENT"),
        base_url=get_setting("GATEWAY_BASE_URL"),
        **get_setting("GATEWAY_OPTIONS"),
    )


def get_renderer() -> Renderer:
    """Importe le moteur de rendu PDF configuré (chemin pointé).

    Raises:
        ValueError: Si RENDERER n'est pas configuré.
    """
    renderer_path = get_setting("RENDERER")
    if not renderer_path:
        msg = (
            "PEPPOL_BILLING['RENDERER'] n'est pas configuré. "
            "Spécifiez le chemin complet de la fonction de rendu PDF."
        )
        raise ValueError(msg)
    return import_string(renderer_path)


def get_billing_context() -> BillingContext:
    """Construit le contexte de facturation depuis ISSUER.

    Raises:
        ValueError: Si ISSUER n'est pas configuré.
    """
    issuer = get_setting("ISSUER")
    if not issuer:
        msg = "PEPPOL_BILLING['ISSUER'] n'est pas configuré."
        raise ValueError(msg)
    return BillingContext(
        issuer=IssuerProfile.model_validate(issuer),
        currency=get_setting("DEFAULT_CURRENCY"),
        locale=get_setting("LOCALE"),
        default_country=get_setting("DEFAULT_COUNTRY"),
    )
