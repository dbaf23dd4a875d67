"""Configuration de l'application Django pour la facturation PEPPOL."""

from django.apps import AppConfig


class PeppolBillingConfig(AppConfig):
    """Configuration de l'app Django peppol-billing."""

    name = "peppol_billing.contrib.django"
    label = "peppol_billing"
    verbose_name = "Facturation PEPPOL"
    default_auto_field = "django.db.models.BigAutoField"
