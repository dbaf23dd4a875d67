"""Configuration pytest pour les tests Django.

FR: Configure Django avec SQLite in-memory et le backend email locmem.
EN: Configures Django with in-memory SQLite and the locmem email backend.
"""

import django
from django.conf import settings


def pytest_configure() -> None:
    """Configure Django pour les tests."""
    if not settings.configured:
        settings.configure(
            DATABASES={
                "default": {
                    "ENGINE": "django.db.backends.sqlite3",
                    "NAME": ":memory:",
                },
            },
            INSTALLED_APPS=[
                "django.contrib.contenttypes",
                "django.contrib.auth",
                "peppol_billing.contrib.django",
            ],
            DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
            EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend",
            DEFAULT_FROM_EMAIL="facturation@atelier-lumiere.be",
            USE_TZ=True,
        )
        django.setup()


import pytest  # noqa: E402

from peppol_billing.models.document import BillingDocument  # noqa: E402


@pytest.fixture
def stored_invoice(db, invoice: BillingDocument) -> BillingDocument:
    """Fixture : facture enregistrée en base (version 1)."""
    from peppol_billing.contrib.django.repository import save_document

    return save_document(invoice)
