"""Modèles Django pour la facturation PEPPOL.

FR: Modèles Django mappés sur les modèles Pydantic de la lib. Le partenaire
    est une table à part, partagée entre documents ; les lignes sont
    remplacées en bloc à chaque enregistrement.
EN: Django models mapped to the library's Pydantic models. The trading
    partner has its own table shared between documents; lines are replaced
    wholesale on every save.
"""

from __future__ import annotations

from uuid import uuid4

from django.db import models

from peppol_billing.models.document import BillingDocument as PydanticDocument
from peppol_billing.models.document import CatalogItem
from peppol_billing.models.document import LineItem as PydanticLineItem
from peppol_billing.models.enums import DocumentKind, DocumentStatus, PartyType
from peppol_billing.models.party import Address
from peppol_billing.models.party import Party as PydanticParty


class DocumentStatusChoices(models.TextChoices):
    """Statuts d'un document."""

    DRAFT = DocumentStatus.DRAFT.value, "Brouillon"
    PENDING = DocumentStatus.PENDING.value, "En attente"
    PAID = DocumentStatus.PAID.value, "Payé"
    OVERDUE = DocumentStatus.OVERDUE.value, "En retard"


class DocumentKindChoices(models.TextChoices):
    INVOICE = DocumentKind.INVOICE.value, "Facture"
    CREDIT_NOTE = DocumentKind.CREDIT_NOTE.value, "Avoir"


class PartyTypeChoices(models.TextChoices):
    BUSINESS = PartyType.BUSINESS.value, "Entreprise"
    INDIVIDUAL = PartyType.INDIVIDUAL.value, "Particulier"


class Party(models.Model):
    """Partenaire commercial (client).

    FR: `reference` porte l'identifiant du modèle Pydantic ; il est généré
        à la première sauvegarde si le partenaire n'en a pas.
    EN: `reference` holds the Pydantic model's identifier; it is generated
        on first save when the partner has none.
    """

    reference = models.CharField("référence", max_length=64, unique=True)
    name = models.CharField("nom", max_length=200)
    type = models.CharField(
        "type",
        max_length=20,
        choices=PartyTypeChoices.choices,
        default=PartyTypeChoices.BUSINESS,
    )

    # --- Adresse ---
    street = models.CharField("rue", max_length=200, blank=True, default="")
    number = models.CharField("numéro", max_length=20, blank=True, default="")
    bus = models.CharField("boîte", max_length=20, blank=True, default="")
    postal_code = models.CharField("code postal", max_length=20, blank=True, default="")
    city = models.CharField("ville", max_length=100, blank=True, default="")
    country_code = models.CharField("pays", max_length=2, blank=True, default="")

    # --- Contact et réseau ---
    vat_number = models.CharField("n° TVA", max_length=30, blank=True, default="")
    email = models.EmailField("email", blank=True, default="")
    phone = models.CharField("téléphone", max_length=30, blank=True, default="")
    network_registration_id = models.CharField(
        "identifiant réseau", max_length=100, blank=True, default=""
    )

    class Meta:
        verbose_name = "partenaire"
        verbose_name_plural = "partenaires"

    def __str__(self) -> str:
        return self.name

    def to_pydantic(self) -> PydanticParty:
        """Convertit le partenaire Django en modèle Pydantic."""
        return PydanticParty(
            id=self.reference,
            name=self.name,
            type=PartyType(self.type),
            address=Address(
                street=self.street,
                number=self.number or None,
                bus=self.bus or None,
                postal_code=self.postal_code,
                city=self.city,
                country_code=self.country_code or None,
            ),
            vat_number=self.vat_number or None,
            email=self.email or None,
            phone=self.phone or None,
            network_registration_id=self.network_registration_id or None,
        )

    def apply_pydantic(self, party: PydanticParty) -> None:
        """Recopie les champs d'un partenaire Pydantic (sans sauvegarder)."""
        self.name = party.name
        self.type = str(party.type)
        self.street = party.address.street
        self.number = party.address.number or ""
        self.bus = party.address.bus or ""
        self.postal_code = party.address.postal_code
        self.city = party.address.city
        self.country_code = party.address.country_code or ""
        self.vat_number = party.vat_number or ""
        self.email = party.email or ""
        self.phone = party.phone or ""
        self.network_registration_id = party.network_registration_id or ""

    @classmethod
    def upsert_pydantic(cls, party: PydanticParty) -> Party:
        """Crée ou met à jour le partenaire désigné par `party.id`."""
        instance = cls.objects.filter(reference=party.id).first() if party.id else None
        if instance is None:
            instance = cls(reference=party.id or uuid4().hex)
        instance.apply_pydantic(party)
        instance.save()
        return instance


class BillingDocument(models.Model):
    """Facture ou avoir.

    FR: Convertible vers/depuis le modèle Pydantic de la lib. `version`
        sert au contrôle de concurrence optimiste du dépôt.
    EN: Convertible to/from the library's Pydantic model. `version` backs
        the repository's optimistic concurrency check.
    """

    # --- Identification ---
    document_id = models.CharField("identifiant", max_length=64, unique=True)
    kind = models.CharField(
        "type de document",
        max_length=20,
        choices=DocumentKindChoices.choices,
        default=DocumentKindChoices.INVOICE,
    )
    number = models.CharField("numéro", max_length=50)
    issue_date = models.DateField("date d'émission")
    due_date = models.DateField("date d'échéance", blank=True, null=True)
    status = models.CharField(
        "statut",
        max_length=10,
        choices=DocumentStatusChoices.choices,
        default=DocumentStatusChoices.DRAFT,
    )
    notes = models.TextField("notes", blank=True, default="")
    owner_id = models.CharField(
        "propriétaire", max_length=64, blank=True, null=True
    )
    party = models.ForeignKey(
        Party,
        on_delete=models.PROTECT,
        related_name="documents",
        verbose_name="partenaire",
    )

    # --- Totaux ---
    subtotal = models.DecimalField("total HT", max_digits=14, decimal_places=2, default=0)
    tax_total = models.DecimalField("total TVA", max_digits=14, decimal_places=2, default=0)
    total = models.DecimalField("total TTC", max_digits=14, decimal_places=2, default=0)

    # --- Envoi ---
    artifact_path = models.CharField("chemin du PDF", max_length=255, blank=True, default="")
    version = models.PositiveIntegerField("version", default=0)

    # --- Métadonnées ---
    created_at = models.DateTimeField("date de création", auto_now_add=True)
    updated_at = models.DateTimeField("date de modification", auto_now=True)

    class Meta:
        verbose_name = "document"
        verbose_name_plural = "documents"
        constraints = [
            models.UniqueConstraint(
                fields=["owner_id", "kind", "number"],
                name="unique_owner_kind_number",
            ),
        ]
        indexes = [
            models.Index(
                fields=["status", "due_date"],
                name="idx_status_due_date",
            ),
        ]

    def __str__(self) -> str:
        return f"Document {self.number}"

    def to_pydantic(self) -> PydanticDocument:
        """Convertit le document Django en modèle Pydantic, lignes incluses."""
        return PydanticDocument(
            id=self.document_id,
            kind=DocumentKind(self.kind),
            number=self.number,
            issue_date=self.issue_date,
            due_date=self.due_date,
            status=DocumentStatus(self.status),
            notes=self.notes or None,
            owner_id=self.owner_id,
            party=self.party.to_pydantic(),
            items=[item.to_pydantic() for item in self.items.all()],
            subtotal=self.subtotal,
            tax_total=self.tax_total,
            total=self.total,
            artifact_path=self.artifact_path or None,
            version=self.version,
        )

    def apply_pydantic(self, document: PydanticDocument, party: Party) -> None:
        """Recopie les champs d'un document Pydantic (hors lignes et version)."""
        self.document_id = document.id
        self.kind = str(document.kind)
        self.number = document.number
        self.issue_date = document.issue_date
        self.due_date = document.due_date
        self.status = str(document.status)
        self.notes = document.notes or ""
        self.owner_id = document.owner_id
        self.party = party
        self.subtotal = document.subtotal
        self.tax_total = document.tax_total
        self.total = document.total
        self.artifact_path = document.artifact_path or ""

    @classmethod
    def from_pydantic(cls, document: PydanticDocument, party: Party) -> BillingDocument:
        """Crée une instance Django (non sauvée) depuis un modèle Pydantic."""
        instance = cls(version=document.version)
        instance.apply_pydantic(document, party)
        return instance


class LineItem(models.Model):
    """Ligne de document.

    FR: Copie de l'article au moment de la saisie ; `vat_rate_label` est le
        taux effectif de la ligne, `item_vat_rate_label` celui de l'article.
    EN: Snapshot of the catalog item; `vat_rate_label` is the line's
        effective rate, `item_vat_rate_label` the item's own.
    """

    document = models.ForeignKey(
        BillingDocument,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name="document",
    )
    position = models.PositiveIntegerField("position")
    catalog_reference = models.CharField(
        "référence article", max_length=64, blank=True, default=""
    )
    title = models.CharField("désignation", max_length=500)
    unit_price = models.DecimalField("prix unitaire HT", max_digits=12, decimal_places=4)
    quantity = models.DecimalField("quantité", max_digits=12, decimal_places=4)
    item_vat_rate_label = models.CharField("taux de l'article", max_length=20)
    vat_rate_label = models.CharField("taux de TVA", max_length=20)

    class Meta:
        verbose_name = "ligne de document"
        verbose_name_plural = "lignes de document"
        ordering = ["position"]

    def __str__(self) -> str:
        return f"Ligne {self.position} : {self.title}"

    def to_pydantic(self) -> PydanticLineItem:
        """Convertit la ligne Django en ligne Pydantic."""
        return PydanticLineItem(
            item=CatalogItem(
                id=self.catalog_reference or None,
                title=self.title,
                unit_price=self.unit_price,
                vat_rate_label=self.item_vat_rate_label,
            ),
            quantity=self.quantity,
            vat_rate=self.vat_rate_label,
        )

    @classmethod
    def from_pydantic(
        cls, line: PydanticLineItem, document: BillingDocument, idx: int = 1
    ) -> LineItem:
        """Crée une instance Django (non sauvée) depuis une ligne Pydantic."""
        return cls(
            document=document,
            position=idx,
            catalog_reference=line.item.id or "",
            title=line.item.title,
            unit_price=line.item.unit_price,
            quantity=line.quantity,
            item_vat_rate_label=line.item.vat_rate_label,
            vat_rate_label=line.vat_rate_label,
        )
