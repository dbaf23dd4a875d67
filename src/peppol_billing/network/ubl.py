"""Sérialiseur UBL 2.1 (PEPPOL BIS Billing 3.0).

FR: Produit un XML OASIS UBL 2.1 `Invoice` ou `CreditNote` à partir d'une
    charge utile de soumission, pour les points d'accès qui reçoivent le
    document brut plutôt que du JSON. Dans un `CreditNote`, les montants
    sont positifs : le signe négatif de la charge utile est retiré.
EN: Produces an OASIS UBL 2.1 `Invoice` or `CreditNote` XML from a
    submission payload, for access points that take the raw document
    instead of JSON. In a `CreditNote` amounts are positive: the payload's
    negative sign is dropped.
"""

from datetime import date
from decimal import Decimal

from lxml import etree

from peppol_billing.models.enums import DocumentKind
from peppol_billing.network.models import (
    PayloadLine,
    PayloadParty,
    PaymentMeans,
    SubmissionPayload,
    TaxSubtotal,
)
from peppol_billing.tax.classifier import TaxCategory

# --- Namespaces UBL 2.1 ---
INV_NS = "urn:oasis:names:specification:ubl:schema:xsd:Invoice-2"
CN_NS = "urn:oasis:names:specification:ubl:schema:xsd:CreditNote-2"
CAC = "urn:oasis:names:specification:ubl:schema:xsd:CommonAggregateComponents-2"
CBC = "urn:oasis:names:specification:ubl:schema:xsd:CommonBasicComponents-2"

CUSTOMIZATION_ID = (
    "urn:cen.eu:en16931:2017#compliant#urn:fdc:peppol.eu:2017:poacc:billing:3.0"
)
PROFILE_ID = "urn:fdc:peppol.eu:2017:poacc:billing:3.0"

INVOICE_TYPE_CODE = "380"
CREDIT_NOTE_TYPE_CODE = "381"
CREDIT_TRANSFER_CODE = "58"

# --- Codes de catégorie UNCL5305 ---
CATEGORY_CODES: dict[TaxCategory, str] = {
    TaxCategory.STANDARD: "S",
    TaxCategory.ZERO: "Z",
    TaxCategory.EXEMPT: "E",
}

# --- Schémas d'identifiants → codes ICD (EndpointID/@schemeID) ---
ENDPOINT_SCHEMES: dict[str, str] = {
    "BE:EN": "0208",
    "BE:VAT": "9925",
    "DE:VAT": "9930",
    "FR:VAT": "9957",
    "LU:VAT": "9938",
    "NL:KVK": "0106",
    "NL:VAT": "9944",
}


def _cac(tag: str) -> str:
    """Construit un nom qualifié dans le namespace CAC."""
    return f"{{{CAC}}}{tag}"


def _cbc(tag: str) -> str:
    """Construit un nom qualifié dans le namespace CBC."""
    return f"{{{CBC}}}{tag}"


def _fmt_amount(amount: Decimal) -> str:
    """Formate un montant avec 2 décimales."""
    return f"{amount:.2f}"


def _fmt_date(d: date) -> str:
    """Formate une date au format ISO 8601 (YYYY-MM-DD)."""
    return d.strftime("%Y-%m-%d")


class UBLSerializer:
    """Sérialiseur de charges utiles au format UBL 2.1.

    FR: Gère la distinction Invoice / CreditNote selon `document_type`.
    EN: Picks Invoice or CreditNote from `document_type`.
    """

    def serialize(self, payload: SubmissionPayload) -> bytes:
        """Génère le XML UBL de la charge utile."""
        self._credit_note = payload.document_type == DocumentKind.CREDIT_NOTE
        root = self._build_root()
        self._build_header(root, payload)
        self._build_party(root, "AccountingSupplierParty", payload.seller)
        self._build_party(root, "AccountingCustomerParty", payload.buyer)
        for means in payload.payment_means:
            self._build_payment_means(root, means)
        self._build_tax_total(root, payload)
        self._build_legal_monetary_total(root, payload)
        for idx, line in enumerate(payload.lines, start=1):
            self._build_line(root, line, idx, payload.currency)
        return etree.tostring(
            root,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=True,
        )

    def _amount(self, value: Decimal) -> Decimal:
        return abs(value) if self._credit_note else value

    def _money(
        self, parent: etree._Element, tag: str, value: Decimal, currency: str
    ) -> None:
        element = etree.SubElement(parent, _cbc(tag))
        element.set("currencyID", currency)
        element.text = _fmt_amount(self._amount(value))

    # --- Construction de l'arbre XML ---

    def _build_root(self) -> etree._Element:
        """Construit l'élément racine Invoice ou CreditNote."""
        if self._credit_note:
            nsmap = {None: CN_NS, "cac": CAC, "cbc": CBC}
            return etree.Element(f"{{{CN_NS}}}CreditNote", nsmap=nsmap)
        nsmap = {None: INV_NS, "cac": CAC, "cbc": CBC}
        return etree.Element(f"{{{INV_NS}}}Invoice", nsmap=nsmap)

    def _build_header(
        self, root: etree._Element, payload: SubmissionPayload
    ) -> None:
        """Construit les éléments d'en-tête (ID, dates, type, devise, note)."""
        etree.SubElement(root, _cbc("CustomizationID")).text = CUSTOMIZATION_ID
        etree.SubElement(root, _cbc("ProfileID")).text = PROFILE_ID
        etree.SubElement(root, _cbc("ID")).text = payload.number
        etree.SubElement(root, _cbc("IssueDate")).text = _fmt_date(payload.issue_date)

        # DueDate : niveau racine pour Invoice uniquement
        if payload.due_date and not self._credit_note:
            etree.SubElement(root, _cbc("DueDate")).text = _fmt_date(payload.due_date)

        if self._credit_note:
            type_code = etree.SubElement(root, _cbc("CreditNoteTypeCode"))
            type_code.text = CREDIT_NOTE_TYPE_CODE
        else:
            etree.SubElement(root, _cbc("InvoiceTypeCode")).text = INVOICE_TYPE_CODE

        if payload.note:
            etree.SubElement(root, _cbc("Note")).text = payload.note

        etree.SubElement(root, _cbc("DocumentCurrencyCode")).text = payload.currency
        etree.SubElement(root, _cbc("BuyerReference")).text = payload.number

    # --- Parties ---

    def _build_party(
        self, root: etree._Element, wrapper_tag: str, party: PayloadParty
    ) -> None:
        """Construit AccountingSupplierParty ou AccountingCustomerParty."""
        wrapper = etree.SubElement(root, _cac(wrapper_tag))
        party_el = etree.SubElement(wrapper, _cac("Party"))

        for identifier in party.public_identifiers[:1]:
            scheme_id = ENDPOINT_SCHEMES.get(identifier.scheme.upper())
            if scheme_id:
                endpoint = etree.SubElement(party_el, _cbc("EndpointID"))
                endpoint.set("schemeID", scheme_id)
                endpoint.text = identifier.id

        party_name = etree.SubElement(party_el, _cac("PartyName"))
        etree.SubElement(party_name, _cbc("Name")).text = party.company_name

        address = etree.SubElement(party_el, _cac("PostalAddress"))
        if party.address.street1:
            street = etree.SubElement(address, _cbc("StreetName"))
            street.text = party.address.street1
        if party.address.city:
            etree.SubElement(address, _cbc("CityName")).text = party.address.city
        if party.address.zip:
            etree.SubElement(address, _cbc("PostalZone")).text = party.address.zip
        country = etree.SubElement(address, _cac("Country"))
        country_code = etree.SubElement(country, _cbc("IdentificationCode"))
        country_code.text = party.address.country

        if party.vat_number:
            tax_scheme_wrapper = etree.SubElement(party_el, _cac("PartyTaxScheme"))
            company_id = etree.SubElement(tax_scheme_wrapper, _cbc("CompanyID"))
            company_id.text = party.vat_number
            tax_scheme = etree.SubElement(tax_scheme_wrapper, _cac("TaxScheme"))
            etree.SubElement(tax_scheme, _cbc("ID")).text = "VAT"

        legal_entity = etree.SubElement(party_el, _cac("PartyLegalEntity"))
        registration = etree.SubElement(legal_entity, _cbc("RegistrationName"))
        registration.text = party.company_name

    # --- Paiement ---

    def _build_payment_means(self, root: etree._Element, means: PaymentMeans) -> None:
        """Construit PaymentMeans (virement sur IBAN)."""
        means_el = etree.SubElement(root, _cac("PaymentMeans"))
        code = etree.SubElement(means_el, _cbc("PaymentMeansCode"))
        code.text = CREDIT_TRANSFER_CODE
        account = etree.SubElement(means_el, _cac("PayeeFinancialAccount"))
        etree.SubElement(account, _cbc("ID")).text = means.account
        etree.SubElement(account, _cbc("Name")).text = means.holder

    # --- TVA ---

    def _build_tax_total(
        self, root: etree._Element, payload: SubmissionPayload
    ) -> None:
        """Construit TaxTotal avec un TaxSubtotal par tranche."""
        tax_total = etree.SubElement(root, _cac("TaxTotal"))
        total_tax = sum((s.tax_amount for s in payload.tax_subtotals), Decimal("0.00"))
        self._money(tax_total, "TaxAmount", total_tax, payload.currency)
        for subtotal in payload.tax_subtotals:
            self._build_tax_subtotal(tax_total, subtotal, payload.currency)

    def _build_tax_subtotal(
        self, parent: etree._Element, subtotal: TaxSubtotal, currency: str
    ) -> None:
        """Construit un bloc TaxSubtotal."""
        subtotal_el = etree.SubElement(parent, _cac("TaxSubtotal"))
        self._money(subtotal_el, "TaxableAmount", subtotal.taxable_amount, currency)
        self._money(subtotal_el, "TaxAmount", subtotal.tax_amount, currency)
        self._build_category(
            subtotal_el, "TaxCategory", subtotal.category, subtotal.percentage
        )

    def _build_category(
        self,
        parent: etree._Element,
        tag: str,
        category: TaxCategory,
        percentage: Decimal,
    ) -> None:
        tax_cat = etree.SubElement(parent, _cac(tag))
        etree.SubElement(tax_cat, _cbc("ID")).text = CATEGORY_CODES[category]
        etree.SubElement(tax_cat, _cbc("Percent")).text = _fmt_amount(percentage)
        if category == TaxCategory.EXEMPT and tag == "TaxCategory":
            etree.SubElement(tax_cat, _cbc("TaxExemptionReason")).text = "Exempt"
        tax_scheme = etree.SubElement(tax_cat, _cac("TaxScheme"))
        etree.SubElement(tax_scheme, _cbc("ID")).text = "VAT"

    # --- Totaux monétaires ---

    def _build_legal_monetary_total(
        self, root: etree._Element, payload: SubmissionPayload
    ) -> None:
        """Construit LegalMonetaryTotal à partir des tranches."""
        monetary = etree.SubElement(root, _cac("LegalMonetaryTotal"))
        currency = payload.currency
        taxable = sum(
            (s.taxable_amount for s in payload.tax_subtotals), Decimal("0.00")
        )
        self._money(monetary, "LineExtensionAmount", taxable, currency)
        self._money(monetary, "TaxExclusiveAmount", taxable, currency)
        total = payload.amount_including_vat
        self._money(monetary, "TaxInclusiveAmount", total, currency)
        self._money(monetary, "PayableAmount", total, currency)

    # --- Lignes ---

    def _build_line(
        self, root: etree._Element, line: PayloadLine, idx: int, currency: str
    ) -> None:
        """Construit InvoiceLine ou CreditNoteLine (quantité 1)."""
        line_tag = "CreditNoteLine" if self._credit_note else "InvoiceLine"
        line_el = etree.SubElement(root, _cac(line_tag))
        etree.SubElement(line_el, _cbc("ID")).text = str(idx)

        qty_tag = "CreditedQuantity" if self._credit_note else "InvoicedQuantity"
        qty = etree.SubElement(line_el, _cbc(qty_tag))
        qty.set("unitCode", "C62")
        qty.text = "1"

        self._money(line_el, "LineExtensionAmount", line.amount_excluding_vat, currency)

        item = etree.SubElement(line_el, _cac("Item"))
        etree.SubElement(item, _cbc("Name")).text = line.description
        self._build_category(
            item, "ClassifiedTaxCategory", line.tax.category, line.tax.percentage
        )

        price = etree.SubElement(line_el, _cac("Price"))
        self._money(price, "PriceAmount", line.amount_excluding_vat, currency)
