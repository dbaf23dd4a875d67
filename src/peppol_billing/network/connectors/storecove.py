"""Connecteur Storecove (point d'accès PEPPOL).

FR: Client HTTP de l'API Storecove v2 au-dessus de `requests.Session`. Les
    appels bloquants sont exécutés via `asyncio.to_thread`. La charge utile
    neutre est traduite au format Storecove (JSON camelCase) ou transmise
    en UBL brut (`submission_format="ubl"`). Storecove attend toujours le
    type `invoice`, y compris pour un avoir (montants négatifs), et la
    catégorie `zero_rated` pour le taux zéro.
EN: HTTP client for the Storecove v2 API over `requests.Session`, with
    blocking calls run through `asyncio.to_thread`. The neutral payload is
    translated to Storecove's camelCase JSON or sent as raw UBL. Storecove
    always expects the `invoice` document type, credit notes included
    (negative amounts), and `zero_rated` for the zero category.
"""

import asyncio
import base64
import logging
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Literal

import requests

from peppol_billing.network.base import BaseNetworkGateway
from peppol_billing.network.errors import (
    NetworkAuthenticationError,
    NetworkConnectionError,
    NetworkNotFoundError,
    NetworkRejectedError,
)
from peppol_billing.network.models import (
    LegalEntity,
    PayloadParty,
    RoutingIdentifier,
    SubmissionPayload,
    SubmissionResponse,
)
from peppol_billing.network.ubl import UBLSerializer
from peppol_billing.tax.classifier import TaxCategory

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.storecove.com/api/v2"
DEFAULT_TIMEOUT = 30.0

# Catégories Storecove
STORECOVE_CATEGORIES: dict[TaxCategory, str] = {
    TaxCategory.STANDARD: "standard",
    TaxCategory.ZERO: "zero_rated",
    TaxCategory.EXEMPT: "exempt",
}


def _number(value: Decimal) -> float:
    return float(value)


def _party_to_wire(party: PayloadParty) -> dict[str, Any]:
    block: dict[str, Any] = {
        "party": {
            "companyName": party.company_name,
            "address": {
                "street1": party.address.street1,
                "zip": party.address.zip,
                "city": party.address.city,
                "country": party.address.country,
            },
        }
    }
    if party.public_identifiers:
        block["publicIdentifiers"] = [
            {"scheme": i.scheme, "id": i.id} for i in party.public_identifiers
        ]
    return block


def payload_to_wire(payload: SubmissionPayload) -> dict[str, Any]:
    """Traduit la charge utile au format JSON `document_submissions`."""
    invoice: dict[str, Any] = {
        "invoiceNumber": payload.number,
        "issueDate": payload.issue_date.isoformat(),
        "documentCurrencyCode": payload.currency,
        "taxSystem": payload.tax_system,
        "accountingCustomerParty": _party_to_wire(payload.buyer),
        "invoiceLines": [
            {
                "description": line.description,
                "amountExcludingVat": _number(line.amount_excluding_vat),
                "tax": {
                    "percentage": _number(line.tax.percentage),
                    "category": STORECOVE_CATEGORIES[line.tax.category],
                    "country": line.tax.country,
                },
            }
            for line in payload.lines
        ],
        "taxSubtotals": [
            {
                "percentage": _number(s.percentage),
                "category": STORECOVE_CATEGORIES[s.category],
                "country": s.country,
                "taxableAmount": _number(s.taxable_amount),
                "taxAmount": _number(s.tax_amount),
            }
            for s in payload.tax_subtotals
        ],
        "amountIncludingVat": _number(payload.amount_including_vat),
    }
    if payload.due_date:
        invoice["dueDate"] = payload.due_date.isoformat()
    if payload.payment_means:
        invoice["paymentMeansArray"] = [
            {"account": m.account, "holder": m.holder, "code": str(m.code)}
            for m in payload.payment_means
        ]
    if payload.note:
        invoice["note"] = payload.note

    return {
        "legalEntityId": payload.legal_entity_id,
        "receiverLegalEntityId": payload.receiver_legal_entity_id,
        "routing": _routing_to_wire(payload),
        "document": {"documentType": "invoice", "invoice": invoice},
    }


def _routing_to_wire(payload: SubmissionPayload) -> dict[str, Any]:
    routing: dict[str, Any] = {"emails": list(payload.routing.emails)}
    if payload.routing.e_identifiers:
        routing["eIdentifiers"] = [
            {"scheme": i.scheme, "id": i.id} for i in payload.routing.e_identifiers
        ]
    return routing


def entity_to_wire(entity: LegalEntity) -> dict[str, Any]:
    """Corps JSON de création / mise à jour d'une entité légale."""
    return entity.model_dump(exclude={"id", "peppol_identifiers"}) | {"county": ""}


def _entity_from_wire(data: dict[str, Any]) -> LegalEntity:
    identifiers = [
        RoutingIdentifier(scheme=i["scheme"], id=i["identifier"])
        for i in data.get("peppol_identifiers") or []
        if i.get("scheme") and i.get("identifier")
    ]
    return LegalEntity(
        id=str(data["id"]) if data.get("id") is not None else None,
        party_name=data.get("party_name") or "",
        line1=data.get("line1") or "",
        line2=data.get("line2") or "",
        zip=data.get("zip") or "",
        city=data.get("city") or "",
        country=data.get("country") or "",
        acts_as_sender=bool(data.get("acts_as_sender")),
        acts_as_receiver=bool(data.get("acts_as_receiver", True)),
        tax_registered=bool(data.get("tax_registered", True)),
        public=bool(data.get("public", True)),
        advertisements=list(data.get("advertisements") or []),
        peppol_identifiers=identifiers,
    )


def _body(response: requests.Response) -> dict[str, Any] | str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    return data if isinstance(data, dict) else {"data": data}


class StorecoveGateway(BaseNetworkGateway):
    """Passerelle réseau Storecove.

    FR: Codes HTTP 401/403 → `NetworkAuthenticationError`, 404 →
        `NetworkNotFoundError`, erreur de transport →
        `NetworkConnectionError`. Une soumission refusée (autre code non
        2xx) retourne `ok=False` avec le corps de la réponse.
    EN: HTTP 401/403 → `NetworkAuthenticationError`, 404 →
        `NetworkNotFoundError`, transport error → `NetworkConnectionError`.
        A refused submission (other non-2xx status) returns `ok=False` with
        the response body.
    """

    def __init__(
        self,
        api_key: str,
        environment: str = "sandbox",
        base_url: str | None = None,
        *,
        submission_format: Literal["json", "ubl"] = "json",
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(api_key, environment, base_url or DEFAULT_BASE_URL)
        self.submission_format = submission_format
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> requests.Response:
        """Exécute une requête et traduit les erreurs communes."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            msg = f"Erreur de connexion vers Storecove ({method} {path}) : {exc}"
            raise NetworkConnectionError(msg) from exc

        if response.status_code in (401, 403):
            msg = f"Authentification refusée par Storecove ({response.status_code})"
            raise NetworkAuthenticationError(msg)
        if response.status_code == 404:
            raise NetworkNotFoundError(f"Ressource introuvable : {path}")
        return response

    async def _call(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> requests.Response:
        return await asyncio.to_thread(self._request, method, path, json)

    def _raise_for_rejection(self, response: requests.Response, action: str) -> None:
        if not response.ok:
            body = _body(response)
            msg = f"Storecove a refusé {action} ({response.status_code})"
            raise NetworkRejectedError(msg, errors=[str(body)])

    def _entity(self, response: requests.Response, action: str) -> LegalEntity:
        """Lit l'entité légale d'une réponse 2xx.

        Raises:
            NetworkRejectedError: Corps non JSON ou de forme inattendue.
        """
        try:
            data = response.json()
            if not isinstance(data, dict):
                raise TypeError(f"objet JSON attendu, reçu {type(data).__name__}")
            return _entity_from_wire(data)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            msg = f"Réponse Storecove illisible pour {action} ({response.status_code})"
            raise NetworkRejectedError(msg, errors=[str(exc)]) from exc

    # --- Annuaire ---

    async def lookup_identifiers(self, registration_id: str) -> list[RoutingIdentifier]:
        response = await self._call("GET", f"/legal_entities/{registration_id}")
        self._raise_for_rejection(response, "la consultation de l'entité légale")
        entity = self._entity(response, "la consultation de l'entité légale")
        return entity.peppol_identifiers

    # --- Soumission ---

    def build_submission(self, payload: SubmissionPayload) -> dict[str, Any]:
        """Corps de `POST /document_submissions` selon le format configuré."""
        if self.submission_format == "ubl":
            xml_bytes = UBLSerializer().serialize(payload)
            return {
                "legalEntityId": payload.legal_entity_id,
                "routing": _routing_to_wire(payload),
                "document": {
                    "documentType": "invoice",
                    "rawDocumentData": {
                        "document": base64.b64encode(xml_bytes).decode("ascii"),
                        "parse": True,
                        "parseStrategy": "ubl",
                    },
                },
            }
        return payload_to_wire(payload)

    async def submit(self, payload: SubmissionPayload) -> SubmissionResponse:
        body = self.build_submission(payload)
        response = await self._call("POST", "/document_submissions", body)
        data = _body(response)
        if not response.ok:
            logger.warning(
                "Soumission %s refusée par Storecove (%s)",
                payload.number,
                response.status_code,
            )
            return SubmissionResponse(ok=False, body=data)

        submission_id = data.get("guid") if isinstance(data, dict) else None
        logger.info("Document %s soumis à Storecove (%s)", payload.number, submission_id)
        return SubmissionResponse(
            ok=True,
            body=data,
            submission_id=submission_id,
            submitted_at=datetime.now(UTC),
        )

    # --- Entités légales ---

    async def create_legal_entity(self, entity: LegalEntity) -> LegalEntity:
        response = await self._call("POST", "/legal_entities", entity_to_wire(entity))
        self._raise_for_rejection(response, "la création de l'entité légale")
        return self._entity(response, "la création de l'entité légale")

    async def update_legal_entity(
        self, registration_id: str, entity: LegalEntity
    ) -> LegalEntity:
        response = await self._call(
            "PATCH", f"/legal_entities/{registration_id}", entity_to_wire(entity)
        )
        self._raise_for_rejection(response, "la mise à jour de l'entité légale")
        return self._entity(response, "la mise à jour de l'entité légale")

    async def add_identifier(
        self,
        registration_id: str,
        identifier: RoutingIdentifier,
        superscheme: str,
    ) -> RoutingIdentifier:
        response = await self._call(
            "POST",
            f"/legal_entities/{registration_id}/peppol_identifiers",
            {
                "identifier": identifier.id,
                "scheme": identifier.scheme,
                "superscheme": superscheme,
            },
        )
        self._raise_for_rejection(response, "l'ajout de l'identifiant PEPPOL")
        return identifier
