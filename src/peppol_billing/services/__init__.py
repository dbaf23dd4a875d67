"""Services de facturation : orchestration de l'envoi et gestion des documents."""

from peppol_billing.services.documents import (
    DocumentService,
    DraftChanges,
    RenderData,
    Renderer,
)
from peppol_billing.services.orchestrator import (
    SubmissionOrchestrator,
    SubmissionOutcome,
    check_preconditions,
)
from peppol_billing.services.results import Err, Ok, Result

__all__ = [
    "DocumentService",
    "DraftChanges",
    "Err",
    "Ok",
    "RenderData",
    "Renderer",
    "Result",
    "SubmissionOrchestrator",
    "SubmissionOutcome",
    "check_preconditions",
]
