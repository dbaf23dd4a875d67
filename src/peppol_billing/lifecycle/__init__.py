"""Cycle de vie des documents de facturation.

FR: Machine à états brouillon / en attente / payé / en retard et balayage
    des échéances.
EN: Draft / pending / paid / overdue state machine and due-date sweep.
"""

from peppol_billing.lifecycle.manager import (
    STATUS_METADATA,
    TERMINAL_STATUSES,
    TRANSITIONS,
    LifecycleEvent,
    LifecycleManager,
    StatusInfo,
    advance,
    ensure_deletable,
    ensure_editable,
    is_overdue,
    sweep_overdue,
)

__all__ = [
    "LifecycleEvent",
    "LifecycleManager",
    "STATUS_METADATA",
    "StatusInfo",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "advance",
    "ensure_deletable",
    "ensure_editable",
    "is_overdue",
    "sweep_overdue",
]
