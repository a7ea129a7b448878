"""Store status taxonomy.

Status codes are fixed; the sets below classify them into funnel stages.
Two "install completed" sets exist because the daily snapshot and the live
dashboard count installs differently. They are kept apart on purpose and
each consumer picks the one it reports with.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional


PRE_INTRODUCTION = 'PRE_INTRODUCTION'
VISIT_PENDING = 'VISIT_PENDING'
VISIT_COMPLETED = 'VISIT_COMPLETED'
REVISIT_SCHEDULED = 'REVISIT_SCHEDULED'
INFO_REQUEST = 'INFO_REQUEST'
REMOTE_INSTALL_SCHEDULED = 'REMOTE_INSTALL_SCHEDULED'
ADMIN_SETTING = 'ADMIN_SETTING'
QR_LINKING = 'QR_LINKING'
QR_MENU_ONLY = 'QR_MENU_ONLY'
DEFECT_REPAIR = 'DEFECT_REPAIR'
QR_MENU_INSTALL = 'QR_MENU_INSTALL'
SERVICE_TERMINATED = 'SERVICE_TERMINATED'
UNUSED_TERMINATED = 'UNUSED_TERMINATED'
PENDING = 'PENDING'

# The one status that means "fully installed right now".
FINAL_INSTALL = QR_MENU_INSTALL

STATUS_CHOICES = [
    (PRE_INTRODUCTION, 'Pre-introduction'),
    (VISIT_PENDING, 'Visit pending'),
    (VISIT_COMPLETED, 'Visit completed'),
    (REVISIT_SCHEDULED, 'Revisit scheduled'),
    (INFO_REQUEST, 'Info requested'),
    (REMOTE_INSTALL_SCHEDULED, 'Remote install scheduled'),
    (ADMIN_SETTING, 'Admin setting'),
    (QR_LINKING, 'POS linking'),
    (QR_MENU_ONLY, 'QR menu only'),
    (DEFECT_REPAIR, 'Defect repair'),
    (QR_MENU_INSTALL, 'Install completed'),
    (SERVICE_TERMINATED, 'Service terminated'),
    (UNUSED_TERMINATED, 'Terminated (unused)'),
    (PENDING, 'On hold'),
]

UNKNOWN_STATUS = 'UNKNOWN'
# old_status value written for a freshly registered store
NO_PRIOR_STATUS = 'N/A'
UNASSIGNED_OWNER = 'unassigned'
UNMAPPED_SEQ = 'UNMAPPED'

INSTALL_COMPLETED_FOR_FUNNEL: FrozenSet[str] = frozenset({QR_MENU_INSTALL})
INSTALL_COMPLETED_FOR_DASHBOARD: FrozenSet[str] = frozenset({
    QR_MENU_INSTALL,
    SERVICE_TERMINATED,
    UNUSED_TERMINATED,
    DEFECT_REPAIR,
})
CHURNED: FrozenSet[str] = frozenset({SERVICE_TERMINATED, UNUSED_TERMINATED})

IN_PROGRESS: FrozenSet[str] = frozenset({
    VISIT_PENDING,
    VISIT_COMPLETED,
    REVISIT_SCHEDULED,
    INFO_REQUEST,
    REMOTE_INSTALL_SCHEDULED,
    ADMIN_SETTING,
    QR_LINKING,
})

# A move into FINAL_INSTALL from one of these counts as a weekly-cohort install.
INSTALL_PROGRESS: FrozenSet[str] = frozenset({
    PRE_INTRODUCTION,
    VISIT_COMPLETED,
    REVISIT_SCHEDULED,
    INFO_REQUEST,
    REMOTE_INSTALL_SCHEDULED,
    ADMIN_SETTING,
    QR_LINKING,
    QR_MENU_ONLY,
})

# Statuses an installed store falls back to when its install is put on hold.
HOLD: FrozenSet[str] = frozenset({
    REVISIT_SCHEDULED,
    INFO_REQUEST,
    REMOTE_INSTALL_SCHEDULED,
    ADMIN_SETTING,
    QR_LINKING,
})


@dataclass(frozen=True)
class StatusTaxonomy:
    """Install/churn membership used by one report."""
    name: str
    install_completed: FrozenSet[str]
    churned: FrozenSet[str] = CHURNED

    def is_install_completed(self, status: Optional[str]) -> bool:
        return status in self.install_completed

    def is_churned(self, status: Optional[str]) -> bool:
        return status in self.churned


FUNNEL_TAXONOMY = StatusTaxonomy('funnel', INSTALL_COMPLETED_FOR_FUNNEL)
DASHBOARD_TAXONOMY = StatusTaxonomy('dashboard', INSTALL_COMPLETED_FOR_DASHBOARD)


def is_new_registration(old_status: Optional[str]) -> bool:
    """True when an event has no prior status (store was just registered)."""
    return not old_status or old_status == NO_PRIOR_STATUS


def is_store_seq(seq: Optional[str]) -> bool:
    """True when ``seq`` can reference a store's order records."""
    return bool(seq) and seq != UNMAPPED_SEQ


def owner_display_name(owner_id: Optional[str], names: Optional[dict] = None) -> str:
    """Resolve a display name for an owner id, falling back to the email local part."""
    owner_id = owner_id or UNASSIGNED_OWNER
    if names and names.get(owner_id):
        return names[owner_id]
    return owner_id.split('@')[0]
