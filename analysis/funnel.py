"""Funnel aggregation for daily snapshots.

A store record is a dict with keys ``store_id``, ``seq``, ``status``,
``owner_id``; an event is a dict with ``old_status``/``new_status``. The
functions are pure: persistence lives in ``api.services.snapshots``.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .normalize import to_date
from .taxonomy import (
    FUNNEL_TAXONOMY,
    UNASSIGNED_OWNER,
    UNKNOWN_STATUS,
    StatusTaxonomy,
    is_new_registration,
    is_store_seq,
)


OVERALL_SCOPE = 'overall'


def owner_scope(owner_id: str) -> str:
    return f'owner:{owner_id}'


def percent(numerator: int, denominator: int) -> float:
    """Percentage rounded to one decimal; 0 when the denominator is 0."""
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator * 100, 1)


def active_seqs_from_aggregates(rows: Iterable[Dict[str, Any]],
                                start: Optional[date] = None,
                                end: Optional[date] = None) -> Set[str]:
    """Collect the ``seq`` values that count as active.

    Without a window a seq is active when any of its days has a positive
    order count. With a window, every seq that appears inside it is active.
    """
    windowed = start is not None and end is not None
    active: Set[str] = set()
    for r in rows:
        seq = r.get('seq')
        if not is_store_seq(seq):
            continue
        if windowed:
            d = to_date(r.get('order_date'))
            if d is None or d < start or d > end:
                continue
            active.add(seq)
        elif (r.get('order_count') or 0) > 0:
            active.add(seq)
    return active


class FunnelAccumulator:
    """Counters for one reporting scope (overall or a single owner)."""

    def __init__(self):
        self.stage_counts: Dict[str, int] = {}
        self.registered = 0
        self.install_completed = 0
        self.active = 0
        self.churned = 0

    def add(self, status: str, installed: bool, active: bool, churned: bool) -> None:
        self.stage_counts[status] = self.stage_counts.get(status, 0) + 1
        self.registered += 1
        if installed:
            self.install_completed += 1
        if active:
            self.active += 1
        if churned:
            self.churned += 1

    @property
    def total_stores(self) -> int:
        return sum(self.stage_counts.values())

    def funnel(self, include_churned: bool = False) -> Dict[str, int]:
        out = {
            'registered': self.registered,
            'install_completed': self.install_completed,
            'active': self.active,
        }
        if include_churned:
            out['churned'] = self.churned
        return out

    def conversion(self) -> Dict[str, float]:
        return {
            'register_to_install': percent(self.install_completed, self.registered),
            'install_to_active': percent(self.active, self.install_completed),
        }


def aggregate_roster(stores: Iterable[Dict[str, Any]],
                     active_seqs: Set[str],
                     taxonomy: StatusTaxonomy = FUNNEL_TAXONOMY) -> Tuple[FunnelAccumulator, Dict[str, FunnelAccumulator]]:
    """Single pass over the roster.

    Returns the overall accumulator and one accumulator per owner id. Owner
    buckets are created the first time an owner is seen.
    """
    overall = FunnelAccumulator()
    owners: Dict[str, FunnelAccumulator] = {}
    for store in stores:
        status = store.get('status') or UNKNOWN_STATUS
        owner_id = store.get('owner_id') or UNASSIGNED_OWNER
        seq = store.get('seq')
        installed = taxonomy.is_install_completed(status)
        active = is_store_seq(seq) and seq in active_seqs
        churned = taxonomy.is_churned(status)

        overall.add(status, installed, active, churned)
        bucket = owners.get(owner_id)
        if bucket is None:
            bucket = owners[owner_id] = FunnelAccumulator()
        bucket.add(status, installed, active, churned)
    return overall, owners


def summarize_events(events: Iterable[Dict[str, Any]],
                     taxonomy: StatusTaxonomy = FUNNEL_TAXONOMY) -> Dict[str, Any]:
    """Count today's registrations, installs and churns.

    ``churn_by_stage`` maps the status a store churned *from* to a count.
    """
    new_registered = 0
    new_install = 0
    churned = 0
    churn_by_stage: Dict[str, int] = {}
    for ev in events:
        old_status = ev.get('old_status')
        new_status = ev.get('new_status')
        if is_new_registration(old_status):
            new_registered += 1
        if taxonomy.is_install_completed(new_status):
            new_install += 1
        if taxonomy.is_churned(new_status):
            churned += 1
            source = old_status or UNKNOWN_STATUS
            churn_by_stage[source] = churn_by_stage.get(source, 0) + 1
    return {
        'new_registered': new_registered,
        'new_install': new_install,
        'churned': churned,
        'churn_by_stage': churn_by_stage,
    }


def build_snapshots(snapshot_date: date,
                    stores: Iterable[Dict[str, Any]],
                    events: Iterable[Dict[str, Any]],
                    active_seqs: Set[str],
                    yesterday: Optional[Dict[str, Any]] = None,
                    taxonomy: StatusTaxonomy = FUNNEL_TAXONOMY) -> List[Dict[str, Any]]:
    """Build the overall snapshot followed by one snapshot per owner.

    ``yesterday`` is the previous overall snapshot payload, if any; when it
    is missing the daily active delta is computed against zero.
    """
    overall, owners = aggregate_roster(stores, active_seqs, taxonomy)
    today = summarize_events(events, taxonomy)

    yesterday_active = 0
    if yesterday:
        yesterday_active = int((yesterday.get('funnel') or {}).get('active') or 0)
    new_active = overall.active - yesterday_active

    snapshots = [{
        'snapshot_date': snapshot_date,
        'scope': OVERALL_SCOPE,
        'stage_counts': overall.stage_counts,
        'total_stores': overall.total_stores,
        'funnel': overall.funnel(),
        'conversion': overall.conversion(),
        'daily_change': {
            'new_registered': today['new_registered'],
            'new_install': today['new_install'],
            'new_active': new_active if new_active > 0 else 0,
            'churned': today['churned'],
        },
        'churn_analysis': {
            'total_churned': overall.churned,
            'by_stage': today['churn_by_stage'],
        },
    }]
    for owner_id in sorted(owners):
        acc = owners[owner_id]
        snapshots.append({
            'snapshot_date': snapshot_date,
            'scope': owner_scope(owner_id),
            'stage_counts': acc.stage_counts,
            'total_stores': acc.total_stores,
            'funnel': acc.funnel(),
            'conversion': acc.conversion(),
            'daily_change': None,
            'churn_analysis': None,
        })
    return snapshots
