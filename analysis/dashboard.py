"""Live dashboard overview.

Uses the dashboard install taxonomy (terminated and repair stores still count
as having been installed) and breaks installed stores down by current state.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Set

from .funnel import FunnelAccumulator, percent
from .normalize import to_date
from .taxonomy import (
    DASHBOARD_TAXONOMY,
    DEFECT_REPAIR,
    FINAL_INSTALL,
    PENDING,
    SERVICE_TERMINATED,
    UNASSIGNED_OWNER,
    UNKNOWN_STATUS,
    UNUSED_TERMINATED,
    StatusTaxonomy,
    is_store_seq,
    owner_display_name,
)


DETAIL_KEYS = ('active', 'inactive', 'churned_service', 'churned_unused', 'repair', 'pending', 'active_not_completed')

_DETAIL_BY_STATUS = {
    SERVICE_TERMINATED: 'churned_service',
    UNUSED_TERMINATED: 'churned_unused',
    DEFECT_REPAIR: 'repair',
}


def _detail_key(status: str, installed: bool, has_order: bool, in_range: bool) -> Optional[str]:
    # on-hold stores are listed whether or not the taxonomy counts them as installed
    if status == PENDING:
        return 'pending'
    if not installed:
        return 'active_not_completed' if has_order else None
    if status == FINAL_INSTALL:
        if has_order:
            return 'active'
        return 'inactive' if in_range else None
    return _DETAIL_BY_STATUS.get(status)


def build_overview(stores: Iterable[Dict[str, Any]],
                   active_seqs: Set[str],
                   order_stats: Dict[str, Dict[str, int]],
                   first_installs: Dict[str, Any],
                   owner_names: Optional[Dict[str, str]] = None,
                   window_end: Optional[date] = None,
                   total_order_count: int = 0,
                   total_customer_count: int = 0,
                   taxonomy: StatusTaxonomy = DASHBOARD_TAXONOMY) -> Dict[str, Any]:
    """Compute the dashboard's overall block and per-owner rows.

    ``order_stats`` maps seq to ``{'order_count', 'customer_count'}``.
    ``window_end`` is set when the caller filtered activity to a date
    window: installed stores created after it are left out of the inactive
    list since they could not have ordered in the window.
    """
    overall = FunnelAccumulator()
    owners: Dict[str, FunnelAccumulator] = {}
    detail: Dict[str, List[Dict[str, Any]]] = {k: [] for k in DETAIL_KEYS}

    for store in stores:
        status = store.get('status') or UNKNOWN_STATUS
        owner_id = store.get('owner_id') or UNASSIGNED_OWNER
        seq = store.get('seq') or ''
        has_order = is_store_seq(seq) and seq in active_seqs
        installed = taxonomy.is_install_completed(status)
        churned = taxonomy.is_churned(status)

        overall.add(status, installed, has_order, churned)
        if owner_id not in owners:
            owners[owner_id] = FunnelAccumulator()
        owners[owner_id].add(status, installed, has_order, churned)

        created = to_date(store.get('created_at'))
        in_range = window_end is None or created is None or created <= window_end
        key = _detail_key(status, installed, has_order, in_range)
        if key is None:
            continue
        stats = order_stats.get(seq) or {}
        first_install = first_installs.get(store.get('store_id'))
        detail[key].append({
            'store_id': store.get('store_id'),
            'store_name': store.get('store_name'),
            'seq': seq,
            'owner_id': owner_id,
            'owner_name': owner_display_name(owner_id, owner_names),
            'status': status,
            'created_at': store.get('created_at'),
            'first_install_completed_at': first_install,
            'has_order': has_order,
            'order_count': int(stats.get('order_count') or 0) if has_order else 0,
            'customer_count': int(stats.get('customer_count') or 0) if has_order else 0,
        })

    install_detail: Dict[str, Any] = dict(detail)
    install_detail['summary'] = {k: len(v) for k, v in detail.items()}

    owner_rows = []
    for owner_id, acc in owners.items():
        owner_rows.append({
            'owner_id': owner_id,
            'owner_name': owner_display_name(owner_id, owner_names),
            'stats': acc.stage_counts,
            'funnel': acc.funnel(include_churned=True),
            'conversion': acc.conversion(),
        })

    return {
        'overall': {
            'stats': overall.stage_counts,
            'total_stores': overall.registered,
            'total_order_count': total_order_count,
            'total_customer_count': total_customer_count,
            'funnel': overall.funnel(include_churned=True),
            'conversion': {
                'active_rate': percent(overall.active, overall.install_completed),
                'churn_rate': percent(overall.churned, overall.install_completed),
            },
            'churned': overall.churned,
            'install_detail': install_detail,
        },
        'owners': owner_rows,
    }
