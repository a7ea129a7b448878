"""Week-over-week inactivity: stores that ordered on the same weekday last week but not today."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional, Set

from .taxonomy import FINAL_INSTALL, UNASSIGNED_OWNER, is_store_seq, owner_display_name


def last_week_same_day(target_date: date) -> date:
    return target_date - timedelta(days=7)


def _install_sort_value(value: Any) -> str:
    # unknown install dates sort as the oldest
    if value is None:
        return '0000-00-00'
    return value.isoformat() if hasattr(value, 'isoformat') else str(value)


def detect_inactive(target_date: date,
                    last_week_counts: Dict[str, int],
                    target_active: Set[str],
                    stores: Iterable[Dict[str, Any]],
                    first_installs: Dict[str, Any],
                    owner_names: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Compare positive-order seqs on ``target_date`` against a week earlier.

    ``last_week_counts`` maps seq -> order count for seqs with orders a week
    before; ``target_active`` is the set of seqs with orders on the target
    date. Only stores whose current status is final install are reported.
    """
    by_seq = {s.get('seq'): s for s in stores if is_store_seq(s.get('seq'))}
    inactive = []
    for seq, count in last_week_counts.items():
        if seq in target_active:
            continue
        store = by_seq.get(seq)
        if store is None or store.get('status') != FINAL_INSTALL:
            continue
        owner_id = store.get('owner_id') or UNASSIGNED_OWNER
        inactive.append({
            'store_id': store.get('store_id'),
            'store_name': store.get('store_name'),
            'seq': seq,
            'owner_id': owner_id,
            'owner_name': owner_display_name(owner_id, owner_names),
            'first_install_completed_at': first_installs.get(store.get('store_id')),
            'last_week_order_count': count,
        })
    inactive.sort(key=lambda r: _install_sort_value(r['first_install_completed_at']), reverse=True)

    return {
        'target_date': target_date,
        'last_week_same_day': last_week_same_day(target_date),
        'day_of_week': f"{target_date:%A}",
        'stores': inactive,
        'summary': {
            'last_week_active': len(last_week_counts),
            'target_date_active': len(target_active),
            'inactive_count': len(inactive),
        },
    }
