"""Monthly install cohorts.

Stores are bucketed by the month of their first move into the final install
status, then each bucket is split by the store's state as of ``base_date``:
active (ordered within the recency window), churned (current status), or
inactive. The result also carries a node/link flow graph for a Sankey chart.
"""
from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .normalize import to_date
from .taxonomy import CHURNED, FINAL_INSTALL, is_store_seq


# Bucket for every install before the cutover date (bulk-imported history).
PRE_CUTOVER_KEY = '0000-00'
ACTIVE_WINDOW_DAYS = 14
DISPLAY_LIMIT = 6

STATE_ACTIVE = 'active'
STATE_INACTIVE = 'inactive'
STATE_CHURNED = 'churned'
TERMINAL_LABELS = OrderedDict([
    (STATE_ACTIVE, 'Active'),
    (STATE_INACTIVE, 'Inactive'),
    (STATE_CHURNED, 'Churned'),
])


def month_bucket(d: date) -> str:
    """Return the ``YYYY-MM`` key for a date or datetime."""
    return f"{d.year:04d}-{d.month:02d}"


def first_install_map(events: Iterable[Dict[str, Any]], final_status: str = FINAL_INSTALL) -> Dict[str, datetime]:
    """Earliest ``changed_at`` per store among events into ``final_status``.

    On equal timestamps the first event seen is kept.
    """
    first: Dict[str, datetime] = {}
    for ev in events:
        if ev.get('new_status') != final_status:
            continue
        store_id = ev.get('store_id')
        changed_at = ev.get('changed_at')
        if not store_id or changed_at is None:
            continue
        current = first.get(store_id)
        if current is None or changed_at < current:
            first[store_id] = changed_at
    return first


def cohort_key(installed_at: datetime, cutover: Optional[date] = None) -> str:
    if cutover is not None and to_date(installed_at) < cutover:
        return PRE_CUTOVER_KEY
    return month_bucket(installed_at)


def cohort_sort_key(key: str) -> Tuple[int, str]:
    """Sort key for descending order with the pre-cutover bucket pinned last."""
    if key == PRE_CUTOVER_KEY:
        return (0, '')
    return (1, key)


def active_window(base_date: date, days: int = ACTIVE_WINDOW_DAYS) -> Tuple[date, date]:
    return base_date - timedelta(days=days), base_date


def classify_store(store: Dict[str, Any], active_seqs: Set[str]) -> str:
    """Current state of an installed store.

    Recent orders win over a churned status: a terminated store that still
    ordered inside the window is reported active.
    """
    seq = store.get('seq')
    if is_store_seq(seq) and seq in active_seqs:
        return STATE_ACTIVE
    if store.get('status') in CHURNED:
        return STATE_CHURNED
    return STATE_INACTIVE


def cohort_label(key: str, total: int) -> str:
    if key == PRE_CUTOVER_KEY:
        return f"Earlier installs ({total})"
    return f"{key} installs ({total})"


def build_flow_graph(buckets: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Nodes for each cohort then the three terminal states; one link per nonzero count."""
    nodes = [{'name': cohort_label(b['month'], b['total'])} for b in buckets]
    terminal_index = {}
    for state, label in TERMINAL_LABELS.items():
        terminal_index[state] = len(nodes)
        nodes.append({'name': label})
    links = []
    for source, b in enumerate(buckets):
        for state in TERMINAL_LABELS:
            if b[state] > 0:
                links.append({'source': source, 'target': terminal_index[state], 'value': b[state]})
    return {'nodes': nodes, 'links': links}


def build_monthly_cohorts(stores: Iterable[Dict[str, Any]],
                          first_installs: Dict[str, datetime],
                          active_seqs: Set[str],
                          base_date: date,
                          cutover: Optional[date] = None,
                          limit: int = DISPLAY_LIMIT) -> Dict[str, Any]:
    """Bucket installed stores into monthly cohorts as of ``base_date``.

    ``active_seqs`` must already be restricted to the recency window ending
    at ``base_date``. ``summary`` covers every cohort; ``monthly`` and the
    flow graph only the ``limit`` most recent ones.
    """
    store_map = {s.get('store_id'): s for s in stores}
    buckets: Dict[str, Dict[str, Any]] = {}

    for store_id, installed_at in first_installs.items():
        store = store_map.get(store_id)
        if store is None:
            continue
        if to_date(installed_at) > base_date:
            continue
        key = cohort_key(installed_at, cutover)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = {
                'month': key,
                'total': 0,
                STATE_ACTIVE: 0,
                STATE_INACTIVE: 0,
                STATE_CHURNED: 0,
                'stores': [],
            }
        state = classify_store(store, active_seqs)
        bucket['total'] += 1
        bucket[state] += 1
        bucket['stores'].append({
            'store_id': store_id,
            'store_name': store.get('store_name'),
            'seq': store.get('seq'),
            'status': store.get('status'),
            'install_date': installed_at,
            'is_active': state == STATE_ACTIVE,
            'is_churned': store.get('status') in CHURNED,
        })

    ordered = sorted(buckets, key=cohort_sort_key, reverse=True)
    recent = [buckets[k] for k in ordered[:limit]]
    summary = {
        'total_installed': sum(b['total'] for b in buckets.values()),
        'total_active': sum(b[STATE_ACTIVE] for b in buckets.values()),
        'total_inactive': sum(b[STATE_INACTIVE] for b in buckets.values()),
        'total_churned': sum(b[STATE_CHURNED] for b in buckets.values()),
    }
    return {
        'base_date': base_date,
        'summary': summary,
        'monthly': recent,
        'sankey': build_flow_graph(recent),
    }
