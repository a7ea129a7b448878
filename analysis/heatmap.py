"""Store x date order-count heatmap."""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .normalize import date_range, to_date
from .taxonomy import FINAL_INSTALL, UNASSIGNED_OWNER, is_store_seq, owner_display_name


def installed_store_lookup(stores: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Map seq -> store identity for stores currently in final install status."""
    lookup: Dict[str, Dict[str, Any]] = {}
    for s in stores:
        seq = s.get('seq')
        if s.get('status') != FINAL_INSTALL or not is_store_seq(seq):
            continue
        lookup[seq] = {
            'store_id': s.get('store_id'),
            'store_name': s.get('store_name'),
            'seq': seq,
            'owner_id': s.get('owner_id') or UNASSIGNED_OWNER,
        }
    return lookup


def accumulate_counts(pages: Iterable[Iterable[Dict[str, Any]]],
                      start: date,
                      end: date) -> Dict[str, Dict[date, int]]:
    """Fold scan pages into ``seq -> date -> order_count``.

    Rows outside ``[start, end]`` or without a seq/date are dropped. A
    repeated ``(seq, date)`` pair is summed, not overwritten.
    """
    counts: Dict[str, Dict[date, int]] = defaultdict(lambda: defaultdict(int))
    for page in pages:
        for row in page:
            seq = row.get('seq')
            day = to_date(row.get('order_date'))
            if not is_store_seq(seq) or day is None or day < start or day > end:
                continue
            counts[seq][day] += int(row.get('order_count') or 0)
    return {seq: dict(days) for seq, days in counts.items()}


def build_heatmap(lookup: Dict[str, Dict[str, Any]],
                  counts: Dict[str, Dict[date, int]],
                  start: date,
                  end: date,
                  owner_names: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """One row per installed store, busiest first.

    Every date in the window appears in every row; seqs that are not in
    ``lookup`` are left out.
    """
    dates = date_range(start, end)
    rows: List[Dict[str, Any]] = []
    owners: Dict[str, str] = {}
    for seq, info in lookup.items():
        per_day = counts.get(seq) or {}
        orders = {d.isoformat(): per_day.get(d, 0) for d in dates}
        rows.append({
            'seq': seq,
            'store_id': info['store_id'],
            'store_name': info['store_name'],
            'owner_id': info['owner_id'],
            'orders': orders,
            'total': sum(orders.values()),
        })
        owners.setdefault(info['owner_id'], owner_display_name(info['owner_id'], owner_names))

    # stable: equal totals keep roster order
    rows.sort(key=lambda r: r['total'], reverse=True)
    return {
        'period': {'start_date': start, 'end_date': end},
        'dates': [d.isoformat() for d in dates],
        'stores': rows,
        'owners': sorted(({'id': k, 'name': v} for k, v in owners.items()), key=lambda o: o['name']),
    }
