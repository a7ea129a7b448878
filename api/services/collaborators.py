"""Read access to the roster, event log and order aggregate tables.

Every report reads through these helpers and receives plain dicts, so the
``analysis`` package never touches the ORM. Order aggregates are read with
a continuation-token scan: each page carries the key to resume from, and
callers keep asking until that key comes back as ``None``.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from django.conf import settings
from django.db import connections

from analysis.cohorts import first_install_map
from analysis.taxonomy import FINAL_INSTALL, UNMAPPED_SEQ
from ..models import DailyOrderStats, Owner, StatusChangeEvent, Store, StoreDailyOrders, StoreOrderStats

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
DEFAULT_LOOKUP_WORKERS = 8


@dataclass
class ScanPage:
    items: List[Dict[str, Any]] = field(default_factory=list)
    last_evaluated_key: Optional[int] = None


def page_size() -> int:
    return int(getattr(settings, 'ORDER_SCAN_PAGE_SIZE', DEFAULT_PAGE_SIZE) or DEFAULT_PAGE_SIZE)


def lookup_workers() -> int:
    return int(getattr(settings, 'HISTORY_LOOKUP_WORKERS', DEFAULT_LOOKUP_WORKERS) or 1)


# --- roster ---

def scan_stores() -> List[Dict[str, Any]]:
    return [s.as_record() for s in Store.objects.all().order_by('pk')]


def scan_stores_by_status(status: str) -> List[Dict[str, Any]]:
    return [s.as_record() for s in Store.objects.filter(status=status).order_by('pk')]


def owner_names() -> Dict[str, str]:
    return {o.owner_id: o.name for o in Owner.objects.all() if o.name}


# --- event history ---

def scan_events() -> List[Dict[str, Any]]:
    return [e.as_record() for e in StatusChangeEvent.objects.all()]


def events_on(day: date) -> List[Dict[str, Any]]:
    """Events whose ``changed_date`` is ``day`` (indexed lookup)."""
    return [e.as_record() for e in StatusChangeEvent.objects.filter(changed_date=day)]


def install_events(final_status: str = FINAL_INSTALL) -> List[Dict[str, Any]]:
    return [e.as_record() for e in StatusChangeEvent.objects.filter(new_status=final_status)]


def history_for_store(store_id: str) -> List[Dict[str, Any]]:
    return [e.as_record() for e in StatusChangeEvent.objects.filter(store_id=store_id)]


def first_install_for_store(store_id: str, final_status: str = FINAL_INSTALL):
    """Earliest move into ``final_status`` for one store, or None."""
    return first_install_map(history_for_store(store_id), final_status).get(store_id)


# --- order aggregates ---

def scan_daily_orders_page(start: Optional[date] = None,
                           end: Optional[date] = None,
                           exclusive_start_key: Optional[int] = None,
                           limit: Optional[int] = None) -> ScanPage:
    """Fetch one page of ``StoreDailyOrders`` rows.

    The returned ``last_evaluated_key`` is None once the table is exhausted.
    """
    limit = limit or page_size()
    qs = StoreDailyOrders.objects.exclude(seq=UNMAPPED_SEQ)
    if start is not None:
        qs = qs.filter(order_date__gte=start)
    if end is not None:
        qs = qs.filter(order_date__lte=end)
    if exclusive_start_key is not None:
        qs = qs.filter(pk__gt=exclusive_start_key)
    rows = list(qs.order_by('pk')[:limit])
    last_key = rows[-1].pk if len(rows) == limit else None
    return ScanPage(items=[r.as_record() for r in rows], last_evaluated_key=last_key)


def scan_pages(start: Optional[date] = None,
               end: Optional[date] = None,
               limit: Optional[int] = None,
               fetch: Optional[Callable[..., ScanPage]] = None) -> Iterator[List[Dict[str, Any]]]:
    """Yield page item lists until the continuation key runs out."""
    fetch = fetch or scan_daily_orders_page
    key = None
    pages = 0
    while True:
        page = fetch(start=start, end=end, exclusive_start_key=key, limit=limit)
        pages += 1
        yield page.items
        key = page.last_evaluated_key
        if key is None:
            break
    logger.debug('daily order scan finished after %s page(s)', pages)


def scan_daily_orders(start: Optional[date] = None,
                      end: Optional[date] = None,
                      limit: Optional[int] = None) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for items in scan_pages(start, end, limit):
        rows.extend(items)
    return rows


def daily_orders_on(day: date) -> List[Dict[str, Any]]:
    qs = StoreDailyOrders.objects.filter(order_date=day).exclude(seq=UNMAPPED_SEQ)
    return [r.as_record() for r in qs]


def order_dates() -> List[date]:
    """Distinct days with a per-day stats row or any per-store order row, ascending."""
    days = set(DailyOrderStats.objects.values_list('order_date', flat=True))
    days.update(StoreDailyOrders.objects.values_list('order_date', flat=True).distinct())
    return sorted(days)


def order_stats_by_seq() -> Dict[str, Dict[str, int]]:
    return {
        s.seq: {'order_count': s.order_count, 'customer_count': s.customer_count}
        for s in StoreOrderStats.objects.all()
    }


def daily_stats(start: date, end: date) -> List[Dict[str, Any]]:
    qs = DailyOrderStats.objects.filter(order_date__gte=start, order_date__lte=end).order_by('order_date')
    return [r.as_record() for r in qs]


# --- bounded fan-out ---

def _call_in_worker(fn: Callable[[Any], Any], key: Any) -> Any:
    try:
        return fn(key)
    finally:
        # worker threads get their own DB connections
        connections.close_all()


def fan_out(keys: Iterable[Any],
            fn: Callable[[Any], Any],
            max_workers: Optional[int] = None) -> Dict[Any, Any]:
    """Run ``fn`` for every key on a fixed-width pool and merge by key.

    A lookup that raises is logged and recorded as None. With a width of
    one the calls run inline on the calling thread.
    """
    keys = list(dict.fromkeys(keys))
    workers = lookup_workers() if max_workers is None else max_workers
    results: Dict[Any, Any] = {}
    if workers <= 1 or len(keys) <= 1:
        for key in keys:
            try:
                results[key] = fn(key)
            except Exception:
                logger.warning('lookup failed for %s', key, exc_info=True)
                results[key] = None
        return results

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='history-lookup') as pool:
        futures = {pool.submit(_call_in_worker, fn, key): key for key in keys}
        for future in as_completed(futures):
            key = futures[future]
            try:
                results[key] = future.result()
            except Exception:
                logger.warning('lookup failed for %s', key, exc_info=True)
                results[key] = None
    return results
