"""Date normalization helpers shared by the analytics modules.

Upstream rows carry dates in a few shapes: ``date``/``datetime`` objects,
ISO timestamps (``2025-12-07T11:24:26.054Z``) and dotted, unpadded strings
(``2025.1.5``). Everything is reduced to ``datetime.date`` here; callers
render ISO strings only at the edges.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, List, Optional

import pandas as pd


DATE_SEPARATOR_RE = re.compile(r"[./]")
YMD_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def to_date(value: Any) -> Optional[date]:
    """Coerce ``value`` to a date, returning None when it can't be read."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if s == '':
        return None
    # Keep only the calendar part of timestamps
    s = DATE_SEPARATOR_RE.sub('-', s.split('T')[0].split(' ')[0])
    m = YMD_RE.match(s)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None
    dt = pd.to_datetime(s, errors='coerce')
    if pd.isna(dt):
        return None
    return dt.date()


def parse_query_date(value: Optional[str]) -> Optional[date]:
    """Parse an optional query parameter. Raises ValueError on garbage."""
    if value is None or str(value).strip() == '':
        return None
    d = to_date(value)
    if d is None:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")
    return d


def ordered_window(start: date, end: date) -> tuple:
    """Return ``(start, end)`` swapped if given in reverse."""
    if start > end:
        return end, start
    return start, end


def date_range(start: date, end: date) -> List[date]:
    """Every calendar day in ``[start, end]``, inclusive. Empty if reversed."""
    if start > end:
        return []
    return [ts.date() for ts in pd.date_range(start=start, end=end, freq='D')]


def monday_of(d: date) -> date:
    return d - timedelta(days=d.weekday())
