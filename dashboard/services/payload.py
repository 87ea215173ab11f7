"""
Safe access to the care backend's nested JSON payloads.

Backend items are deeply nested and any level may be missing, ``null``
or of an unexpected type.  Normalizers read them only through these
helpers so that a malformed item degrades to default values instead of
raising.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timezone as dt_timezone
from typing import Any, Mapping, Optional, Sequence

from django.conf import settings
from django.utils.dateparse import parse_date, parse_datetime

_MISSING = object()


def dig(obj: Any, *path: Any, default: Any = None) -> Any:
    """Follow ``path`` through nested mappings and sequences.

    String steps index mappings, integer steps index lists (negative
    indexes allowed).  Any missing step, ``None`` value or type mismatch
    returns ``default``.
    """
    cur = obj
    for step in path:
        if cur is None:
            return default
        if isinstance(step, int) and not isinstance(step, bool):
            if not isinstance(cur, (list, tuple)):
                return default
            try:
                cur = cur[step]
            except IndexError:
                return default
        else:
            if not isinstance(cur, Mapping):
                return default
            cur = cur.get(step, _MISSING)
            if cur is _MISSING:
                return default
    return default if cur is None else cur


def latest_entry(items: Any) -> Mapping:
    """Return the most recent entry of a chronological history array.

    The backend appends history entries in order, so the last element is
    the current state.  A missing, empty or non-list value yields an
    empty mapping; so does a last element that is not a mapping.
    """
    if not isinstance(items, (list, tuple)) or not items:
        return {}
    last = items[-1]
    return last if isinstance(last, Mapping) else {}


def as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def text(value: Any, default: Optional[str] = None) -> Optional[str]:
    """Return ``value`` as a stripped string, or ``default`` when blank."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return default
    s = str(value).strip()
    return s if s else default


def ident(value: Any) -> Optional[str]:
    """Identifier from either a plain id or a populated ``{_id: ...}`` object."""
    if isinstance(value, Mapping):
        value = value.get('_id') or value.get('id')
    return text(value)


def flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def number(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return default


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp or date into an aware datetime.

    Date-only values map to midnight UTC.  Unparseable values give None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        raw = value.strip()
        try:
            dt = parse_datetime(raw)
            if dt is None:
                d = parse_date(raw)
                dt = datetime.combine(d, time.min) if d else None
        except ValueError:
            return None
        if dt is None:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=dt_timezone.utc)
    return dt


def title_words(value: Optional[str]) -> Optional[str]:
    """``in_transit`` -> ``In Transit``."""
    if not value:
        return value
    spaced = value.replace('_', ' ')
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), spaced)


def capitalize_first(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    return value[0].upper() + value[1:]


def asset_url(path: Any) -> str:
    """Resolve a backend-relative asset path against the care API host.

    Absolute URLs pass through; a missing path gives the placeholder.
    """
    if isinstance(path, (list, tuple)):
        path = next((p for p in path if text(p)), None)
    p = text(path)
    if not p:
        return settings.CARE_PLACEHOLDER_IMAGE
    if p.startswith(('http://', 'https://', 'data:')):
        return p
    return f"{settings.CARE_API_HOST}{p if p.startswith('/') else '/' + p}"


def first_text(*values: Any) -> Optional[str]:
    for v in values:
        t = text(v)
        if t:
            return t
    return None


def pick(items: Sequence[Any], index: int = 0) -> Mapping:
    """Element ``index`` of a list when it is a mapping, else ``{}``."""
    value = dig(items, index)
    return value if isinstance(value, Mapping) else {}
