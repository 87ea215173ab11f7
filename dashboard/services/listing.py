"""
Filtering, sorting and pagination shared by every dashboard table.

A list view is: normalize the fetched items, keep the records accepted
by :func:`matches`, sort newest first, then cut one page out with
:func:`paginate`.  :class:`ListState` carries the criteria between
requests so that a change of search term or filter sends the user back
to page 1.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence

ALL = 'all'


@dataclass(frozen=True)
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def overlaps(self, start: Optional[datetime], end: Optional[datetime]) -> bool:
        """True when ``[start, end]`` overlaps this range.

        An unset bound on either side imposes no constraint, and so does
        an unknown record date on that side.
        """
        if self.start is not None and end is not None and end < self.start:
            return False
        if self.end is not None and start is not None and start > self.end:
            return False
        return True


@dataclass(frozen=True)
class Criteria:
    search: str = ''
    categorical: Mapping[str, str] = field(default_factory=dict)
    date_range: DateRange = field(default_factory=DateRange)

    def key(self) -> tuple:
        """Hashable form used to detect criteria changes."""
        cats = tuple(sorted((k, v) for k, v in self.categorical.items() if not is_unset(v)))
        return (self.search.strip().casefold(), cats, self.date_range.start, self.date_range.end)


def is_unset(selected: Optional[str]) -> bool:
    return selected is None or selected == '' or selected == ALL


def _search_matches(record, term: str) -> bool:
    needle = term.strip().casefold()
    if not needle:
        return True
    return any(needle in (t or '').casefold() for t in record.search_text())


def _category_matches(record, name: str, selected: Optional[str]) -> bool:
    if is_unset(selected):
        return True
    values = record.categories()
    if name not in values:
        # filters a record type does not declare never exclude it
        return True
    actual = values[name]
    if actual is None:
        return False
    if name in record.FOLDED:
        return str(actual).casefold() == str(selected).casefold()
    return str(actual) == str(selected)


def matches(record, criteria: Criteria) -> bool:
    if not _search_matches(record, criteria.search):
        return False
    for name, selected in criteria.categorical.items():
        if not _category_matches(record, name, selected):
            return False
    if not criteria.date_range.is_open:
        start, end = record.period()
        if not criteria.date_range.overlaps(start, end):
            return False
    return True


def filter_records(records: Iterable, criteria: Criteria) -> list:
    return [r for r in records if matches(r, criteria)]


def sort_newest_first(records: Iterable) -> list:
    """Stable sort by ``created_at`` descending; undated records go last."""
    records = list(records)
    dated = [r for r in records if r.created_at is not None]
    undated = [r for r in records if r.created_at is None]
    return sorted(dated, key=lambda r: r.created_at, reverse=True) + undated


def total_pages(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError('page_size must be positive')
    return math.ceil(count / page_size)


def paginate(records: Sequence, page_size: int, page: int) -> list:
    """1-indexed page slice; pages outside ``[1, total_pages]`` are empty."""
    if page_size <= 0:
        raise ValueError('page_size must be positive')
    if page < 1:
        return []
    return list(records[(page - 1) * page_size: page * page_size])


@dataclass
class Page:
    items: list
    page: int
    page_size: int
    total: int
    total_pages: int

    def to_dict(self) -> dict:
        return {
            'data': [r.to_dict() for r in self.items],
            'pagination': {
                'total': self.total,
                'page': self.page,
                'pageSize': self.page_size,
                'totalPages': self.total_pages,
            },
        }


def build_page(records: Iterable, criteria: Criteria, *, page: int, page_size: int) -> Page:
    visible = sort_newest_first(filter_records(records, criteria))
    return Page(
        items=paginate(visible, page_size, page),
        page=page,
        page_size=page_size,
        total=len(visible),
        total_pages=total_pages(len(visible), page_size),
    )


@dataclass(frozen=True)
class ListState:
    """Criteria and current page of one table for one user."""
    criteria: Criteria = field(default_factory=Criteria)
    page: int = 1

    def with_criteria(self, criteria: Criteria) -> 'ListState':
        if criteria.key() != self.criteria.key():
            return ListState(criteria=criteria, page=1)
        return replace(self, criteria=criteria)

    def go_to(self, page: int) -> 'ListState':
        return replace(self, page=page)
