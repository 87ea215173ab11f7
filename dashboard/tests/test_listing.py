from datetime import datetime, timedelta, timezone

import pytest

from dashboard.normalizers import normalize_welfare_check
from dashboard.records import Basket, Incident, ServiceUser, WelfareCheck
from dashboard.serializers.listing import ListQuerySerializer
from dashboard.services.listing import (
    ALL, Criteria, DateRange, ListState, build_page, filter_records, matches, paginate,
    sort_newest_first, total_pages,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_all_sentinel_accepts_every_record():
    records = [WelfareCheck(id=str(i), status=s) for i, s in enumerate(['Good', 'poor', None])]
    assert filter_records(records, Criteria(categorical={'status': ALL})) == records
    assert filter_records(records, Criteria(categorical={'status': ''})) == records


def test_search_is_case_insensitive():
    rec = Incident(id='1', title='Broken Window', description='', resident_involved='Amira Khan')
    assert matches(rec, Criteria(search='broken'))
    assert matches(rec, Criteria(search='AMIRA'))
    assert matches(rec, Criteria(search='  '))
    assert not matches(rec, Criteria(search='door'))


def test_basket_search_covers_notes():
    rec = Basket(id='b', resident_name='Sam', notes='Needs nappies')
    assert matches(rec, Criteria(search='NAPPIES'))


@pytest.mark.parametrize('term', ['Smith & Jones', 'a<b', 'x > y'])
def test_search_term_keeps_markup_characters(term):
    q = ListQuerySerializer(data={'search': f'  {term} '})
    assert q.is_valid(), q.errors
    criteria = q.criteria()
    assert criteria.search == term
    assert matches(ServiceUser(full_name=f'Dr {term.upper()}'), criteria)


def test_page_outside_range_is_not_a_validation_error():
    for page in ('0', '-3'):
        q = ListQuerySerializer(data={'page': page})
        assert q.is_valid(), q.errors


def test_status_folding_follows_record_declaration():
    assert matches(Incident(status='OPEN'), Criteria(categorical={'status': 'open'}))
    # basket status compares exactly
    assert not matches(Basket(status='Requested'), Criteria(categorical={'status': 'requested'}))
    assert matches(Basket(status='Requested'), Criteria(categorical={'status': 'Requested'}))


def test_missing_category_value_does_not_match_a_selection():
    assert not matches(WelfareCheck(status=None), Criteria(categorical={'status': 'good'}))


def test_undeclared_filter_is_ignored():
    assert matches(WelfareCheck(status='good'), Criteria(categorical={'branch': 'b1'}))


def test_date_overlap():
    rec = WelfareCheck(week_start=utc(2024, 1, 1), week_end=utc(2024, 1, 7))
    assert matches(rec, Criteria(date_range=DateRange(utc(2024, 1, 5), utc(2024, 1, 10))))
    assert not matches(rec, Criteria(date_range=DateRange(start=utc(2024, 1, 10))))
    assert not matches(rec, Criteria(date_range=DateRange(end=utc(2023, 12, 31))))
    assert matches(rec, Criteria(date_range=DateRange(end=utc(2024, 1, 1))))


def test_single_timestamp_is_a_point_interval():
    rec = Incident(created_at=utc(2024, 3, 3, 12))
    assert matches(rec, Criteria(date_range=DateRange(utc(2024, 3, 3), utc(2024, 3, 3, 23, 59))))
    assert not matches(rec, Criteria(date_range=DateRange(utc(2024, 3, 4))))


def test_sort_newest_first_keeps_undated_last_and_is_stable():
    a = Incident(id='a', created_at=utc(2024, 1, 1))
    b = Incident(id='b', created_at=utc(2024, 1, 3))
    c = Incident(id='c')
    d = Incident(id='d', created_at=utc(2024, 1, 1))
    assert [r.id for r in sort_newest_first([a, c, b, d])] == ['b', 'a', 'd', 'c']


def test_paginate_slices():
    records = list(range(25))
    assert paginate(records, 10, 2) == list(range(10, 20))
    assert paginate(records, 10, 3) == [20, 21, 22, 23, 24]
    assert paginate(records, 10, 4) == []
    assert paginate(records, 10, 0) == []
    assert paginate([], 10, 1) == []


def test_total_pages():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2
    with pytest.raises(ValueError):
        total_pages(5, 0)


def test_changing_criteria_resets_page():
    state = ListState().with_criteria(Criteria(search='a')).go_to(3)
    assert state.page == 3
    assert state.with_criteria(Criteria(search='a')).page == 3
    assert state.with_criteria(Criteria(search='ab')).page == 1
    assert state.with_criteria(Criteria(search='a', categorical={'status': 'good'})).page == 1
    assert state.with_criteria(Criteria(search='a', date_range=DateRange(utc(2024, 1, 1)))).page == 1


def test_all_and_unset_are_the_same_criteria():
    state = ListState().go_to(2)
    assert state.with_criteria(Criteria(categorical={'status': ALL})).page == 2


def test_welfare_page_one_holds_ten_newest():
    base = utc(2024, 1, 1)
    payloads = [
        {'_id': f'w{i}', 'createdAt': (base + timedelta(days=i)).isoformat(), 'details': []}
        for i in range(25)
    ]
    records = [normalize_welfare_check(p) for p in payloads]
    page = build_page(records, Criteria(), page=1, page_size=10)
    assert page.total == 25
    assert page.total_pages == 3
    assert [r.id for r in page.items] == [f'w{i}' for i in range(24, 14, -1)]
    stamps = [r.created_at for r in page.items]
    assert stamps == sorted(stamps, reverse=True)
    body = page.to_dict()
    assert body['pagination'] == {'total': 25, 'page': 1, 'pageSize': 10, 'totalPages': 3}
    assert len(body['data']) == 10
