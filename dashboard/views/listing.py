"""
Shared plumbing for the dashboard list endpoints.

Each table keeps a :class:`ListState` per user in the cache.  A request
carrying different criteria than the stored ones lands on page 1; a
request with the same criteria may move to any page.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

from django.core.cache import cache
from rest_framework.response import Response

from dashboard.serializers.listing import CATEGORY_PARAMS, ListQuerySerializer
from dashboard.services import collections
from dashboard.services.listing import ALL, Criteria, ListState, build_page, filter_records

STATE_TTL = 60 * 60 * 8


def _state_key(user, resource: str) -> str:
    return f'liststate:{resource}:{user.pk}'


def load_state(user, resource: str) -> ListState:
    state = cache.get(_state_key(user, resource))
    return state if isinstance(state, ListState) else ListState()


def save_state(user, resource: str, state: ListState) -> None:
    cache.set(_state_key(user, resource), state, STATE_TTL)


def next_state(previous: ListState, criteria: Criteria, page: Optional[int]) -> ListState:
    state = previous.with_criteria(criteria)
    if page is not None and criteria.key() == previous.criteria.key():
        state = state.go_to(page)
    return state


def parse_query(request) -> ListQuerySerializer:
    q = ListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return q


def records_of(collection: str, normalize: Callable) -> list:
    return [normalize(item) for item in collections.load(collection)]


def list_response(request, resource: str, records: Sequence, *,
                  params: Sequence[str] = CATEGORY_PARAMS,
                  query: Optional[ListQuerySerializer] = None,
                  criteria: Optional[Criteria] = None,
                  extra: Optional[dict] = None,
                  summarize: Optional[Callable[[list], dict]] = None) -> Response:
    """Filter, sort and paginate ``records`` for the requesting user.

    ``criteria`` replaces the ones parsed from the query string.
    ``summarize`` receives every record the criteria accept and returns
    extra response keys.
    """
    query = query or parse_query(request)
    criteria = criteria or query.criteria(params)
    previous = load_state(request.user, resource)
    state = next_state(previous, criteria, query.validated_data.get('page'))
    save_state(request.user, resource, state)

    page = build_page(records, state.criteria, page=state.page, page_size=query.page_size)
    body = {'ok': True, **page.to_dict(), 'filters': filters_dict(state.criteria)}
    if extra:
        body.update(extra)
    if summarize is not None:
        body.update(summarize(filter_records(records, state.criteria)))
    return Response(body)


def filters_dict(criteria: Criteria) -> dict:
    rng = criteria.date_range
    return {
        'search': criteria.search,
        **{k: v or ALL for k, v in criteria.categorical.items()},
        'dateFrom': rng.start.date().isoformat() if rng.start else None,
        'dateTo': rng.end.date().isoformat() if rng.end else None,
    }
