"""
Cached remote collections.

Each dashboard table reads one care backend collection.  Fetched item
lists are kept in the Django cache under a key that includes the
collection's generation number; invalidating a collection bumps the
generation, so the next read fetches again.  A fetch that was started
before an invalidation does not store its result, which makes the most
recently started fetch the only one that can populate the cache.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlencode

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from dashboard.exceptions import BackendUnavailable
from dashboard.services.backend import BackendError, CareBackendClient, get_client, unwrap_collection

logger = logging.getLogger(__name__)

UPDATES_GROUP = 'updates'


@dataclass(frozen=True)
class Collection:
    name: str
    path: str
    # wrapping key when the backend does not use data/results
    envelope: Optional[str] = None


COLLECTIONS: dict[str, Collection] = {c.name: c for c in [
    Collection('meal-markings', '/meal-marking'),
    Collection('welfare-checks', '/welfare-check'),
    Collection('incidents', '/incident'),
    Collection('service-users', '/guest'),
    Collection('in-transit', '/su-removal/in-transit'),
    Collection('other-removals', '/su-removal/other-removals'),
    Collection('baskets', '/su-basket'),
    Collection('companies', '/company'),
    Collection('branches', '/branch/list/by-company', envelope='branches'),
    Collection('locations', '/location'),
    Collection('rooms-capacity', '/guest/rooms/capacity'),
]}


def _generation_key(name: str) -> str:
    return f'collection:{name}:gen'


def generation(name: str) -> int:
    return cache.get(_generation_key(name)) or 0


def _cache_key(name: str, gen: int, params: Optional[Mapping]) -> str:
    query = urlencode(sorted((params or {}).items()))
    return f'collection:{name}:g={gen}:{query}'


def load(name: str, *, params: Optional[Mapping] = None, client: Optional[CareBackendClient] = None) -> list:
    """Return the raw item list of a collection, fetching on a cache miss.

    Raises :class:`BackendUnavailable` when the fetch fails; nothing is
    cached in that case.
    """
    collection = COLLECTIONS[name]
    gen = generation(name)
    key = _cache_key(name, gen, params)
    cached = cache.get(key)
    if cached is not None:
        return cached
    client = client or get_client()
    try:
        payload = client.get(collection.path, params=dict(params) if params else None)
    except BackendError as exc:
        logger.warning('fetching %s failed: %s', name, exc)
        raise BackendUnavailable() from exc
    if collection.envelope and isinstance(payload, Mapping) and collection.envelope in payload:
        payload = payload[collection.envelope]
    items = unwrap_collection(payload)
    if generation(name) == gen:
        cache.set(key, items, settings.CARE_COLLECTION_TTL)
    else:
        logger.info('discarding superseded fetch of %s (generation %s)', name, gen)
    return items


def invalidate(*names: str) -> None:
    for name in names:
        key = _generation_key(name)
        if not cache.add(key, 1, None):
            try:
                cache.incr(key)
            except ValueError:
                # evicted between add and incr
                cache.set(key, 1, None)
    if names:
        notify_refresh(names)


def notify_refresh(names) -> None:
    """Tell connected dashboards which collections to re-fetch."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    now = timezone.now()
    event = {
        'type': 'broadcast.refresh',
        'version': int(now.timestamp()),
        'ts': now.isoformat(),
        'keys': list(names),
    }
    async_to_sync(channel_layer.group_send)(UPDATES_GROUP, event)
