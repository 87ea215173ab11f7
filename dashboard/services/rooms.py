"""
Choices offered when relocating a resident or approving a transfer.
"""
from __future__ import annotations

from typing import Iterable, Optional

from dashboard.normalizers import normalize_branch, normalize_capacity_room, normalize_location
from dashboard.records import Branch, CapacityRoom, Location
from dashboard.services import collections

# the capacity endpoint is asked for rooms with space for one adult
CAPACITY_QUERY = {'capacity': 1, 'kids': 0}


def branch_locations(locations: Iterable[Location], branch_id: Optional[str]) -> list[Location]:
    if not branch_id:
        return []
    return [loc for loc in locations if loc.branch_id == branch_id]


def available_rooms(rooms: Iterable[CapacityRoom], location_id: Optional[str],
                    current_room_id: Optional[str] = None) -> list[CapacityRoom]:
    """Rooms of one location, without the resident's current room."""
    if not location_id:
        return []
    picked = [r for r in rooms if str(r.location_id) == str(location_id)]
    if current_room_id:
        picked = [r for r in picked if str(r.id) != str(current_room_id)]
    return picked


def transfer_branches(branches: Iterable[Branch], current_branch_id: Optional[str]) -> list[Branch]:
    return [b for b in branches if b.id != current_branch_id]


def load_locations() -> list[Location]:
    return [normalize_location(i) for i in collections.load('locations')]


def load_capacity_rooms(branch_id: Optional[str]) -> list[CapacityRoom]:
    if not branch_id:
        return []
    items = collections.load('rooms-capacity', params={**CAPACITY_QUERY, 'branchId': branch_id})
    return [normalize_capacity_room(i) for i in items]


def load_company_branches(company_id: Optional[str]) -> list[Branch]:
    if not company_id:
        return []
    items = collections.load('branches', params={'companyId': company_id})
    return [normalize_branch(i) for i in items]
