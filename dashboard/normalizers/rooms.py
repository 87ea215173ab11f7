from __future__ import annotations

from typing import Any

from dashboard.records import Branch, CapacityRoom, Company, Location
from dashboard.services.payload import as_list, dig, ident, number, text


def normalize_capacity_room(item: Any) -> CapacityRoom:
    return CapacityRoom(
        id=ident(dig(item, 'id')) or ident(item) or '',
        room_number=text(dig(item, 'roomNumber'), ''),
        capacity=number(dig(item, 'capacity'), 0),
        current_occupancy=number(dig(item, 'currentOccupancy'), 0),
        total_available_space=number(dig(item, 'totalAvailableSpace'), 0),
        location_id=ident(dig(item, 'locationId')),
        location=text(dig(item, 'location'), ''),
        branch=text(dig(item, 'branch'), ''),
        status=text(dig(item, 'status'), ''),
        room_type=text(dig(item, 'roomType'), 'N/A'),
        amenities=[a.strip() for a in as_list(dig(item, 'amenities')) if isinstance(a, str) and a.strip()],
        recommended_for=text(dig(item, 'recommendedFor'), ''),
        special_note=text(dig(item, 'specialNote'), ''),
    )


def normalize_location(item: Any) -> Location:
    # branchId is either a plain id or a populated branch object
    return Location(
        id=ident(item) or '',
        name=text(dig(item, 'name'), ''),
        branch_id=ident(dig(item, 'branchId')),
    )


def normalize_branch(item: Any) -> Branch:
    return Branch(
        id=ident(item) or '',
        name=text(dig(item, 'name'), ''),
        address=text(dig(item, 'address'), ''),
    )


def normalize_company(item: Any) -> Company:
    return Company(
        id=ident(item) or '',
        name=text(dig(item, 'name'), ''),
        branches=[normalize_branch(b) for b in as_list(dig(item, 'branches'))],
    )
