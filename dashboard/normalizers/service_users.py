from __future__ import annotations

from typing import Any

from dashboard.records import ServiceUser
from dashboard.services.payload import as_list, dig, first_text, ident, pick, text, to_datetime


def _display_date(value: Any):
    dt = to_datetime(value)
    return dt.date().isoformat() if dt else None


def _current_placement(item: Any) -> tuple:
    """(location id, room id) of the resident's current room.

    Assigned rooms take precedence over family rooms; each reference may
    be a plain id or a populated object.
    """
    assigned = pick(dig(item, 'assignedRooms'))
    family = pick(dig(item, 'familyRooms'))
    location_id = (
        ident(dig(assigned, 'locationId'))
        or ident(dig(assigned, 'location'))
        or ident(dig(family, 'locationId'))
    )
    room_id = (
        text(dig(assigned, '_id'))
        or ident(dig(assigned, 'roomId'))
        or ident(dig(family, 'roomId'))
    )
    return location_id, room_id


def normalize_service_user(guest: Any) -> ServiceUser:
    is_primary = bool(dig(guest, 'family', 'isPrimary', default=False))
    language = text(dig(guest, 'profile', 'language'))
    location_id, room_id = _current_placement(guest)
    return ServiceUser(
        id=text(dig(guest, '_id'), ''),
        created_at=to_datetime(dig(guest, 'createdAt')),
        full_name=text(dig(guest, 'user', 'fullName'), ''),
        port_number=first_text(dig(guest, 'portNumber'), dig(guest, 'user', 'portNumber')) or '',
        email=text(dig(guest, 'user', 'emailAddress'), ''),
        phone=text(dig(guest, 'user', 'phoneNumber'), ''),
        dependants=as_list(dig(guest, 'family', 'dependants')) if is_primary else [],
        is_primary=is_primary,
        medic_full_name=text(dig(guest, 'medic', 'name'), ''),
        medic_phone=text(dig(guest, 'medic', 'phoneNumber'), ''),
        medic_email=text(dig(guest, 'medic', 'emailAddress'), ''),
        medic_status=text(dig(guest, 'medic', 'status'), ''),
        dentist_full_name=text(dig(guest, 'dentist', 'name'), ''),
        dentist_phone=text(dig(guest, 'dentist', 'phoneNumber'), ''),
        dentist_email=text(dig(guest, 'dentist', 'emailAddress'), ''),
        dentist_status=text(dig(guest, 'dentist', 'status'), ''),
        branch=text(dig(guest, 'branch', 'name'), ''),
        branch_id=ident(dig(guest, 'branch')),
        location=text(dig(guest, 'branch', 'address'), ''),
        company=text(dig(guest, 'branch', 'company', 'name'), ''),
        company_id=ident(dig(guest, 'branch', 'company')),
        date_of_birth=_display_date(dig(guest, 'profile', 'dateOfBirth')),
        gender=text(dig(guest, 'profile', 'gender'), ''),
        nationality=text(dig(guest, 'profile', 'nationality'), ''),
        languages=[language] if language else [],
        case_worker=text(dig(guest, 'caseWorker', 'fullName'), ''),
        room=text(dig(guest, 'assignedRooms', 0, 'roomNumber'), ''),
        check_in_date=_display_date(dig(guest, 'checkInDate')),
        check_out_date=_display_date(dig(guest, 'checkOutDate')),
        status=text(dig(guest, 'status')),
        current_location_id=location_id,
        current_room_id=room_id,
    )
