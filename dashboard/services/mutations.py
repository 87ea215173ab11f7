"""
Write-through actions against the care backend.

Every action is a single request/response round trip guarded by a
per-(action, target) lock, so a double submit gets a 409 instead of a
second backend call.  On success the affected collections are
invalidated, the user's transient selection is cleared and an audit
event is written.  On failure nothing local changes and the caller gets
the backend's own message when it sent one.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Mapping, Optional

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError

from dashboard.exceptions import MutationFailed, MutationInProgress, SelectionIncomplete
from dashboard.normalizers import normalize_service_user
from dashboard.services import collections, rooms
from dashboard.services.audit import log_action
from dashboard.services.backend import BackendError, CareBackendClient, get_client, error_message
from dashboard.services.selection import clear_selection, load_selection
from dashboard.services.signatures import SIGNATURE_FILES, decode_signature

logger = logging.getLogger(__name__)

TRANSFER_APPROVAL_NOTES = 'Transfer approved - guest moving to new location'
TRANSFER_REJECTION_REASON = 'Transfer request rejected - insufficient documentation provided'
REMOVAL_APPROVAL_NOTES = 'Approved for eviction due to rule violations'
REMOVAL_REJECTION_REASON = 'Request Rejected - insufficient documentation provided'
RESOLUTION_NOTES = 'Issue resolved'
RESOLVED_STATUSES = ('Resolved', 'Closed')
# server-managed room fields that the room editor must not send back
ROOM_READ_ONLY = ('_id', 'currentOccupancy', 'currentKids', 'status')


def _lock_key(action: str, target: str) -> str:
    return f'mutation:{action}:{target}'


@contextmanager
def in_flight(action: str, target: str):
    """Hold the submission lock for one (action, target) pair."""
    key = _lock_key(action, target)
    if not cache.add(key, 1, settings.CARE_MUTATION_LOCK_TTL):
        logger.info('%s on %s already in flight', action, target)
        raise MutationInProgress()
    try:
        yield
    finally:
        cache.delete(key)


def submit(*, user, action: str, target: str, call: Callable[[CareBackendClient], Any],
           invalidates: Iterable[str], fallback: str, object_type: str,
           detail: Optional[Mapping] = None) -> Any:
    """Run one backend call and apply the success effects.

    ``call`` receives the backend client and performs the request.  A
    :class:`BackendError` becomes :class:`MutationFailed`, mirroring the
    backend's 4xx status and 502 for everything else.
    """
    with in_flight(action, target):
        try:
            result = call(get_client())
        except BackendError as exc:
            message = error_message(exc, fallback)
            logger.warning('%s on %s failed: %s', action, target, message)
            code = exc.status_code if exc.status_code and 400 <= exc.status_code < 500 else None
            raise MutationFailed(message, status_code=code or status.HTTP_502_BAD_GATEWAY) from exc

    collections.invalidate(*invalidates)
    if user is not None:
        clear_selection(user)
    log_action(user=user, action=action, object_type=object_type, object_id=target,
               detail=dict(detail or {}))
    logger.info('%s on %s succeeded', action, target)
    return result


# ---------------------------------------------------------------------
# Removal requests
# ---------------------------------------------------------------------
def approve_transfer(user, request_id: str):
    selection = load_selection(user)
    if selection.request_id != request_id or not selection.is_complete:
        raise SelectionIncomplete('Please select a branch, location and room.')
    body = {
        'guestIds': [request_id],
        'targetCompanyId': selection.company_id,
        'targetBranchId': selection.branch_id,
        'targetLocationId': selection.location_id,
        'targetRoomId': selection.room_id,
        'approvalNotes': TRANSFER_APPROVAL_NOTES,
    }
    return submit(
        user=user, action='approve_transfer', target=request_id, object_type='removal',
        call=lambda c: c.post('/su-removal/approve-transfer', json=body),
        invalidates=('in-transit', 'service-users', 'rooms-capacity'),
        fallback='Failed to approve transfer. Please try again.',
        detail={'branchId': selection.branch_id, 'roomId': selection.room_id},
    )


def reject_transfer(user, request_id: str):
    body = {'guestIds': [request_id], 'rejectionReason': TRANSFER_REJECTION_REASON}
    return submit(
        user=user, action='reject_transfer', target=request_id, object_type='removal',
        call=lambda c: c.post('/su-removal/reject-removal', json=body),
        invalidates=('in-transit',),
        fallback='Failed to reject transfer. Please try again.',
    )


def approve_other_removal(user, request_id: str):
    body = {'guestIds': [request_id], 'approvalNotes': REMOVAL_APPROVAL_NOTES}
    return submit(
        user=user, action='approve_removal', target=request_id, object_type='removal',
        call=lambda c: c.post('/su-removal/approve-other-removals', json=body),
        invalidates=('other-removals', 'service-users'),
        fallback='Failed to approve removal request. Please try again.',
    )


def reject_other_removal(user, request_id: str):
    body = {'guestIds': [request_id], 'rejectionReason': REMOVAL_REJECTION_REASON}
    return submit(
        user=user, action='reject_removal', target=request_id, object_type='removal',
        call=lambda c: c.post('/su-removal/reject-other-removals', json=body),
        invalidates=('other-removals',),
        fallback='Failed to reject removal request. Please try again.',
    )


# ---------------------------------------------------------------------
# Incidents
# ---------------------------------------------------------------------
def resolve_incident(user, incident_id: str, new_status: str, notes: Optional[str] = None):
    if new_status not in RESOLVED_STATUSES:
        raise ValidationError({'status': f'Must be one of {", ".join(RESOLVED_STATUSES)}.'})
    body = {'status': new_status, 'resolutionNotes': notes or RESOLUTION_NOTES}
    return submit(
        user=user, action='resolve_incident', target=incident_id, object_type='incident',
        call=lambda c: c.patch(f'/incident/{incident_id}/resolve', json=body),
        invalidates=('incidents',),
        fallback='Failed to update incident status. Please try again.',
        detail={'status': new_status},
    )


# ---------------------------------------------------------------------
# Residents
# ---------------------------------------------------------------------
def find_service_user(guest_id: str):
    for item in collections.load('service-users'):
        record = normalize_service_user(item)
        if record.id == guest_id:
            return record
    raise NotFound('Service user not found.')


def relocation_choices(guest_id: str, location_id: Optional[str] = None) -> dict:
    """Locations of the resident's branch and, for a chosen location, its free rooms."""
    resident = find_service_user(guest_id)
    locations = rooms.branch_locations(rooms.load_locations(), resident.branch_id)
    offered = []
    if location_id:
        offered = rooms.available_rooms(rooms.load_capacity_rooms(resident.branch_id),
                                        location_id, resident.current_room_id)
    return {
        'resident': resident,
        'locations': locations,
        'rooms': offered,
    }


def relocate_resident(user, guest_id: str, location_id: str, room_id: str):
    if not location_id or not room_id:
        raise ValidationError('Please select both location and room.')
    choices = relocation_choices(guest_id, location_id)
    if room_id not in {r.id for r in choices['rooms']}:
        raise ValidationError({'roomId': 'Room is not available in the selected location.'})
    body = {'newLocationId': location_id, 'newRoomId': room_id}
    return submit(
        user=user, action='relocate_resident', target=guest_id, object_type='guest',
        call=lambda c: c.patch(f'/guest/{guest_id}/relocate', json=body),
        invalidates=('service-users', 'rooms-capacity', 'meal-markings'),
        fallback='Failed to relocate guest. Please try again.',
        detail=body,
    )


def save_signature(user, kind: str, data_url: str, guest_id: Optional[str] = None):
    """Upload a signature pad capture as a PNG file."""
    if kind not in SIGNATURE_FILES:
        raise ValidationError({'kind': 'Unknown signature kind.'})
    try:
        png = decode_signature(data_url)
    except ValueError as exc:
        raise ValidationError({'signature': str(exc)}) from exc
    field, filename = SIGNATURE_FILES[kind]
    form = {'guestId': guest_id} if guest_id else None
    target = f'{guest_id or "new"}:{kind}'
    return submit(
        user=user, action='save_signature', target=target, object_type='signature',
        call=lambda c: c.post(settings.CARE_SIGNATURE_PATH, data=form,
                              files={field: (filename, png, 'image/png')}),
        invalidates=('service-users',) if guest_id else (),
        fallback='Failed to save signature. Please try again.',
        detail={'kind': kind, 'bytes': len(png)},
    )


# ---------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------
def room_payload(changes: Mapping) -> dict:
    return {k: v for k, v in changes.items() if k not in ROOM_READ_ONLY}


def update_room(user, room_id: str, changes: Mapping):
    body = room_payload(changes)
    if not body:
        raise ValidationError('Nothing to update.')
    return submit(
        user=user, action='update_room', target=room_id, object_type='room',
        call=lambda c: c.patch(f'/room/{room_id}', json=body),
        invalidates=('companies', 'rooms-capacity'),
        fallback='Failed to update room. Please try again.',
        detail={'fields': sorted(body)},
    )
