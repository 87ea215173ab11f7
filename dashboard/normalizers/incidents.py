from __future__ import annotations

from typing import Any, Optional

from dashboard.records import Incident
from dashboard.services.payload import asset_url, dig, first_text, text, to_datetime


def editable_status(status: Optional[str]) -> Optional[str]:
    """``RESOLVED`` / ``resolved`` -> ``Resolved``, the form the editor offers."""
    if not status:
        return status
    return status[:1].upper() + status[1:].lower()


def _date_time(value: Any) -> tuple[Optional[str], Optional[str]]:
    dt = to_datetime(value)
    if dt is None:
        return None, None
    return dt.strftime('%d %b %Y'), dt.strftime('%H:%M')


def normalize_incident(item: Any) -> Incident:
    created = to_datetime(dig(item, 'createdAt'))
    date_reported, time_reported = _date_time(dig(item, 'dateReported') or dig(item, 'createdAt'))
    date_resolved, time_resolved = _date_time(dig(item, 'resolvedAt'))
    evidence = dig(item, 'evidence')
    status = text(dig(item, 'status'))
    return Incident(
        id=text(dig(item, '_id'), ''),
        created_at=created,
        title=text(dig(item, 'title'), ''),
        description=text(dig(item, 'description'), ''),
        severity=text(dig(item, 'severity')),
        status=status,
        editable_status=editable_status(status),
        reported_by=first_text(dig(item, 'reportedBy', 'fullName'), dig(item, 'staffId', 'fullName')),
        assigned_to=text(dig(item, 'assignedTo', 'fullName')),
        branch=text(dig(item, 'branchId', 'name')),
        location=first_text(dig(item, 'locationId', 'name'), dig(item, 'location')),
        type=first_text(dig(item, 'incidentType'), dig(item, 'type')),
        category=first_text(dig(item, 'category'), dig(item, 'incidentType')),
        resident_involved=text(dig(item, 'guestId', 'userId', 'fullName')),
        port_number=text(dig(item, 'guestId', 'userId', 'portNumber')),
        date_reported=date_reported,
        time_reported=time_reported,
        date_resolved=date_resolved,
        time_resolved=time_resolved,
        evidence_url=asset_url(evidence) if evidence else None,
        actions_taken=text(dig(item, 'actionsTaken'), ''),
    )
