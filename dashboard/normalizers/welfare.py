from __future__ import annotations

from typing import Any

from dashboard.records import WelfareCheck
from dashboard.services.payload import asset_url, dig, latest_entry, text, to_datetime


def normalize_welfare_check(item: Any) -> WelfareCheck:
    """Welfare check document -> table row built from its latest weekly entry."""
    latest = latest_entry(dig(item, 'details'))
    return WelfareCheck(
        id=text(dig(item, '_id'), ''),
        created_at=to_datetime(dig(item, 'createdAt')),
        resident_name=text(dig(item, 'guestId', 'userId', 'fullName'), ''),
        port_number=text(dig(item, 'guestId', 'userId', 'portNumber')),
        checked_by=text(dig(item, 'staffId', 'fullName')),
        week_start=to_datetime(dig(latest, 'weekStartDate')),
        week_end=to_datetime(dig(latest, 'weekEndDate')),
        physical_health=text(dig(latest, 'physicalHealth', 'status')),
        mental_health=text(dig(latest, 'mentalHealth', 'status')),
        emotional_wellbeing=text(dig(latest, 'emotionalWellbeing', 'status')),
        social_support=text(dig(latest, 'socialSupport', 'status')),
        overall_assessment=text(dig(latest, 'overallAssessment')),
        status=text(dig(latest, 'status')),
        notes=text(dig(latest, 'notes'), 'No comments'),
        snapshot_url=asset_url(dig(latest, 'images')),
    )
