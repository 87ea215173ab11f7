from __future__ import annotations

from typing import Any

from dashboard.records import RemovalRequest
from dashboard.services.payload import asset_url, dig, ident, text, title_words, to_datetime

PENDING = 'pending'


def normalize_removal(item: Any) -> RemovalRequest:
    """Removal request (transfer or other removal) -> table row.

    ``id`` is the request document id, which is what the approve and
    reject actions send as ``guestIds``.
    """
    status = text(dig(item, 'removalStatus'))
    attachment = text(dig(item, 'removalAttachmentFile', 'viewUrl'))
    return RemovalRequest(
        id=text(dig(item, '_id'), ''),
        created_at=to_datetime(dig(item, 'createdAt')),
        guest_id=ident(dig(item, 'guestId')),
        full_name=text(dig(item, 'guestId', 'userId', 'fullName'), ''),
        phone=text(dig(item, 'guestId', 'userId', 'phoneNumber'), 'No Phone Number Provided'),
        email=text(dig(item, 'guestId', 'userId', 'emailAddress'), ''),
        room_number=text(dig(item, 'guestId', 'familyRooms', 0, 'roomId', 'roomNumber')),
        location_name=text(dig(item, 'guestId', 'familyRooms', 0, 'locationId', 'name')),
        branch=text(dig(item, 'branchId', 'name')),
        branch_id=ident(dig(item, 'branchId')),
        company_id=ident(dig(item, 'companyId')),
        reason=text(dig(item, 'guestId', 'removal', 'reason'), 'N/A'),
        status=status,
        status_label=title_words(status),
        attachment_url=asset_url(attachment) if attachment else None,
        is_pending=status == PENDING,
    )
