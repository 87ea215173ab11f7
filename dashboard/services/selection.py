"""
Transient selection state for the transfer approval wizard.

Approving a transfer is a three step choice: the target company (fixed
to the request's company), a branch other than the resident's current
one, then a room, which also fixes the location.  The choice is held
per user in the cache until the approval succeeds or is cancelled.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Optional

from django.core.cache import cache

from dashboard.normalizers import normalize_removal
from dashboard.services import collections, rooms

SELECTION_TTL = 60 * 60


@dataclass(frozen=True)
class TransferSelection:
    request_id: Optional[str] = None
    current_branch_id: Optional[str] = None
    company_id: Optional[str] = None
    branch_id: Optional[str] = None
    location_id: Optional[str] = None
    room_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self == TransferSelection()

    @property
    def is_complete(self) -> bool:
        return all([self.request_id, self.company_id, self.branch_id, self.location_id, self.room_id])

    def start(self, request_id: str, company_id: Optional[str], current_branch_id: Optional[str]) -> 'TransferSelection':
        if request_id == self.request_id and company_id == self.company_id:
            return self
        return TransferSelection(request_id=request_id, company_id=company_id,
                                 current_branch_id=current_branch_id)

    def choose_branch(self, branch_id: str) -> 'TransferSelection':
        if branch_id and branch_id == self.current_branch_id:
            raise ValueError('Choose a branch other than the current one.')
        if branch_id == self.branch_id:
            return self
        return replace(self, branch_id=branch_id, location_id=None, room_id=None)

    def choose_room(self, room_id: str, location_id: Optional[str]) -> 'TransferSelection':
        if not self.branch_id:
            raise ValueError('Choose a branch before choosing a room.')
        return replace(self, room_id=room_id, location_id=location_id)

    def to_dict(self) -> dict:
        return {
            'requestId': self.request_id,
            'currentBranchId': self.current_branch_id,
            'companyId': self.company_id,
            'branchId': self.branch_id,
            'locationId': self.location_id,
            'roomId': self.room_id,
            'complete': self.is_complete,
        }


def _key(user) -> str:
    return f'selection:transfer:{user.pk}'


def load_selection(user) -> TransferSelection:
    raw = cache.get(_key(user))
    return TransferSelection(**raw) if isinstance(raw, dict) else TransferSelection()


def save_selection(user, selection: TransferSelection) -> TransferSelection:
    cache.set(_key(user), asdict(selection), SELECTION_TTL)
    return selection


def clear_selection(user) -> TransferSelection:
    cache.delete(_key(user))
    return TransferSelection()


def find_transfer_request(request_id: str):
    for item in collections.load('in-transit'):
        record = normalize_removal(item)
        if record.id == request_id:
            return record
    return None


def select_transfer(user, request_id: str, *, branch_id: Optional[str] = None,
                    room_id: Optional[str] = None) -> tuple[TransferSelection, dict]:
    """Advance the wizard for one request and return the next choices.

    Raises ``LookupError`` for an unknown request and ``ValueError`` for
    a branch or room that is not on offer.
    """
    request = find_transfer_request(request_id)
    if request is None:
        raise LookupError('Transfer request not found.')
    selection = load_selection(user).start(request.id, request.company_id, request.branch_id)
    branches = rooms.transfer_branches(rooms.load_company_branches(request.company_id),
                                       request.branch_id)
    if branch_id:
        if branch_id not in {b.id for b in branches}:
            selection.choose_branch(branch_id)  # raises for the current branch
            raise ValueError('Branch is not part of this company.')
        selection = selection.choose_branch(branch_id)
    offered = rooms.load_capacity_rooms(selection.branch_id)
    if room_id:
        room = next((r for r in offered if r.id == room_id), None)
        if room is None:
            raise ValueError('Room is not available in the selected branch.')
        selection = selection.choose_room(room.id, room.location_id)
    save_selection(user, selection)
    return selection, {'branches': branches, 'rooms': offered}
