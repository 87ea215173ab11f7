"""
Display records: flat, UI-ready projections of care backend entities.

A record is rebuilt from the backend payload on every fetch and never
stored.  Each record class declares which of its fields take part in
free-text search, which fields answer the categorical filters (branch,
company, status, ...) and, for the case-insensitive ones, which filters
compare case-folded.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from typing import Any, ClassVar, Optional


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(p[:1].upper() + p[1:] for p in rest)


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


@dataclass
class Serializable:
    def to_dict(self) -> dict:
        return {_camel(f.name): _jsonable(getattr(self, f.name)) for f in fields(self)}


@dataclass
class DisplayRecord(Serializable):
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ()
    # filter name -> attribute holding the record's value
    CATEGORY_FIELDS: ClassVar[dict[str, str]] = {}
    FOLDED: ClassVar[frozenset[str]] = frozenset()

    id: str = ''
    created_at: Optional[datetime] = None

    def search_text(self) -> tuple[str, ...]:
        return tuple(getattr(self, f) or '' for f in self.SEARCH_FIELDS)

    def categories(self) -> dict[str, Optional[str]]:
        return {name: getattr(self, attr) for name, attr in self.CATEGORY_FIELDS.items()}

    def period(self) -> tuple[Optional[datetime], Optional[datetime]]:
        """Interval used by date-range filters; a timestamp is ``[t, t]``."""
        return self.created_at, self.created_at


# ---------------------------------------------------------------------
# Meals
# ---------------------------------------------------------------------
@dataclass
class MealInfo(Serializable):
    marked: bool = False
    time: Optional[str] = None
    staff: Optional[str] = None
    reason_if_not_taken: Optional[str] = None
    notes: Optional[str] = None
    marked_at: Optional[str] = None
    is_editable: bool = True

    @property
    def status(self) -> str:
        if self.marked:
            return 'delivered'
        if not self.is_editable:
            return 'not_taken'
        return 'pending'

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['status'] = self.status
        return data


@dataclass
class MealSet(Serializable):
    breakfast: MealInfo = field(default_factory=MealInfo)
    lunch: MealInfo = field(default_factory=MealInfo)
    dinner: MealInfo = field(default_factory=MealInfo)

    def all(self) -> tuple[MealInfo, MealInfo, MealInfo]:
        return self.breakfast, self.lunch, self.dinner


@dataclass
class MealResident(DisplayRecord):
    SEARCH_FIELDS = ('name',)
    CATEGORY_FIELDS = {'branch': 'branch_id'}

    name: str = ''
    port_number: Optional[str] = None
    room: Optional[str] = None
    branch: Optional[str] = None
    branch_id: Optional[str] = None
    meals: MealSet = field(default_factory=MealSet)
    total_meals_taken: int = 0
    meal_date: Optional[str] = None
    last_meal: str = 'None'
    marking_id: Optional[str] = None


# ---------------------------------------------------------------------
# Welfare checks
# ---------------------------------------------------------------------
@dataclass
class WelfareCheck(DisplayRecord):
    SEARCH_FIELDS = ('resident_name',)
    CATEGORY_FIELDS = {'status': 'status'}
    FOLDED = frozenset({'status'})

    resident_name: str = ''
    port_number: Optional[str] = None
    checked_by: Optional[str] = None
    week_start: Optional[datetime] = None
    week_end: Optional[datetime] = None
    physical_health: Optional[str] = None
    mental_health: Optional[str] = None
    emotional_wellbeing: Optional[str] = None
    social_support: Optional[str] = None
    overall_assessment: Optional[str] = None
    status: Optional[str] = None
    notes: str = 'No comments'
    snapshot_url: Optional[str] = None

    def period(self):
        return self.week_start, self.week_end


# ---------------------------------------------------------------------
# Incidents
# ---------------------------------------------------------------------
@dataclass
class Incident(DisplayRecord):
    SEARCH_FIELDS = ('resident_involved', 'title', 'description')
    CATEGORY_FIELDS = {'status': 'status', 'severity': 'severity', 'branch': 'branch'}
    FOLDED = frozenset({'status', 'severity'})

    title: str = ''
    description: str = ''
    severity: Optional[str] = None
    status: Optional[str] = None
    editable_status: Optional[str] = None
    reported_by: Optional[str] = None
    assigned_to: Optional[str] = None
    branch: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    resident_involved: Optional[str] = None
    port_number: Optional[str] = None
    date_reported: Optional[str] = None
    time_reported: Optional[str] = None
    date_resolved: Optional[str] = None
    time_resolved: Optional[str] = None
    evidence_url: Optional[str] = None
    actions_taken: str = ''


# ---------------------------------------------------------------------
# Service users
# ---------------------------------------------------------------------
@dataclass
class ServiceUser(DisplayRecord):
    SEARCH_FIELDS = ('full_name', 'port_number', 'email')
    CATEGORY_FIELDS = {'branch': 'branch_id', 'company': 'company_id', 'status': 'status'}
    FOLDED = frozenset({'status'})

    full_name: str = ''
    port_number: str = ''
    email: str = ''
    phone: str = ''
    dependants: list = field(default_factory=list)
    is_primary: bool = False
    medic_full_name: str = ''
    medic_phone: str = ''
    medic_email: str = ''
    medic_status: str = ''
    dentist_full_name: str = ''
    dentist_phone: str = ''
    dentist_email: str = ''
    dentist_status: str = ''
    branch: str = ''
    branch_id: Optional[str] = None
    location: str = ''
    company: str = ''
    company_id: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: str = ''
    nationality: str = ''
    languages: list = field(default_factory=list)
    case_worker: str = ''
    room: str = ''
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None
    status: Optional[str] = None
    current_location_id: Optional[str] = None
    current_room_id: Optional[str] = None


# ---------------------------------------------------------------------
# Removal requests (in-transit transfers and other removals)
# ---------------------------------------------------------------------
@dataclass
class RemovalRequest(DisplayRecord):
    SEARCH_FIELDS = ('full_name', 'email', 'phone')
    CATEGORY_FIELDS = {'status': 'status', 'branch': 'branch_id'}
    FOLDED = frozenset({'status'})

    guest_id: Optional[str] = None
    full_name: str = ''
    phone: str = 'No Phone Number Provided'
    email: str = ''
    room_number: Optional[str] = None
    location_name: Optional[str] = None
    branch: Optional[str] = None
    branch_id: Optional[str] = None
    company_id: Optional[str] = None
    reason: str = 'N/A'
    status: Optional[str] = None
    status_label: Optional[str] = None
    attachment_url: Optional[str] = None
    is_pending: bool = False


# ---------------------------------------------------------------------
# Baskets
# ---------------------------------------------------------------------
@dataclass
class BasketItem(Serializable):
    item_name: str = ''
    status: Optional[str] = None
    proof_url: Optional[str] = None


@dataclass
class Basket(DisplayRecord):
    SEARCH_FIELDS = ('resident_name', 'notes')
    CATEGORY_FIELDS = {'branch': 'branch', 'status': 'status'}

    resident_name: str = ''
    port_number: Optional[str] = None
    branch: str = 'Not Assigned'
    status: str = ''
    status_label: str = ''
    notes: str = ''
    items: list[BasketItem] = field(default_factory=list)
    item_count: int = 0
    delivered_items: int = 0
    total_items: int = 0
    completion_percent: int = 0
    staff: str = 'Not Assigned'


# ---------------------------------------------------------------------
# Choices for relocation and transfer approval
# ---------------------------------------------------------------------
@dataclass
class CapacityRoom(Serializable):
    id: str = ''
    room_number: str = ''
    capacity: int = 0
    current_occupancy: int = 0
    total_available_space: int = 0
    location_id: Optional[str] = None
    location: str = ''
    branch: str = ''
    status: str = ''
    room_type: str = 'N/A'
    amenities: list[str] = field(default_factory=list)
    recommended_for: str = ''
    special_note: str = ''


@dataclass
class Location(Serializable):
    id: str = ''
    name: str = ''
    branch_id: Optional[str] = None


@dataclass
class Branch(Serializable):
    id: str = ''
    name: str = ''
    address: str = ''


@dataclass
class Company(Serializable):
    id: str = ''
    name: str = ''
    branches: list[Branch] = field(default_factory=list)
